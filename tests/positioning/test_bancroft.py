#!/usr/bin/env python3
"""Test suite for the Bancroft closed-form solution"""

import unittest

import numpy as np
import pytest

from pyddkf.core.constants import CLIGHT
from pyddkf.core.exceptions import DegenerateGeometryError
from pyddkf.coordinate.rotation import earth_rotation_correction
from pyddkf.positioning.bancroft import (
    N_ITER, bancroft, bancroft_candidates, bancroft_position, candidate_residuals, lorentz,
    rotate_rows,
)
from pyddkf.satellite.ephemeris import compute_satellite_position


def transmission_geometry(scenario, rx, sats, clock_bias=0.0):
    """Unrotated satellite positions at transmission and pseudoranges with a receiver clock bias"""
    XS, pr = [], []
    for eph in scenario.eph:
        if eph.sat not in sats:
            continue
        tau = 0.075
        for _ in range(10):
            xs = compute_satellite_position(eph, scenario.t0 - tau)
            tau = np.linalg.norm(earth_rotation_correction(tau, xs) - rx) / CLIGHT
        XS.append(compute_satellite_position(eph, scenario.t0 - tau))
        pr.append(CLIGHT * tau + clock_bias)
    return np.array(XS), np.array(pr)


def final_candidates(matB):
    """Both candidates of the last Bancroft iteration and their residual sums"""
    pos = np.zeros(4)
    for iteration in range(N_ITER):
        B = rotate_rows(matB, pos, first=(iteration == 0))
        candidates = bancroft_candidates(B)
        scores = candidate_residuals(B, candidates)
        pos = candidates[np.argmin(scores)]
    return candidates, scores


def candidate_root(candidate):
    """Root of the Bancroft quadratic that produced a candidate"""
    return lorentz(candidate, candidate) / 2.0


class TestLorentz(unittest.TestCase):

    def test_inner_product(self):
        """Test the Lorentz inner product of two 4-vectors"""
        u = np.array([1.0, 2.0, 3.0, 4.0])
        v = np.array([2.0, 1.0, 1.0, 1.0])
        self.assertEqual(lorentz(u, v), 2.0 + 2.0 + 3.0 - 4.0)

    def test_light_like_vector(self):
        """Test that a light-like vector has zero Lorentz norm"""
        self.assertEqual(lorentz(np.array([3.0, 4.0, 0.0, 5.0]), np.array([3.0, 4.0, 0.0, 5.0])), 0.0)


@pytest.mark.usefixtures("scenario_class")
class TestBancroft(unittest.TestCase):

    def test_recovers_position_and_clock(self):
        """Test position and clock bias recovery from exact pseudoranges"""
        rx = self.scenario.rover
        clock_bias = 3.0e4
        XS, pr = transmission_geometry(self.scenario, rx, {1, 2, 3, 4, 5}, clock_bias)

        pos = bancroft(np.column_stack([XS, pr]))
        np.testing.assert_allclose(pos[:3], rx, atol=0.05)
        self.assertAlmostEqual(pos[3], clock_bias, delta=0.05)

    def test_four_satellites(self):
        """Test the exactly determined case with four satellites"""
        rx = self.scenario.master
        XS, pr = transmission_geometry(self.scenario, rx, {1, 2, 3, 6})
        pos = bancroft(np.column_stack([XS, pr]))
        np.testing.assert_allclose(pos[:3], rx, atol=0.05)

    def test_position_wrapper_with_satellite_clocks(self):
        """Test the receiver wrapper with satellite clock offsets"""
        rx = self.scenario.rover
        XS, pr = transmission_geometry(self.scenario, rx, {1, 2, 3, 4, 5}, clock_bias=CLIGHT * 1e-4)
        dtS = np.array([1e-5, -2e-5, 3e-6, 0.0, 4e-5])

        XR, dtR = bancroft_position(XS, dtS, pr - CLIGHT * dtS)
        np.testing.assert_allclose(XR, rx, atol=0.05)
        self.assertAlmostEqual(dtR, 1e-4, delta=1e-9)

    def test_noisy_ranges_select_smallest_residual(self):
        """Test that the final iteration keeps the candidate with the smallest residual sum"""
        rx = self.scenario.rover
        XS, pr = transmission_geometry(self.scenario, rx, {1, 2, 3, 4, 5}, clock_bias=1.5e3)
        rng = np.random.default_rng(2024)

        for _ in range(5):
            matB = np.column_stack([XS, pr + rng.normal(0.0, 3.0, pr.size)])
            candidates, scores = final_candidates(matB)

            self.assertEqual(candidates.shape, (2, 4))
            self.assertLess(np.min(scores), np.max(scores))
            np.testing.assert_array_equal(bancroft(matB), candidates[np.argmin(scores)])
            np.testing.assert_allclose(bancroft(matB)[:3], rx, atol=100.0)

    def test_selection_does_not_follow_smallest_root(self):
        """Test that the smallest residual wins even when it comes from the larger root"""
        rx = self.scenario.rover
        XS, pr = transmission_geometry(self.scenario, rx, {1, 2, 3, 4, 5})
        candidates, scores = final_candidates(np.column_stack([XS, pr]))
        chosen = np.argmin(scores)
        # shifting every range moves both clock terms and leaves both positions;
        # a large shift against the clock gap makes the true root the larger one
        gap = candidates[1 - chosen, 3] - candidates[chosen, 3]
        rng = np.random.default_rng(7)

        larger_root_kept = []
        for shift in (1e8, 1e9):
            noisy = pr - np.sign(gap) * shift + rng.normal(0.0, 0.3, pr.size)
            matB = np.column_stack([XS, noisy])
            candidates, scores = final_candidates(matB)
            pos = bancroft(matB)

            np.testing.assert_array_equal(pos, candidates[np.argmin(scores)])
            np.testing.assert_allclose(pos[:3], rx, atol=10.0)
            roots = np.abs([candidate_root(c) for c in candidates])
            larger_root_kept.append(np.argmin(scores) != np.argmin(roots))

        self.assertTrue(any(larger_root_kept))


class TestBancroftErrors(unittest.TestCase):

    def test_too_few_rows(self):
        """Test rejection of fewer than four satellites"""
        with self.assertRaises(ValueError):
            bancroft(np.ones((3, 4)))

    def test_wrong_shape(self):
        """Test rejection of a matrix without four columns"""
        with self.assertRaises(ValueError):
            bancroft(np.ones((5, 3)))

    def test_rank_deficient(self):
        """Test that a rank deficient Bancroft matrix is degenerate"""
        row = np.array([15600e3, 7540e3, 20140e3, 2.1e7])
        matB = np.vstack([row, row, row * 1.0001, row * 0.9999])
        with self.assertRaises(DegenerateGeometryError):
            bancroft(matB)

    def test_degenerate_error_is_linalg_error(self):
        """Test that degenerate geometry is a numpy LinAlgError"""
        self.assertTrue(issubclass(DegenerateGeometryError, np.linalg.LinAlgError))


if __name__ == '__main__':
    unittest.main()
