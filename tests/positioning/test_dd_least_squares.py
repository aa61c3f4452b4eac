#!/usr/bin/env python3
"""Test suite for code double-difference least squares and DOP"""

import unittest
from unittest import mock

import numpy as np
import pytest

from pyddkf.core.exceptions import DegenerateGeometryError
from pyddkf.coordinate.transforms import global2local_cov, llh2ecef, local2global_cov
from pyddkf.positioning.code_double_diff import code_double_diff, dd_covariance, snr_weight
from pyddkf.positioning.dop import filter_dop, geometry_dop


def solve(scenario, sats, pivot=1, offset=(30.0, -20.0, 15.0), **kwargs):
    epoch = scenario.epoch(sats)
    idx = np.array(sorted(sats)) - 1
    return code_double_diff(scenario.rover + np.array(offset),
                            epoch.pr1_R[idx], epoch.snr_R[idx],
                            epoch.pos_M, epoch.pr1_M[idx], epoch.snr_M[idx],
                            epoch.time, idx + 1, pivot, epoch.eph, epoch.iono, **kwargs)


@pytest.mark.usefixtures("scenario_class")
class TestCodeDoubleDiff(unittest.TestCase):

    def test_converges_to_rover(self):
        """Test convergence to the rover position from a biased start"""
        sol = solve(self.scenario, {1, 2, 3, 4, 5})
        np.testing.assert_allclose(sol.position, self.scenario.rover, atol=0.01)
        self.assertGreater(sol.n_iter, 1)
        self.assertLessEqual(sol.n_iter, 10)

    def test_covariance_only_with_redundancy(self):
        """Test that the covariance needs more than three double differences"""
        sol4 = solve(self.scenario, {1, 2, 3, 5})
        self.assertIsNone(sol4.covariance)
        np.testing.assert_allclose(sol4.position, self.scenario.rover, atol=0.01)

        sol5 = solve(self.scenario, {1, 2, 3, 4, 5})
        self.assertEqual(sol5.covariance.shape, (3, 3))
        np.testing.assert_allclose(sol5.covariance, sol5.covariance.T, atol=1e-12)
        self.assertTrue(np.all(np.diag(sol5.covariance) >= 0.0))

    def test_pivot_choice_does_not_change_solution(self):
        """Test that the solution does not depend on the pivot"""
        sol1 = solve(self.scenario, {1, 2, 3, 4, 5}, pivot=1)
        sol3 = solve(self.scenario, {1, 2, 3, 4, 5}, pivot=3)
        np.testing.assert_allclose(sol1.position, sol3.position, atol=0.01)

    def test_weighting_modes(self):
        """Test every weighting mode on exact observations"""
        for weighting in ('same', 'elevation', 'snr'):
            sol = solve(self.scenario, {1, 2, 3, 4, 5}, weighting=weighting)
            np.testing.assert_allclose(sol.position, self.scenario.rover, atol=0.01)

    def test_dop_positive_and_grows_when_satellites_are_removed(self):
        """Test DOP positivity and growth with fewer satellites"""
        dop6 = solve(self.scenario, {1, 2, 3, 4, 5, 6}).dop
        dop5 = solve(self.scenario, {1, 2, 3, 4, 5}).dop
        dop4 = solve(self.scenario, {1, 2, 3, 5}).dop
        for dop in (dop4, dop5, dop6):
            self.assertGreater(dop.pdop, 0.0)
            self.assertGreater(dop.hdop, 0.0)
            self.assertGreater(dop.vdop, 0.0)
            self.assertAlmostEqual(dop.pdop**2, dop.hdop**2 + dop.vdop**2, places=8)
        self.assertGreater(dop4.pdop, dop5.pdop)
        self.assertGreater(dop5.pdop, dop6.pdop)

    def test_pivot_must_be_observed(self):
        """Test rejection of a pivot outside the satellite list"""
        with self.assertRaises(ValueError):
            solve(self.scenario, {1, 2, 3, 5}, pivot=4)

    def test_too_few_double_differences(self):
        """Test rejection of fewer than three double differences"""
        with self.assertRaises(DegenerateGeometryError):
            solve(self.scenario, {1, 2, 3})

    def test_coincident_satellites_are_degenerate(self):
        """Test that coincident satellites make the normal matrix degenerate"""
        same = np.array([15600e3, 7540e3, 20140e3])
        with self.assertRaises(DegenerateGeometryError):
            solve(self.scenario, {1, 2, 3, 4, 5}, correct=lambda eph, sat, time, pr: (same, 0.0))

    def test_unavailable_pivot(self):
        """Test that a pivot without ephemeris is degenerate"""
        with self.assertRaises(DegenerateGeometryError):
            solve(self.scenario, {1, 2, 3, 4, 5},
                  correct=lambda eph, sat, time, pr: None)


class TestDDCovariance(unittest.TestCase):

    def test_pivot_referenced_structure(self):
        """Test the pivot-referenced double-difference covariance"""
        Q = dd_covariance(np.array([1.0, 2.0, 3.0]), 1)
        np.testing.assert_allclose(Q, [[3.0, 2.0], [2.0, 5.0]])

    def test_snr_weight(self):
        """Test the SNR weighting function"""
        np.testing.assert_allclose(snr_weight(np.array([50.0, 55.0])), [1.0, 1.0])
        q = snr_weight(np.array([20.0, 30.0, 40.0]))
        self.assertTrue(np.all(q > 1.0))
        self.assertTrue(np.all(np.diff(q) < 0.0))


class TestDOP(unittest.TestCase):

    def setUp(self):
        self.pos = llh2ecef(np.array([np.radians(45.8), np.radians(9.1), 250.0]))

    def test_filter_dop_of_isotropic_covariance(self):
        """Test filter DOP of an isotropic covariance"""
        dop = filter_dop(4.0 * np.eye(3), self.pos)
        self.assertAlmostEqual(dop.pdop, np.sqrt(12.0))
        self.assertAlmostEqual(dop.hdop, np.sqrt(8.0))
        self.assertAlmostEqual(dop.vdop, 2.0)

    def test_filter_dop_rotates_to_local_frame(self):
        """Test that KHDOP and KVDOP come from the covariance rotated to the local frame"""
        Q_xyz = local2global_cov(np.diag([1.0, 4.0, 9.0]), self.pos)
        with mock.patch('pyddkf.positioning.dop.global2local_cov', wraps=global2local_cov) as rotate:
            dop = filter_dop(Q_xyz, self.pos)

        rotate.assert_called_once()
        self.assertAlmostEqual(dop.pdop, np.sqrt(14.0))
        self.assertAlmostEqual(dop.hdop, np.sqrt(5.0))
        self.assertAlmostEqual(dop.vdop, 3.0)

    def test_singular_geometry(self):
        """Test DOP of collinear line-of-sight vectors"""
        A = np.array([[1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
        with self.assertRaises(DegenerateGeometryError):
            geometry_dop(A, self.pos)


if __name__ == '__main__':
    unittest.main()
