#!/usr/bin/env python3
"""Test suite for epoch data structures"""

import unittest

import numpy as np

from pyddkf.core.constants import MAXSAT
from pyddkf.core.data_structures import (
    DOP, Ephemeris, EpochResult, ObservationEpoch, SatelliteConfiguration,
)


class TestEphemeris(unittest.TestCase):

    def test_continuous_times(self):
        eph = Ephemeris(sat=5, week=2200, toes=7200.0, tocs=7184.0, sqrtA=5153.7)
        self.assertEqual(eph.toe, 2200 * 604800.0 + 7200.0)
        self.assertEqual(eph.toc, 2200 * 604800.0 + 7184.0)
        self.assertAlmostEqual(eph.A, 5153.7**2)


class TestObservationEpoch(unittest.TestCase):

    def test_defaults(self):
        epoch = ObservationEpoch(time=100.0)
        self.assertEqual(epoch.pr1_R.shape, (MAXSAT,))
        self.assertFalse(np.any(epoch.pr1_R))
        self.assertIsNone(epoch.iono)

    def test_pseudoranges_by_frequency(self):
        pr1 = np.arange(MAXSAT, dtype=float)
        epoch = ObservationEpoch(time=0.0, pr1_R=pr1, pr2_M=2 * pr1)
        pr_R, _ = epoch.pseudoranges(1)
        _, pr_M = epoch.pseudoranges(2)
        np.testing.assert_array_equal(pr_R, pr1)
        np.testing.assert_array_equal(pr_M, 2 * pr1)
        with self.assertRaises(ValueError):
            epoch.pseudoranges(5)

    def test_shape_validation(self):
        with self.assertRaises(ValueError):
            ObservationEpoch(time=0.0, pr1_R=np.zeros(10))


class TestSatelliteConfiguration(unittest.TestCase):

    def test_active_and_previous_pivot(self):
        conf = SatelliteConfiguration()
        conf.conf_sat[[0, 4, 9]] = 1
        np.testing.assert_array_equal(conf.active, [1, 5, 10])

        conf.pivot, conf.pivot_old = 0, 7
        self.assertEqual(conf.previous_pivot, 7)
        conf.pivot = 5
        self.assertEqual(conf.previous_pivot, 5)

    def test_copy_is_independent(self):
        conf = SatelliteConfiguration(pivot=3)
        copy = conf.copy()
        copy.conf_sat[2] = 1
        copy.pivot = 4
        self.assertEqual(conf.conf_sat[2], 0)
        self.assertEqual(conf.pivot, 3)


class TestEpochResult(unittest.TestCase):

    def test_defaults(self):
        result = EpochResult(time=1.0, status='failed')
        self.assertEqual(result.nsat, 0)
        self.assertTrue(np.isnan(result.dop.pdop))
        self.assertIsInstance(result.kdop, DOP)


if __name__ == '__main__':
    unittest.main()
