"""Synthetic GPS constellation over a rover/master pair for end-to-end tests"""

import numpy as np
import pytest

from pyddkf.core.constants import CLIGHT, MAXSAT, OMGE, SECONDS_IN_WEEK
from pyddkf.core.data_structures import Ephemeris, ObservationEpoch
from pyddkf.coordinate.aer_transforms import topocent
from pyddkf.coordinate.rotation import earth_rotation_correction
from pyddkf.coordinate.transforms import compute_rotation_matrix_enu, ecef2llh, enu2ecef, llh2ecef
from pyddkf.gnss.troposphere import troposphere_correction
from pyddkf.satellite.ephemeris import compute_satellite_position

WEEK = 2200
TOES = 302400.0
T0 = WEEK * SECONDS_IN_WEEK + TOES
A_ORBIT = 26560e3
I0 = np.radians(55.0)

ROVER_LLH = np.array([np.radians(45.8), np.radians(9.1), 250.0])
MASTER_ENU = np.array([700.0, 700.0, 0.0])

# PRN: (azimuth, elevation) in degrees seen from the rover at T0
SKY = {
    1: (120.0, 75.0),
    2: (200.0, 50.0),
    3: (270.0, 40.0),
    4: (60.0, 35.0),
    5: (150.0, 30.0),
    6: (240.0, 45.0),
}


def make_ephemeris(sat, az_deg, el_deg, rover_xyz):
    """Circular orbit placing the satellite at (az, el) over the rover at toe"""
    R = compute_rotation_matrix_enu(ecef2llh(rover_xyz))
    az, el = np.radians(az_deg), np.radians(el_deg)
    u_dir = R.T @ np.array([np.cos(el) * np.sin(az), np.cos(el) * np.cos(az), np.sin(el)])

    ru = rover_xyz @ u_dir
    d = -ru + np.sqrt(ru**2 - rover_xyz @ rover_xyz + A_ORBIT**2)
    s = (rover_xyz + d * u_dir) / A_ORBIT
    if abs(s[2]) >= np.sin(I0):
        raise ValueError(f"Satellite {sat} direction not reachable with inclination {np.degrees(I0)}")

    u = np.arcsin(s[2] / np.sin(I0))
    Omega = np.arctan2(s[1], s[0]) - np.arctan2(np.sin(u) * np.cos(I0), np.cos(u))
    return Ephemeris(sat=sat, week=WEEK, toes=TOES, tocs=TOES, sqrtA=np.sqrt(A_ORBIT),
                     e=0.0, i0=I0, OMG0=Omega + OMGE * TOES, omg=0.0, M0=u)


def geometric_range(eph, time, rx):
    """Pseudorange free of clock errors: c * tau with tau = |R3(w tau) rs(t - tau) - rx| / c"""
    tau = 0.075
    for _ in range(10):
        rs = earth_rotation_correction(tau, compute_satellite_position(eph, time - tau))
        tau = np.linalg.norm(rs - rx) / CLIGHT
    return CLIGHT * tau, rs


class SyntheticScenario:
    """Rover and master observing a set of satellites"""

    def __init__(self, sky=SKY):
        self.t0 = T0
        self.rover = llh2ecef(ROVER_LLH)
        self.master = enu2ecef(MASTER_ENU, self.rover)
        self.eph = [make_ephemeris(sat, az, el, self.rover) for sat, (az, el) in sky.items()]

    def pseudorange(self, sat, time, rx, troposphere=True):
        eph = next(e for e in self.eph if e.sat == sat)
        pr, rs = geometric_range(eph, time, rx)
        if troposphere:
            _, el, _ = topocent(rx, rs)
            pr += troposphere_correction(el, ecef2llh(rx))
        return pr

    def epoch(self, sats, time=None, rover=None, snr=45.0):
        """Observation epoch with code on L1 for the given satellites"""
        time = self.t0 if time is None else time
        rover = self.rover if rover is None else rover
        pr1_R = np.zeros(MAXSAT)
        pr1_M = np.zeros(MAXSAT)
        snr_R = np.zeros(MAXSAT)
        snr_M = np.zeros(MAXSAT)
        for sat in sats:
            pr1_R[sat - 1] = self.pseudorange(sat, time, rover)
            pr1_M[sat - 1] = self.pseudorange(sat, time, self.master)
            snr_R[sat - 1] = snr
            snr_M[sat - 1] = snr
        return ObservationEpoch(time=time, pos_M=self.master, pr1_R=pr1_R, pr1_M=pr1_M,
                                snr_R=snr_R, snr_M=snr_M, eph=self.eph)


@pytest.fixture(scope="class")
def scenario_class(request):
    """Attach the scenario to unittest.TestCase classes"""
    request.cls.scenario = SyntheticScenario()
