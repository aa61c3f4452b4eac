# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""GPS broadcast ephemeris selection, orbit and clock evaluation"""

from typing import Iterable, Optional

import numpy as np

from ..core.constants import CLIGHT, MAX_EPH_AGE, MU_GPS, OMGE
from ..core.data_structures import Ephemeris
from ..core.time import timediff

MAX_ITER_KEPLER = 30
RTOL_KEPLER = 1e-13


def select_ephemeris(eph_list: Iterable[Ephemeris], sat: int, time: float,
                     max_age: float = MAX_EPH_AGE) -> Optional[Ephemeris]:
    """
    Select the ephemeris of a satellite with toe closest to the given time

    Parameters:
    -----------
    eph_list : iterable of Ephemeris
        Available broadcast ephemerides
    sat : int
        Satellite PRN
    time : float
        Time of interest (GPS seconds)
    max_age : float
        Maximum |time - toe| (s)

    Returns:
    --------
    eph : Ephemeris or None
        Closest healthy ephemeris carrying an orbit, None if not found
    """
    best_eph = None
    min_dt = float('inf')

    for eph in eph_list:
        if eph.sat != sat or eph.svh != 0 or eph.A <= 0.0:
            continue

        dt = abs(timediff(time, eph.toe))
        if dt > max_age:
            continue

        if dt < min_dt:
            min_dt = dt
            best_eph = eph

    return best_eph


def eccentric_anomaly(eph: Ephemeris, time: float) -> float:
    """Solve Kepler's equation for the eccentric anomaly at the given time"""
    tk = timediff(time, eph.toe)
    n = np.sqrt(MU_GPS / eph.A**3) + eph.deln
    M = eph.M0 + n * tk

    E = M
    for _ in range(MAX_ITER_KEPLER):
        E_old = E
        E = M + eph.e * np.sin(E)
        if abs(E - E_old) < RTOL_KEPLER:
            break
    return E


def compute_satellite_clock(eph: Ephemeris, time: float) -> float:
    """
    Compute satellite clock offset for L1 code observations

    Parameters:
    -----------
    eph : Ephemeris
        Satellite ephemeris
    time : float
        Time of interest (GPS seconds)

    Returns:
    --------
    dts : float
        Satellite clock offset (s), including the relativistic term and
        the group delay differential
    """
    dt = timediff(time, eph.toc)
    dts = eph.af0 + eph.af1 * dt + eph.af2 * dt**2

    if eph.A > 0:
        E = eccentric_anomaly(eph, time)
        dts += -2.0 * np.sqrt(MU_GPS * eph.A) * eph.e * np.sin(E) / CLIGHT**2

    return dts - eph.tgd


def compute_satellite_position(eph: Ephemeris, time: float) -> np.ndarray:
    """
    Compute satellite ECEF position from broadcast ephemeris

    Parameters:
    -----------
    eph : Ephemeris
        Satellite ephemeris
    time : float
        Transmission time (GPS seconds)

    Returns:
    --------
    rs : np.ndarray
        Satellite ECEF position at transmission time, in the ECEF frame of
        that same instant (m)
    """
    if eph.A <= 0.0:
        raise ValueError(f"Ephemeris of satellite {eph.sat} has no orbit")

    tk = timediff(time, eph.toe)
    E = eccentric_anomaly(eph, time)
    sE = np.sin(E)
    cE = np.cos(E)

    nu = np.arctan2(np.sqrt(1.0 - eph.e**2) * sE, cE - eph.e)
    phi = nu + eph.omg
    h2 = np.array([np.cos(2.0 * phi), np.sin(2.0 * phi)])

    u = phi + np.array([eph.cuc, eph.cus]) @ h2
    r = eph.A * (1.0 - eph.e * cE) + np.array([eph.crc, eph.crs]) @ h2
    inc = eph.i0 + eph.idot * tk + np.array([eph.cic, eph.cis]) @ h2
    xo = r * np.array([np.cos(u), np.sin(u)])

    Omg = eph.OMG0 + (eph.OMGd - OMGE) * tk - OMGE * eph.toes
    sOmg = np.sin(Omg)
    cOmg = np.cos(Omg)
    si = np.sin(inc)
    ci = np.cos(inc)

    p = np.array([cOmg, sOmg, 0.0])
    q = np.array([-ci * sOmg, ci * cOmg, si])

    return xo[0] * p + xo[1] * q
