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

"""Topocentric azimuth, elevation and range of a satellite"""


import numpy as np

from ..core.constants import R2D
from .transforms import compute_rotation_matrix_enu, ecef2llh


def enu2aer(enu_t: np.ndarray, enu_r: np.ndarray) -> np.ndarray:
    """Convert ENU to Azimuth-Elevation-Range coordinates

    Parameters
    ----------
    enu_t : np.ndarray
        Target ENU coordinates [e, n, u] in meters
    enu_r : np.ndarray
        Reference ENU coordinates [e, n, u] in meters

    Returns
    -------
    np.ndarray
        [azimuth (0-2π rad, clockwise from north), elevation (rad), range (m)]
    """
    de, dn, du = enu_t - enu_r

    r = np.hypot(de, dn)
    az = np.mod(np.arctan2(de, dn), 2 * np.pi)
    el = np.arctan2(du, r)
    rng = np.hypot(r, du)

    return np.array([az, el, rng])


def topocent(X: np.ndarray, sat_pos: np.ndarray) -> tuple:
    """
    Azimuth, elevation and distance of a satellite seen from a receiver

    Parameters:
    -----------
    X : np.ndarray
        Receiver approximate ECEF position (m)
    sat_pos : np.ndarray
        Satellite ECEF position (m)

    Returns:
    --------
    az : float
        Azimuth in degrees [0, 360)
    el : float
        Elevation in degrees
    dist : float
        Receiver-satellite distance (m)

    Notes
    -----
    Without a receiver position (X at the origin) the local frame is
    undefined; the satellite is then reported at the zenith so that the
    elevation mask does not discard it.
    """
    X = np.asarray(X, dtype=float)
    dx = np.asarray(sat_pos, dtype=float) - X

    if np.linalg.norm(X) < 1.0:
        return 0.0, 90.0, float(np.linalg.norm(dx))

    R = compute_rotation_matrix_enu(ecef2llh(X))
    az, el, dist = enu2aer(R @ dx, np.zeros(3))

    return float(az * R2D), float(el * R2D), float(dist)
