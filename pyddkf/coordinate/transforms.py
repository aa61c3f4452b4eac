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

"""Coordinate and covariance transformations between ECEF and local ENU"""


import numpy as np

from ..core.constants import FE_WGS84, RE_WGS84

E2 = FE_WGS84 * (2.0 - FE_WGS84)


def ecef2llh(xyz: np.ndarray) -> np.ndarray:
    """Convert ECEF coordinates to geodetic coordinates

    Parameters
    ----------
    xyz : np.ndarray
        ECEF coordinates [x, y, z] in meters

    Returns
    -------
    np.ndarray
        Geodetic coordinates [lat, lon, height] (rad, rad, m)

    Notes
    -----
    Fixed-point iteration on latitude; converges in 3-4 iterations.
    """
    x, y, z = xyz[0], xyz[1], xyz[2]

    lon = np.arctan2(y, x)

    p = np.sqrt(x**2 + y**2)
    lat = np.arctan2(z, p * (1.0 - E2))
    h = 0.0

    for _ in range(6):
        N = RE_WGS84 / np.sqrt(1.0 - E2 * np.sin(lat)**2)
        if p > 1.0:
            h = p / np.cos(lat) - N
        else:
            h = abs(z) - N * (1.0 - E2)
        lat = np.arctan2(z, p * (1.0 - E2 * N / (N + h)))

    return np.array([lat, lon, h])


def llh2ecef(llh: np.ndarray) -> np.ndarray:
    """Convert geodetic coordinates [lat, lon, height] (rad, rad, m) to ECEF (m)"""
    lat, lon, h = llh[0], llh[1], llh[2]

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)

    N = RE_WGS84 / np.sqrt(1.0 - E2 * sin_lat**2)

    x = (N + h) * cos_lat * np.cos(lon)
    y = (N + h) * cos_lat * np.sin(lon)
    z = (N * (1.0 - E2) + h) * sin_lat

    return np.array([x, y, z])


def compute_rotation_matrix_enu(llh: np.ndarray) -> np.ndarray:
    """Compute rotation matrix from ECEF to ENU coordinates

    Parameters
    ----------
    llh : np.ndarray
        Geodetic coordinates [lat, lon, height] (rad, rad, m); height unused

    Returns
    -------
    np.ndarray
        Rotation matrix R (3x3) such that v_enu = R @ v_ecef
    """
    lat, lon = llh[0], llh[1]
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    sin_lon = np.sin(lon)
    cos_lon = np.cos(lon)

    return np.array([
        [-sin_lon, cos_lon, 0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat]
    ])


def ecef2enu(xyz: np.ndarray, org_xyz: np.ndarray) -> np.ndarray:
    """Convert an ECEF point to ENU coordinates relative to an ECEF origin"""
    R = compute_rotation_matrix_enu(ecef2llh(org_xyz))
    return R @ (np.asarray(xyz) - np.asarray(org_xyz))


def enu2ecef(enu: np.ndarray, org_xyz: np.ndarray) -> np.ndarray:
    """Convert ENU coordinates relative to an ECEF origin back to ECEF"""
    R = compute_rotation_matrix_enu(ecef2llh(org_xyz))
    return np.asarray(org_xyz) + R.T @ np.asarray(enu)


def covecef2enu(llh: np.ndarray, P_ecef: np.ndarray) -> np.ndarray:
    """Transform covariance matrix from ECEF to ENU: P_enu = R P_ecef R^T"""
    R = compute_rotation_matrix_enu(llh)
    return R @ P_ecef @ R.T


def covenu2ecef(llh: np.ndarray, P_enu: np.ndarray) -> np.ndarray:
    """Transform covariance matrix from ENU to ECEF: P_ecef = R^T P_enu R"""
    R = compute_rotation_matrix_enu(llh)
    return R.T @ P_enu @ R


def local2global_cov(cov_local: np.ndarray, ref_xyz: np.ndarray) -> np.ndarray:
    """
    Rotate a 3x3 covariance from the local ENU frame to ECEF

    Parameters:
    -----------
    cov_local : np.ndarray
        Covariance in ENU (3x3)
    ref_xyz : np.ndarray
        ECEF position where the local frame is defined (m)

    Returns:
    --------
    np.ndarray
        Covariance in ECEF (3x3)
    """
    return covenu2ecef(ecef2llh(ref_xyz), np.asarray(cov_local, dtype=float))


def global2local_cov(cov_global: np.ndarray, ref_xyz: np.ndarray) -> np.ndarray:
    """
    Rotate a 3x3 covariance from ECEF to the local ENU frame

    Parameters:
    -----------
    cov_global : np.ndarray
        Covariance in ECEF (3x3)
    ref_xyz : np.ndarray
        ECEF position where the local frame is defined (m)

    Returns:
    --------
    np.ndarray
        Covariance in ENU (3x3)
    """
    return covecef2enu(ecef2llh(ref_xyz), np.asarray(cov_global, dtype=float))
