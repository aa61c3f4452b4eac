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

"""Dilution of precision from the design matrix and from the filter covariance"""

import numpy as np
from scipy import linalg

from ..core.data_structures import DOP
from ..core.exceptions import DegenerateGeometryError
from ..coordinate.transforms import global2local_cov


def _dop_from_cov(Q_xyz: np.ndarray, position: np.ndarray) -> DOP:
    """PDOP from the ECEF block, HDOP/VDOP from the block rotated to ENU"""
    Q_xyz = np.asarray(Q_xyz, dtype=float)
    Q_enu = global2local_cov(Q_xyz, np.asarray(position, dtype=float))
    return DOP(pdop=float(np.sqrt(np.trace(Q_xyz))),
               hdop=float(np.sqrt(Q_enu[0, 0] + Q_enu[1, 1])),
               vdop=float(np.sqrt(Q_enu[2, 2])))


def geometry_dop(A: np.ndarray, position: np.ndarray) -> DOP:
    """
    Geometric DOP of a position-only design matrix

    Parameters:
    -----------
    A : np.ndarray, shape (n, 3)
        Design matrix (unweighted)
    position : np.ndarray
        ECEF position where the local frame is defined (m)

    Returns:
    --------
    DOP
        PDOP, HDOP and VDOP
    """
    A = np.asarray(A, dtype=float)
    try:
        Q = linalg.inv(A.T @ A)
    except linalg.LinAlgError as e:
        raise DegenerateGeometryError(f"Singular geometry for DOP: {e}") from e
    return _dop_from_cov(Q, position)


def filter_dop(Cee_xyz: np.ndarray, position: np.ndarray) -> DOP:
    """
    Kalman filter DOP from the position block of the error covariance

    Parameters:
    -----------
    Cee_xyz : np.ndarray, shape (3, 3)
        Position error covariance (ECEF, m^2)
    position : np.ndarray
        Estimated ECEF position (m)

    Returns:
    --------
    DOP
        KPDOP, KHDOP and KVDOP
    """
    return _dop_from_cov(Cee_xyz, position)
