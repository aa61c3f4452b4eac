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

"""Earth rotation during signal propagation (Sagnac correction kernels)"""

import numpy as np
from numba import njit

from ..core.constants import OMGE


@njit(cache=True, fastmath=True)
def rotate_z(x, y, angle):
    """
    Rotate the X/Y components of a vector about the Z axis by -angle.

    Parameters
    ----------
    x, y : float
        ECEF X and Y coordinates (m)
    angle : float
        Rotation angle (rad)

    Returns
    -------
    xr, yr : float
        Rotated coordinates
    """
    cosa = np.cos(angle)
    sina = np.sin(angle)
    return cosa * x + sina * y, -sina * x + cosa * y


@njit(cache=True, fastmath=True)
def earth_rotation_correction(traveltime, pos):
    """
    Express a satellite position at transmission time in the ECEF frame
    at reception time.

    Parameters
    ----------
    traveltime : float
        Signal travel time (s)
    pos : array_like, shape (3,)
        Satellite ECEF position at transmission time (m)

    Returns
    -------
    rot : ndarray, shape (3,)
        Rotated satellite position (m)
    """
    xr, yr = rotate_z(pos[0], pos[1], traveltime * OMGE)
    return np.array([xr, yr, pos[2]], dtype=np.double)
