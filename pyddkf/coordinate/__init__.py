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

"""Coordinate transformation utilities

- Geodetic/ECEF/ENU transforms and covariance rotation
- Topocentric azimuth, elevation and range
- Earth rotation correction kernels
"""

from .aer_transforms import enu2aer, topocent
from .rotation import earth_rotation_correction, rotate_z
from .transforms import (
    compute_rotation_matrix_enu,
    covecef2enu,
    covenu2ecef,
    ecef2enu,
    ecef2llh,
    enu2ecef,
    global2local_cov,
    llh2ecef,
    local2global_cov,
)
