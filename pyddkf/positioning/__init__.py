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

"""Positioning module

- Bancroft closed-form positioning
- Code double-difference least squares and DOP
- Satellite set management and Kalman filtering of DD positions
"""

from .bancroft import bancroft, bancroft_position, lorentz
from .code_double_diff import code_double_diff
from .dop import filter_dop, geometry_dop
from .kalman import (
    EpochKalmanFilter,
    FilterContext,
    KalmanUpdate,
    measurement_matrix,
    position_indices,
    process_noise,
    transition_matrix,
)
from .processor import KalmanCodeDDProcessor
from .satellite_set import SatelliteSetManager
