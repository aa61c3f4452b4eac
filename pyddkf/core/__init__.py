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

"""Core module: constants, time, configuration and data structures.

Example Usage:
    >>> from pyddkf.core import KalmanConfig, ObservationEpoch
    >>> config = KalmanConfig(order=2, cutoff=15.0)
    >>> epoch = ObservationEpoch(time=1.5e9, pos_M=[4398306.0, 704149.0, 4550154.0])
"""

from .config import KalmanConfig
from .constants import *
from .data_structures import *
from .exceptions import DegenerateGeometryError
from .time import gps_seconds_to_week_tow, timediff, week_tow_to_gps_seconds
