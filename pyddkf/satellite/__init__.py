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

"""Satellite orbit and clock computation from GPS broadcast ephemerides.

Provides the geometry contract consumed by the positioning core:
``correct_satellite(eph, sat, time, pr) -> (position, dts) | None``.
"""

from .correction import correct_satellite, satellite_at_transmission
from .ephemeris import (
    compute_satellite_clock,
    compute_satellite_position,
    eccentric_anomaly,
    select_ephemeris,
)
