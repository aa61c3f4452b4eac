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

"""Satellite position correction for signal travel time and Earth rotation"""

import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from ..core.constants import CLIGHT
from ..core.data_structures import Ephemeris
from ..coordinate.rotation import earth_rotation_correction
from .ephemeris import compute_satellite_clock, compute_satellite_position, select_ephemeris

logger = logging.getLogger(__name__)


def satellite_at_transmission(eph_list: Iterable[Ephemeris], sat: int, time: float,
                              pr: float) -> Optional[Tuple[np.ndarray, float, float]]:
    """
    Satellite position at signal transmission time

    Parameters:
    -----------
    eph_list : iterable of Ephemeris
        Broadcast ephemerides
    sat : int
        Satellite PRN
    time : float
        Reception time (GPS seconds)
    pr : float
        Code pseudorange (m)

    Returns:
    --------
    (pos, dts, traveltime) or None
        ECEF position in the frame of the transmission instant (m),
        satellite clock offset (s) and signal travel time (s); None when
        no valid ephemeris is available
    """
    eph = select_ephemeris(eph_list, sat, time)
    if eph is None:
        logger.debug("No ephemeris for satellite %d at %.3f", sat, time)
        return None

    time_tx_raw = time - pr / CLIGHT
    dts = compute_satellite_clock(eph, time_tx_raw)
    time_tx = time_tx_raw - dts

    pos = compute_satellite_position(eph, time_tx)
    if not np.all(np.isfinite(pos)):
        return None

    return pos, dts, time - time_tx


def correct_satellite(eph_list: Iterable[Ephemeris], sat: int, time: float,
                      pr: float) -> Optional[Tuple[np.ndarray, float]]:
    """
    Corrected satellite position (clock and Earth rotation)

    Parameters:
    -----------
    eph_list : iterable of Ephemeris
        Broadcast ephemerides
    sat : int
        Satellite PRN
    time : float
        Reception time (GPS seconds)
    pr : float
        Code pseudorange (m)

    Returns:
    --------
    (pos, dts) or None
        Satellite ECEF position rotated into the frame of the reception
        instant (m) and satellite clock offset (s); None when unavailable
    """
    tx = satellite_at_transmission(eph_list, sat, time, pr)
    if tx is None:
        return None

    pos, dts, traveltime = tx
    return earth_rotation_correction(traveltime, pos), dts
