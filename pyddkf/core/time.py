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

"""GPS time conversions

Times handled by the filter are continuous GPS seconds counted from the
GPS epoch (1980-01-06 00:00:00). Week/seconds-of-week pairs are only
needed where a broadcast model is defined on the time of week.
"""

from .constants import SECONDS_IN_WEEK


def gps_seconds_to_week_tow(gps_seconds: float) -> tuple:
    """
    Convert GPS seconds to GPS week number and time of week

    Parameters:
    -----------
    gps_seconds : float
        GPS seconds since GPS epoch (Jan 6, 1980 00:00:00 UTC)

    Returns:
    --------
    tuple : (week, tow)
        GPS week number and time of week in seconds
    """
    if gps_seconds < 0:
        raise ValueError(f"GPS seconds cannot be negative: {gps_seconds}")

    tow = gps_seconds % SECONDS_IN_WEEK
    week = int(round((gps_seconds - tow) / SECONDS_IN_WEEK))

    return week, tow


def week_tow_to_gps_seconds(week: int, tow: float) -> float:
    """
    Convert GPS week number and time of week to GPS seconds

    Parameters:
    -----------
    week : int
        GPS week number
    tow : float
        Time of week in seconds (0-604800)

    Returns:
    --------
    float
        GPS seconds since GPS epoch
    """
    if week < 0:
        raise ValueError(f"GPS week cannot be negative: {week}")

    if tow < 0 or tow >= SECONDS_IN_WEEK:
        raise ValueError(f"Time of week must be in range [0, 604800): {tow}")

    return week * SECONDS_IN_WEEK + tow


def timediff(time: float, tref: float) -> float:
    """Time difference accounting for week rollover

    Both arguments may be either continuous GPS seconds or times of week;
    the result is folded into [-302400, 302400].
    """
    dt = (time - tref) % SECONDS_IN_WEEK
    if dt > SECONDS_IN_WEEK / 2:
        dt -= SECONDS_IN_WEEK
    return dt
