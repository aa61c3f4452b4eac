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

"""Tabular export of epoch results"""

import logging
from typing import Iterable

import numpy as np
import pandas as pd

from ..core.data_structures import EpochResult
from ..core.time import gps_seconds_to_week_tow
from ..coordinate.transforms import ecef2llh

logger = logging.getLogger(__name__)

COLUMNS = [
    'time', 'week', 'tow', 'status', 'x', 'y', 'z', 'lat', 'lon', 'height',
    'nsat', 'pivot', 'check_on', 'check_off', 'check_pivot', 'check_cs',
    'pdop', 'hdop', 'vdop', 'kpdop', 'khdop', 'kvdop',
]


def results_to_dataframe(results: Iterable[EpochResult]) -> pd.DataFrame:
    """
    One row per epoch result

    Parameters:
    -----------
    results : iterable of EpochResult
        Processor output

    Returns:
    --------
    pd.DataFrame
        Columns of COLUMNS; position columns are NaN for failed epochs,
        latitude and longitude are in degrees
    """
    rows = []
    for r in results:
        week, tow = gps_seconds_to_week_tow(r.time)
        if r.position is not None:
            xyz = np.asarray(r.position, dtype=float)
            llh = ecef2llh(xyz)
            lat, lon, height = np.degrees(llh[0]), np.degrees(llh[1]), llh[2]
        else:
            xyz = np.full(3, np.nan)
            lat = lon = height = np.nan
        rows.append({
            'time': r.time, 'week': week, 'tow': tow, 'status': r.status,
            'x': xyz[0], 'y': xyz[1], 'z': xyz[2],
            'lat': lat, 'lon': lon, 'height': height,
            'nsat': r.nsat, 'pivot': r.pivot,
            'check_on': r.check_on, 'check_off': r.check_off,
            'check_pivot': r.check_pivot, 'check_cs': r.check_cs,
            'pdop': r.dop.pdop, 'hdop': r.dop.hdop, 'vdop': r.dop.vdop,
            'kpdop': r.kdop.pdop, 'khdop': r.kdop.hdop, 'kvdop': r.kdop.vdop,
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def write_solution_csv(results: Iterable[EpochResult], path) -> pd.DataFrame:
    """Write the results to a CSV file and return the table"""
    df = results_to_dataframe(results)
    df.to_csv(path, index=False, float_format='%.4f')
    logger.info("Wrote %d epochs to %s", len(df), path)
    return df
