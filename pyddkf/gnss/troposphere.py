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

"""Saastamoinen tropospheric delay model"""

import numpy as np

MIN_EL_TROPO = 5.0  # deg


def saastamoinen_model(elevation_deg, altitude_m=0.0, latitude_deg=45.0):
    """Saastamoinen tropospheric delay model.

    Parameters
    ----------
    elevation_deg : float
        Satellite elevation angle in degrees
    altitude_m : float, optional
        Receiver altitude in meters (default: 0)
    latitude_deg : float, optional
        Receiver latitude in degrees (default: 45)

    Returns
    -------
    float
        Tropospheric delay in meters; 0 below 5 degrees of elevation or
        outside the standard atmosphere validity range
    """
    if elevation_deg < MIN_EL_TROPO or not -500.0 < altitude_m < 44000.0:
        return 0.0

    el_rad = np.radians(elevation_deg)
    lat_rad = np.radians(latitude_deg)

    # Standard atmosphere adjusted for altitude
    P = 1013.25 * (1 - 0.0000226 * altitude_m) ** 5.225
    T = 288.15 - 0.0065 * altitude_m
    e = 11.691 * (1 - 0.0000226 * altitude_m) ** 5.225

    denom = 1 - 0.00266 * np.cos(2 * lat_rad) - 0.00028 * altitude_m/1000
    zhd = 0.0022768 * P / denom
    zwd = 0.0022768 * (1255/T + 0.05) * e / denom

    return (zhd + zwd) / np.sin(el_rad)


def troposphere_correction(elevation_deg, pos_llh):
    """Tropospheric delay (m) at a geodetic position (rad, rad, m)"""
    return saastamoinen_model(elevation_deg, pos_llh[2], np.degrees(pos_llh[0]))
