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

"""Klobuchar ionospheric delay model for single-frequency code processing"""

import numpy as np

from ..core.constants import CLIGHT, FREQ_L1, FREQ_L2


def klobuchar_model(lat, lon, az, el, tow, alpha, beta):
    """Klobuchar ionospheric delay model.

    Parameters
    ----------
    lat, lon : float
        Receiver latitude and longitude in radians
    az, el : float
        Satellite azimuth and elevation in radians
    tow : float
        GPS time of week in seconds
    alpha, beta : array_like
        Broadcast coefficients [a0, a1, a2, a3], [b0, b1, b2, b3]

    Returns
    -------
    float
        Ionospheric delay in meters at L1 frequency
    """
    # Earth-centered angle (semi-circle)
    psi = 0.0137 / (el/np.pi + 0.11) - 0.022

    # Subionospheric latitude
    phi_i = np.clip(lat/np.pi + psi * np.cos(az), -0.416, 0.416)

    # Subionospheric longitude
    lambda_i = lon/np.pi + psi * np.sin(az) / np.cos(phi_i * np.pi)

    # Geomagnetic latitude
    phi_m = phi_i + 0.064 * np.cos((lambda_i - 1.617) * np.pi)

    # Local time
    t = (4.32e4 * lambda_i + tow) % 86400

    amp = alpha[0] + phi_m * (alpha[1] + phi_m * (alpha[2] + phi_m * alpha[3]))
    amp = max(0.0, amp)

    per = beta[0] + phi_m * (beta[1] + phi_m * (beta[2] + phi_m * beta[3]))
    per = max(72000.0, per)

    x = 2 * np.pi * (t - 50400) / per

    # Slant factor
    f = 1.0 + 16.0 * (0.53 - el/np.pi) ** 3

    if abs(x) < 1.57:
        return CLIGHT * f * (5e-9 + amp * (1 - x*x/2 + x**4/24))
    return CLIGHT * f * 5e-9


def ionosphere_correction(llh, az_deg, el_deg, tow, iono, frequency=1):
    """
    Ionospheric delay for a code observation

    Parameters:
    -----------
    llh : array_like
        Receiver geodetic position (rad, rad, m)
    az_deg, el_deg : float
        Satellite azimuth and elevation (deg)
    tow : float
        GPS time of week (s)
    iono : array_like or None
        Klobuchar coefficients (alpha0..3, beta0..3); None disables the model
    frequency : int
        1 for L1, 2 for L2

    Returns:
    --------
    float
        Delay (m)
    """
    if iono is None or not np.any(iono):
        return 0.0
    delay = klobuchar_model(llh[0], llh[1], np.radians(az_deg), np.radians(el_deg),
                            tow, iono[0:4], iono[4:8])
    if frequency == 2:
        delay *= (FREQ_L1 / FREQ_L2) ** 2
    return delay
