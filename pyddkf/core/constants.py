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

"""GNSS Constants and Processing Modes"""

import numpy as np

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# Earth Parameters (WGS84)
RE_WGS84 = 6378137.0           # earth semimajor axis (m)
FE_WGS84 = 1.0 / 298.257222101 # earth flattening
E_WGS84 = np.sqrt(1.0 - (1.0 - FE_WGS84)**2)  # eccentricity
OMGE = 7.2921151467E-5         # earth angular velocity (rad/s)
GME = 3.986004418E14           # earth gravitational constant (m^3/s^2)
MU_GPS = 3.9860050E14          # GPS gravitational constant

# GPS frequencies and wavelengths
FREQ_L1 = 1.57542E9   # L1 frequency (Hz)
FREQ_L2 = 1.22760E9   # L2 frequency (Hz)
FG = np.array([FREQ_L1, FREQ_L2])
LAMBDAG = CLIGHT / FG
LAMBDA1 = LAMBDAG[0]
LAMBDA2 = LAMBDAG[1]

# Constellation
MAXSAT = 32        # maximum number of satellites in a constellation
MIN_NSAT = 4       # minimum number of satellites for a position fix

# Constellation IDs
ID_GPS = 1
ID_GLONASS = 2
ID_GALILEO = 3
ID_BEIDOU = 4
ID_QZSS = 5
ID_SBAS = 6

# Ephemeris
MAX_EPH_AGE = 7200.0           # max |t - toe| for broadcast ephemeris (s)
SECONDS_IN_WEEK = 604800.0

# Bancroft first-iteration signal travel time guess (s)
TRAVELTIME_GUESS = 0.072

# Unit conversions
R2D = 180.0 / np.pi            # radians to degrees
D2R = np.pi / 180.0            # degrees to radians

# ============================================================================
# PROCESSING MODES
# ============================================================================
MODE_RT_NAV = 24          # Real time navigation (KF on code and phase DD)
MODE_RT_R_MON = 21        # Real time rover monitor
MODE_RT_M_MON = 22        # Real time master monitor
MODE_RT_RM_MON = 23       # Real time master + rover monitor

MODE_PP_LS_C_SA = 1       # Post processing LS on code stand alone
MODE_PP_LS_CP_SA = 3      # Post processing LS on code and phase stand alone
MODE_PP_LS_CP_VEL = 3.1   # Post processing LS on code and phase, velocity
MODE_PP_LS_C_DD = 11      # Post processing LS on code DD
MODE_PP_LS_CP_DD_L = 13   # Post processing LS on code and phase DD with LAMBDA

MODE_PP_KF_C_SA = 2       # Post processing KF on code stand alone
MODE_PP_KF_C_DD = 12      # Post processing KF on code DD
MODE_PP_KF_CP_SA = 4      # Post processing KF on code and phase stand alone
MODE_PP_KF_CP_DD = 14     # Post processing KF on code and phase DD
MODE_PP_KF_CP_DD_MR = 15  # Post processing KF on code and phase DD, multi receiver

GMODE_PP = (MODE_PP_LS_C_SA, MODE_PP_LS_CP_SA, MODE_PP_LS_C_DD,
            MODE_PP_LS_CP_DD_L, MODE_PP_LS_CP_VEL, MODE_PP_KF_C_SA,
            MODE_PP_KF_C_DD, MODE_PP_KF_CP_SA, MODE_PP_KF_CP_DD,
            MODE_PP_KF_CP_DD_MR)
GMODE_RT = (MODE_RT_NAV, MODE_RT_R_MON, MODE_RT_M_MON, MODE_RT_RM_MON)
GMODE_SA = (MODE_PP_LS_C_SA, MODE_PP_LS_CP_SA, MODE_PP_LS_CP_VEL,
            MODE_PP_KF_C_SA, MODE_PP_KF_CP_SA)
GMODE_DD = (MODE_PP_LS_C_DD, MODE_PP_LS_CP_DD_L, MODE_PP_KF_C_DD,
            MODE_PP_KF_CP_DD, MODE_PP_KF_CP_DD_MR)
GMODE_KF = (MODE_RT_NAV, MODE_PP_KF_C_SA, MODE_PP_KF_C_DD, MODE_PP_KF_CP_SA,
            MODE_PP_KF_CP_DD, MODE_PP_KF_CP_DD_MR)


def is_pp(mode) -> bool:
    """True for post-processing modes"""
    return mode in GMODE_PP


def is_rt(mode) -> bool:
    """True for real-time modes"""
    return mode in GMODE_RT


def is_dd(mode) -> bool:
    """True for double-difference modes"""
    return mode in GMODE_DD


def is_sa(mode) -> bool:
    """True for stand-alone modes"""
    return mode in GMODE_SA


def is_kf(mode) -> bool:
    """True for modes estimated with a Kalman filter"""
    return mode in GMODE_KF
