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

"""Processing parameters of the code double-difference Kalman filter"""

from dataclasses import dataclass, fields
from typing import Tuple

from .constants import MIN_NSAT, MODE_PP_KF_C_DD, MODE_RT_NAV, is_dd, is_kf

WEIGHTING_MODES = ('same', 'elevation', 'snr')


@dataclass
class KalmanConfig:
    """Filter configuration

    Attributes
    ----------
    order : int
        Dynamic model order: 1 static, 2 constant velocity, 3 constant acceleration
    interval : float
        Epoch interval (s)
    cutoff : float
        Elevation cutoff (deg); satellites strictly below are excluded
    snr_threshold : float
        SNR threshold (dB-Hz); satellites strictly below are excluded
    frequencies : tuple
        Code observables used: (1,), (2,) or (1, 2)
    min_nsat : int
        Minimum number of satellites for a measurement update
    sigmaq0 : float
        Initial position variance, also the isotropic measurement variance
        used when the solver cannot provide a covariance (m^2)
    sigmaq0_dyn : float
        Initial variance of velocity/acceleration terms
    sigmaq_vE, sigmaq_vN, sigmaq_vU : float
        Local process noise variances of the highest-order dynamic terms
    weighting : str
        Observation weighting of the DD solver ('same', 'elevation' or 'snr')
    mode : float
        Processing mode identifier
    """
    order: int = 2
    interval: float = 1.0
    cutoff: float = 10.0
    snr_threshold: float = 0.0
    frequencies: Tuple[int, ...] = (1,)
    min_nsat: int = MIN_NSAT
    sigmaq0: float = 1.0
    sigmaq0_dyn: float = 1.0
    sigmaq_vE: float = 0.5**2
    sigmaq_vN: float = 0.5**2
    sigmaq_vU: float = 0.1**2
    weighting: str = 'elevation'
    mode: float = MODE_PP_KF_C_DD

    def __post_init__(self):
        self.frequencies = tuple(self.frequencies)
        if self.order not in (1, 2, 3):
            raise ValueError(f"Dynamic model order must be 1, 2 or 3: {self.order}")
        if self.interval <= 0:
            raise ValueError(f"Interval must be positive: {self.interval}")
        if self.frequencies not in ((1,), (2,), (1, 2)):
            raise ValueError(f"Unsupported frequencies: {self.frequencies}")
        if self.min_nsat < 4:
            raise ValueError(f"At least 4 satellites are needed for a fix: {self.min_nsat}")
        for name in ('sigmaq0', 'sigmaq0_dyn', 'sigmaq_vE', 'sigmaq_vN', 'sigmaq_vU'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.weighting not in WEIGHTING_MODES:
            raise ValueError(f"Unknown weighting: {self.weighting}")
        if not (is_kf(self.mode) and (is_dd(self.mode) or self.mode == MODE_RT_NAV)):
            raise ValueError(f"Mode {self.mode} is not a Kalman filter double-difference mode")

    @property
    def state_dim(self) -> int:
        return 3 * self.order

    @classmethod
    def from_dict(cls, params: dict) -> "KalmanConfig":
        """Build configuration from a mapping, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**params)
