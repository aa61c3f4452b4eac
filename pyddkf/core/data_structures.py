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

"""Core data structures for code double-difference processing"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .constants import MAXSAT, SECONDS_IN_WEEK


def _sat_array(dtype=float):
    return field(default_factory=lambda: np.zeros(MAXSAT, dtype=dtype))


@dataclass
class Ephemeris:
    """GPS broadcast ephemeris (legacy navigation message).

    Attributes
    ----------
    sat : int
        Satellite PRN (1..MAXSAT)
    week : int
        GPS week of toe/toc
    toes, tocs : float
        Time of ephemeris and time of clock, seconds of week
    af0, af1, af2 : float
        Clock polynomial (s, s/s, s/s^2)
    tgd : float
        Group delay differential (s)
    sqrtA : float
        Square root of the semi-major axis (m^1/2)
    e, i0, OMG0, omg, M0 : float
        Keplerian elements (-, rad)
    deln, OMGd, idot : float
        Mean motion difference, rate of right ascension and of inclination (rad/s)
    crc, crs, cuc, cus, cic, cis : float
        Harmonic correction terms (m, rad)
    iode : int
        Issue of data
    svh : int
        Satellite health (0 = healthy)
    """
    sat: int
    week: int = 0
    toes: float = 0.0
    tocs: float = 0.0
    af0: float = 0.0
    af1: float = 0.0
    af2: float = 0.0
    tgd: float = 0.0
    sqrtA: float = 0.0
    e: float = 0.0
    i0: float = 0.0
    OMG0: float = 0.0
    omg: float = 0.0
    M0: float = 0.0
    deln: float = 0.0
    OMGd: float = 0.0
    idot: float = 0.0
    crc: float = 0.0
    crs: float = 0.0
    cuc: float = 0.0
    cus: float = 0.0
    cic: float = 0.0
    cis: float = 0.0
    iode: int = 0
    svh: int = 0

    @property
    def A(self) -> float:
        """Semi-major axis (m)"""
        return self.sqrtA ** 2

    @property
    def toe(self) -> float:
        """Time of ephemeris in continuous GPS seconds"""
        return self.week * SECONDS_IN_WEEK + self.toes

    @property
    def toc(self) -> float:
        """Time of clock in continuous GPS seconds"""
        return self.week * SECONDS_IN_WEEK + self.tocs


@dataclass
class ObservationEpoch:
    """Synchronized rover and master observations of one epoch.

    Per-satellite arrays have length MAXSAT and are indexed by ``sat - 1``;
    a zero pseudorange means the satellite was not observed.

    Attributes
    ----------
    time : float
        Reception time in continuous GPS seconds
    pos_M : np.ndarray
        Master station ECEF position (m)
    pr1_R, pr1_M : np.ndarray
        Rover and master L1 code pseudoranges (m)
    pr2_R, pr2_M : np.ndarray
        Rover and master L2 code pseudoranges (m)
    snr_R, snr_M : np.ndarray
        Rover and master signal-to-noise ratios (dB-Hz)
    eph : list[Ephemeris]
        Broadcast ephemerides available at this epoch
    iono : np.ndarray, optional
        Klobuchar coefficients (alpha0..3, beta0..3)
    """
    time: float
    pos_M: np.ndarray = field(default_factory=lambda: np.zeros(3))
    pr1_R: np.ndarray = _sat_array()
    pr1_M: np.ndarray = _sat_array()
    pr2_R: np.ndarray = _sat_array()
    pr2_M: np.ndarray = _sat_array()
    snr_R: np.ndarray = _sat_array()
    snr_M: np.ndarray = _sat_array()
    eph: List[Ephemeris] = field(default_factory=list)
    iono: Optional[np.ndarray] = None

    def __post_init__(self):
        self.pos_M = np.asarray(self.pos_M, dtype=float)
        for name in ('pr1_R', 'pr1_M', 'pr2_R', 'pr2_M', 'snr_R', 'snr_M'):
            values = np.asarray(getattr(self, name), dtype=float)
            if values.shape != (MAXSAT,):
                raise ValueError(f"{name} must have shape ({MAXSAT},), got {values.shape}")
            setattr(self, name, values)

    def pseudoranges(self, frequency: int):
        """Rover and master pseudoranges on L1 (1) or L2 (2)"""
        if frequency == 1:
            return self.pr1_R, self.pr1_M
        if frequency == 2:
            return self.pr2_R, self.pr2_M
        raise ValueError(f"Unknown frequency: {frequency}")


@dataclass
class SatelliteGeometry:
    """Azimuth (deg), elevation (deg) and distance (m) seen from rover and master"""
    azR: np.ndarray = _sat_array()
    elR: np.ndarray = _sat_array()
    distR: np.ndarray = _sat_array()
    azM: np.ndarray = _sat_array()
    elM: np.ndarray = _sat_array()
    distM: np.ndarray = _sat_array()
    positions: Dict[int, np.ndarray] = field(default_factory=dict)


@dataclass
class SatelliteConfiguration:
    """Satellite configuration carried from one epoch to the next.

    ``conf_sat`` marks active satellites with +1, ``conf_cs`` marks cycle
    slips (always zero with code observations), ``pivot`` is the pivot
    reported at the last committed epoch (0 = no fix) and ``pivot_old`` the
    last nonzero pivot before it.
    """
    conf_sat: np.ndarray = _sat_array(np.int8)
    conf_cs: np.ndarray = _sat_array(np.int8)
    pivot: int = 0
    pivot_old: int = 0

    @property
    def active(self) -> np.ndarray:
        """Active satellite ids"""
        return np.flatnonzero(self.conf_sat == 1) + 1

    @property
    def previous_pivot(self) -> int:
        """Pivot the next epoch is compared with"""
        return self.pivot if self.pivot != 0 else self.pivot_old

    def copy(self) -> "SatelliteConfiguration":
        return SatelliteConfiguration(self.conf_sat.copy(), self.conf_cs.copy(),
                                      self.pivot, self.pivot_old)


@dataclass
class DOP:
    """Positional, horizontal and vertical dilution of precision"""
    pdop: float = np.nan
    hdop: float = np.nan
    vdop: float = np.nan


@dataclass
class DDSolution:
    """Output of the code double-difference least squares solver"""
    position: np.ndarray
    covariance: Optional[np.ndarray]
    dop: DOP
    n_iter: int = 0


@dataclass
class SatelliteSelection:
    """Active satellites of one epoch and the transitions from the previous one.

    Attributes
    ----------
    sats : np.ndarray
        Active satellite ids, ascending
    pivot : int
        Active satellite with the highest elevation (0 if none)
    reported_pivot : int
        ``pivot``, or 0 when there are too few satellites for a fix
    geometry : SatelliteGeometry
        Geometry computed for the candidates
    check_on, check_off, check_pivot, check_cs : bool
        Satellite addition, loss, pivot change and cycle slip
    """
    sats: np.ndarray
    pivot: int
    reported_pivot: int
    geometry: SatelliteGeometry
    check_on: bool = False
    check_off: bool = False
    check_pivot: bool = False
    check_cs: bool = False

    @property
    def nsat(self) -> int:
        return len(self.sats)


@dataclass
class EpochResult:
    """Outcome of processing one epoch.

    ``status`` is one of ``'init'`` (filter initialised), ``'fix'``
    (measurement update), ``'dynamics'`` (propagation only, too few
    satellites) or ``'failed'`` (epoch aborted, nothing committed).
    """
    time: float
    status: str
    position: Optional[np.ndarray] = None
    state: Optional[np.ndarray] = None
    covariance: Optional[np.ndarray] = None
    sats: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))
    pivot: int = 0
    check_on: bool = False
    check_off: bool = False
    check_pivot: bool = False
    check_cs: bool = False
    dop: DOP = field(default_factory=DOP)
    kdop: DOP = field(default_factory=DOP)
    error: Optional[str] = None

    @property
    def nsat(self) -> int:
        return len(self.sats)
