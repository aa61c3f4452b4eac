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

"""Kalman filter on code double-difference positions

The state holds ``order`` terms per axis (position, velocity, acceleration)
laid out axis by axis: ``[X, (vX, aX), Y, (vY, aY), Z, (vZ, aZ)]``. The
double-difference least squares position is the filter observation.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy import linalg

from ..core.config import KalmanConfig
from ..core.data_structures import DDSolution, DOP, SatelliteConfiguration, SatelliteSelection
from ..core.exceptions import DegenerateGeometryError
from ..coordinate.transforms import local2global_cov
from .dop import filter_dop
from .satellite_set import SatelliteSetManager

logger = logging.getLogger(__name__)


def position_indices(order: int) -> np.ndarray:
    """State indices of X, Y and Z"""
    return np.array([0, order, 2 * order])


def transition_matrix(order: int, interval: float) -> np.ndarray:
    """
    Block diagonal transition matrix, one block per axis

    Parameters:
    -----------
    order : int
        1 static, 2 constant velocity, 3 constant acceleration
    interval : float
        Time between epochs (s)
    """
    dt = interval
    if order == 1:
        block = np.eye(1)
    elif order == 2:
        block = np.array([[1.0, dt],
                          [0.0, 1.0]])
    elif order == 3:
        block = np.array([[1.0, dt, 0.5 * dt**2],
                          [0.0, 1.0, dt],
                          [0.0, 0.0, 1.0]])
    else:
        raise ValueError(f"Dynamic model order must be 1, 2 or 3: {order}")
    return linalg.block_diag(block, block, block)


def measurement_matrix(order: int) -> np.ndarray:
    """Selector of the position terms"""
    H = np.zeros((3, 3 * order))
    H[np.arange(3), position_indices(order)] = 1.0
    return H


def process_noise(order: int, sigmaq_vE: float, sigmaq_vN: float, sigmaq_vU: float,
                  position: np.ndarray) -> np.ndarray:
    """
    Process noise on the highest-order term of each axis

    Parameters:
    -----------
    order : int
        Dynamic model order
    sigmaq_vE, sigmaq_vN, sigmaq_vU : float
        Local East/North/Up variances
    position : np.ndarray
        ECEF position where the local frame is defined (m)

    Returns:
    --------
    Cvv : np.ndarray
        (3*order, 3*order) process noise covariance, zero for order 1
    """
    n = 3 * order
    Cvv = np.zeros((n, n))
    if order == 1:
        return Cvv
    Cvv_local = np.diag([sigmaq_vE, sigmaq_vN, sigmaq_vU])
    hi = position_indices(order) + order - 1
    Cvv[np.ix_(hi, hi)] = local2global_cov(Cvv_local, position)
    return Cvv


@dataclass
class KalmanUpdate:
    """Result of one filter step, applied by FilterContext.commit"""
    Xhat_t_t: np.ndarray
    X_t1_t: np.ndarray
    Cee: np.ndarray
    measured: bool
    kdop: DOP = field(default_factory=DOP)


@dataclass
class FilterContext:
    """State of one processing run

    Attributes
    ----------
    order : int
        Dynamic model order
    T : np.ndarray
        Transition matrix
    Xhat_t_t : np.ndarray
        Estimated state at the last committed epoch
    X_t1_t : np.ndarray
        State predicted for the next epoch
    Cee : np.ndarray
        Error covariance of Xhat_t_t
    sat_config : SatelliteConfiguration
        Satellite configuration and pivot history
    initialized : bool
        False until the first position is available
    """
    order: int
    T: np.ndarray
    Xhat_t_t: np.ndarray
    X_t1_t: np.ndarray
    Cee: np.ndarray
    sat_config: SatelliteConfiguration = field(default_factory=SatelliteConfiguration)
    initialized: bool = False

    @classmethod
    def create(cls, order: int, interval: float) -> "FilterContext":
        n = 3 * order
        return cls(order=order,
                   T=transition_matrix(order, interval),
                   Xhat_t_t=np.zeros(n),
                   X_t1_t=np.zeros(n),
                   Cee=np.zeros((n, n)))

    @property
    def position(self) -> np.ndarray:
        """Estimated ECEF position"""
        return self.Xhat_t_t[position_indices(self.order)]

    @property
    def predicted_position(self) -> np.ndarray:
        """ECEF position predicted for the next epoch"""
        return self.X_t1_t[position_indices(self.order)]

    def initialize(self, position: np.ndarray, cov_pos: np.ndarray, sigmaq0_dyn: float):
        """
        Start the filter at a position with zero velocity and acceleration

        Parameters:
        -----------
        position : np.ndarray
            ECEF position (m)
        cov_pos : np.ndarray
            (3, 3) position covariance (m^2)
        sigmaq0_dyn : float
            Variance of the velocity/acceleration terms
        """
        idx = position_indices(self.order)
        n = 3 * self.order
        X = np.zeros(n)
        X[idx] = position
        Cee = sigmaq0_dyn * np.eye(n)
        Cee[np.ix_(idx, idx)] = cov_pos

        self.Xhat_t_t = X
        self.X_t1_t = self.T @ X
        self.Cee = Cee
        self.initialized = True

    def commit(self, update: KalmanUpdate, selection: Optional[SatelliteSelection] = None):
        """Replace state and covariance (and satellite configuration) with the update"""
        self.Xhat_t_t = update.Xhat_t_t
        self.X_t1_t = update.X_t1_t
        self.Cee = update.Cee
        if selection is not None:
            SatelliteSetManager.commit(self.sat_config, selection)


class EpochKalmanFilter:
    """Measurement update or propagation of a FilterContext"""

    def __init__(self, config: KalmanConfig):
        self.config = config

    def update(self, context: FilterContext, nsat: int,
               measurement: Optional[DDSolution] = None) -> KalmanUpdate:
        """
        One filter step; the context is not modified

        Parameters:
        -----------
        context : FilterContext
            Current filter state
        nsat : int
            Number of active satellites
        measurement : DDSolution, optional
            Position observation, required when ``nsat >= min_nsat``

        Returns:
        --------
        KalmanUpdate
            New estimate, prediction and covariance

        Raises:
        -------
        DegenerateGeometryError
            If the innovation covariance is singular
        """
        cfg = self.config
        order = context.order
        T = context.T
        idx = position_indices(order)

        if nsat >= cfg.min_nsat:
            if measurement is None:
                raise ValueError("A position observation is required with enough satellites")

            Cnn = measurement.covariance
            if Cnn is None:
                logger.warning("No DD covariance available, using sigmaq0 = %g", cfg.sigmaq0)
                Cnn = cfg.sigmaq0 * np.eye(3)

            H = measurement_matrix(order)
            I = np.eye(3 * order)
            Cvv = process_noise(order, cfg.sigmaq_vE, cfg.sigmaq_vN, cfg.sigmaq_vU,
                                context.predicted_position)

            K = T @ context.Cee @ T.T + Cvv
            S = H @ K @ H.T + Cnn
            if not np.all(np.isfinite(S)):
                raise DegenerateGeometryError("Innovation covariance is not finite")
            try:
                G = linalg.solve(S.T, (K @ H.T).T).T
            except linalg.LinAlgError as e:
                raise DegenerateGeometryError(f"Singular innovation covariance: {e}") from e

            IGH = I - G @ H
            Xhat_t_t = IGH @ context.X_t1_t + G @ np.asarray(measurement.position, dtype=float)
            Cee = IGH @ K
            measured = True
        else:
            # motion by dynamics only
            Xhat_t_t = context.X_t1_t.copy()
            Cee = T @ context.Cee @ T.T
            measured = False

        X_t1_t = T @ Xhat_t_t
        kdop = filter_dop(Cee[np.ix_(idx, idx)], Xhat_t_t[idx])
        return KalmanUpdate(Xhat_t_t=Xhat_t_t, X_t1_t=X_t1_t, Cee=Cee, measured=measured, kdop=kdop)
