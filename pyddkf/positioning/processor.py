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

"""Epoch-by-epoch code double-difference Kalman processing"""

import dataclasses
import logging
from typing import Callable, Iterable, List, Optional

import numpy as np

from ..core.config import KalmanConfig
from ..core.data_structures import DDSolution, DOP, EpochResult, ObservationEpoch, SatelliteSelection
from ..core.exceptions import DegenerateGeometryError
from ..coordinate.aer_transforms import topocent
from ..satellite.correction import correct_satellite, satellite_at_transmission
from .bancroft import bancroft_position
from .code_double_diff import code_double_diff
from .kalman import EpochKalmanFilter, FilterContext, position_indices
from .satellite_set import SatelliteSetManager

logger = logging.getLogger(__name__)


class KalmanCodeDDProcessor:
    """
    Rover positioning by Kalman filtering of code double-difference fixes

    The first usable epoch initialises the filter from a Bancroft solution
    refined by DD least squares; each following epoch selects the active
    satellites, solves the DD position and runs the filter.

    Parameters:
    -----------
    config : KalmanConfig
        Processing parameters
    context : FilterContext, optional
        Filter state to continue from (a new one is created if None)
    correct : callable
        Satellite position provider ``(eph, sat, time, pr) -> (pos, dts) or None``
    topocentric : callable
        ``(X, sat_pos) -> (az, el, dist)``
    """

    def __init__(self, config: KalmanConfig,
                 context: Optional[FilterContext] = None,
                 correct: Callable = correct_satellite,
                 topocentric: Callable = topocent):
        self.config = config
        self.context = context if context is not None else FilterContext.create(config.order, config.interval)
        if self.context.order != config.order:
            raise ValueError(f"Context order {self.context.order} differs from configuration order {config.order}")
        self.correct = correct
        self.manager = SatelliteSetManager(config.cutoff, config.snr_threshold, config.frequencies,
                                           config.min_nsat, correct, topocentric)
        self.kalman = EpochKalmanFilter(config)

    def _solve_dd(self, epoch: ObservationEpoch, approx_pos: np.ndarray,
                  selection: SatelliteSelection) -> DDSolution:
        f = self.config.frequencies[0]
        pr_R, pr_M = epoch.pseudoranges(f)
        i = selection.sats - 1
        return code_double_diff(approx_pos, pr_R[i], epoch.snr_R[i], epoch.pos_M, pr_M[i], epoch.snr_M[i],
                                epoch.time, selection.sats, selection.pivot, epoch.eph, epoch.iono,
                                frequency=f, weighting=self.config.weighting, correct=self.correct)

    def _coarse_position(self, epoch: ObservationEpoch) -> np.ndarray:
        """Bancroft position from the rover code observations"""
        pr_R, _ = epoch.pseudoranges(self.config.frequencies[0])
        XS, dtS, prR = [], [], []
        for sat in self.manager.visible_satellites(epoch):
            tx = satellite_at_transmission(epoch.eph, int(sat), epoch.time, float(pr_R[sat - 1]))
            if tx is None:
                continue
            XS.append(tx[0])
            dtS.append(tx[1])
            prR.append(pr_R[sat - 1])

        if len(XS) < 4:
            raise DegenerateGeometryError(f"Only {len(XS)} satellites with ephemeris for Bancroft")

        pos, dtR = bancroft_position(np.array(XS), np.array(dtS), np.array(prR))
        logger.debug("Bancroft position %s, receiver clock %.3e s", np.round(pos, 3), dtR)
        return pos

    def initialize(self, epoch: ObservationEpoch) -> EpochResult:
        """
        Initialise the filter on one epoch

        Returns:
        --------
        EpochResult
            Status 'init', or 'failed' if the epoch cannot provide a position
        """
        cfg = self.config
        try:
            pos = self._coarse_position(epoch)
            selection = self.manager.select(epoch, pos, self.context.sat_config)
            dd = None
            if selection.nsat >= cfg.min_nsat:
                dd = self._solve_dd(epoch, pos, selection)
        except DegenerateGeometryError as e:
            logger.warning("Initialisation failed at epoch %.3f: %s", epoch.time, e)
            return EpochResult(time=epoch.time, status='failed', error=str(e))

        if dd is not None:
            pos = dd.position
        cov_pos = dd.covariance if dd is not None and dd.covariance is not None else cfg.sigmaq0 * np.eye(3)

        self.context.initialize(pos, cov_pos, cfg.sigmaq0_dyn)
        selection = dataclasses.replace(selection, check_on=False, check_off=False,
                                        check_pivot=False, check_cs=False)
        SatelliteSetManager.commit(self.context.sat_config, selection)

        logger.info("Filter initialised at epoch %.3f with %d satellites, pivot %d",
                    epoch.time, selection.nsat, selection.reported_pivot)

        return EpochResult(time=epoch.time, status='init',
                           position=self.context.position.copy(),
                           state=self.context.Xhat_t_t.copy(),
                           covariance=self.context.Cee.copy(),
                           sats=selection.sats, pivot=selection.reported_pivot,
                           dop=dd.dop if dd is not None else DOP())

    def process_epoch(self, epoch: ObservationEpoch) -> EpochResult:
        """
        Process one epoch, initialising the filter when needed

        A degenerate geometry aborts the epoch: the error is logged, nothing
        is committed and a 'failed' result is returned.
        """
        if not self.context.initialized:
            return self.initialize(epoch)

        cfg = self.config
        approx_pos = self.context.predicted_position
        selection = None
        dd = None
        try:
            selection = self.manager.select(epoch, approx_pos, self.context.sat_config)
            if selection.nsat >= cfg.min_nsat:
                dd = self._solve_dd(epoch, approx_pos, selection)
            update = self.kalman.update(self.context, selection.nsat, dd)
        except DegenerateGeometryError as e:
            nsat = selection.nsat if selection is not None else 0
            pivot = selection.pivot if selection is not None else 0
            logger.error("Epoch %.3f failed with %d satellites, pivot %d: %s", epoch.time, nsat, pivot, e)
            return EpochResult(time=epoch.time, status='failed',
                               sats=selection.sats if selection is not None else np.zeros(0, dtype=int),
                               pivot=pivot, error=str(e))

        self.context.commit(update, selection)

        idx = position_indices(self.context.order)
        result = EpochResult(time=epoch.time,
                             status='fix' if update.measured else 'dynamics',
                             position=update.Xhat_t_t[idx].copy(),
                             state=update.Xhat_t_t.copy(),
                             covariance=update.Cee.copy(),
                             sats=selection.sats,
                             pivot=selection.reported_pivot,
                             check_on=selection.check_on,
                             check_off=selection.check_off,
                             check_pivot=selection.check_pivot,
                             check_cs=selection.check_cs,
                             kdop=update.kdop)
        if dd is not None:
            result.dop = dd.dop
        return result

    def run(self, epochs: Iterable[ObservationEpoch]) -> List[EpochResult]:
        """Process a sequence of epochs"""
        results = [self.process_epoch(epoch) for epoch in epochs]
        n_failed = sum(r.status == 'failed' for r in results)
        logger.info("Processed %d epochs, %d failed", len(results), n_failed)
        return results
