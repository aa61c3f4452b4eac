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

"""Active satellite set, pivot selection and configuration transitions"""

import logging
from typing import Callable, Sequence, Tuple

import numpy as np

from ..core.constants import MAXSAT, MIN_NSAT
from ..core.data_structures import (ObservationEpoch, SatelliteConfiguration,
                                    SatelliteGeometry, SatelliteSelection)
from ..coordinate.aer_transforms import topocent
from ..satellite.correction import correct_satellite

logger = logging.getLogger(__name__)


class SatelliteSetManager:
    """
    Select the satellites used at each epoch and detect changes of the set

    Parameters:
    -----------
    cutoff : float
        Elevation cutoff (deg)
    snr_threshold : float
        Rover SNR threshold (dB-Hz)
    frequencies : sequence of int
        Code observables used: (1,), (2,) or (1, 2)
    min_nsat : int
        Minimum number of satellites for a fix
    correct : callable
        ``(eph, sat, time, pr) -> (pos, dts) or None``
    topocentric : callable
        ``(X, sat_pos) -> (az, el, dist)``
    """

    def __init__(self,
                 cutoff: float,
                 snr_threshold: float,
                 frequencies: Sequence[int] = (1,),
                 min_nsat: int = MIN_NSAT,
                 correct: Callable = correct_satellite,
                 topocentric: Callable = topocent):
        self.cutoff = cutoff
        self.snr_threshold = snr_threshold
        self.frequencies = tuple(frequencies)
        self.min_nsat = min_nsat
        self.correct = correct
        self.topocentric = topocentric

    def visible_satellites(self, epoch: ObservationEpoch) -> np.ndarray:
        """Satellites observed by both receivers on every configured frequency"""
        visible = np.ones(MAXSAT, dtype=bool)
        for f in self.frequencies:
            pr_R, pr_M = epoch.pseudoranges(f)
            visible &= (pr_R != 0) & (pr_M != 0)
        return np.flatnonzero(visible) + 1

    def compute_geometry(self, epoch: ObservationEpoch, approx_pos: np.ndarray,
                         sats: Sequence[int]) -> Tuple[SatelliteGeometry, list]:
        """
        Azimuth, elevation and distance of the candidate satellites

        Parameters:
        -----------
        epoch : ObservationEpoch
            Current observations
        approx_pos : np.ndarray
            Approximate rover ECEF position (m)
        sats : sequence of int
            Candidate satellites

        Returns:
        --------
        geometry : SatelliteGeometry
            Geometry of the satellites with a valid position
        bad : list of int
            Satellites without ephemeris, below the cutoff or below the SNR threshold
        """
        geometry = SatelliteGeometry()
        bad = []
        pr_R, _ = epoch.pseudoranges(self.frequencies[0])

        for sat in sats:
            i = sat - 1
            corrected = self.correct(epoch.eph, int(sat), epoch.time, float(pr_R[i]))
            if corrected is None:
                logger.debug("Satellite %d excluded: no ephemeris", sat)
                bad.append(int(sat))
                continue

            pos = corrected[0]
            geometry.positions[int(sat)] = pos
            geometry.azR[i], geometry.elR[i], geometry.distR[i] = self.topocentric(approx_pos, pos)
            geometry.azM[i], geometry.elM[i], geometry.distM[i] = self.topocentric(epoch.pos_M, pos)
            logger.trace("Satellite %d: az %.1f el %.1f dist %.1f",
                         sat, geometry.azR[i], geometry.elR[i], geometry.distR[i])

            if geometry.elR[i] < self.cutoff:
                logger.debug("Satellite %d excluded: elevation %.2f below cutoff", sat, geometry.elR[i])
                bad.append(int(sat))
            elif epoch.snr_R[i] < self.snr_threshold:
                logger.debug("Satellite %d excluded: SNR %.1f below threshold", sat, epoch.snr_R[i])
                bad.append(int(sat))

        return geometry, bad

    def select(self, epoch: ObservationEpoch, approx_pos: np.ndarray,
               configuration: SatelliteConfiguration) -> SatelliteSelection:
        """
        Active satellites, pivot and transition flags for one epoch

        The configuration is not modified; see :meth:`commit`.
        """
        visible = self.visible_satellites(epoch)
        geometry, bad = self.compute_geometry(epoch, approx_pos, visible)
        sats = np.array([s for s in visible if s not in bad], dtype=int)

        pivot = 0
        if len(sats) > 0:
            # argmax keeps the lowest id on ties
            pivot = int(sats[np.argmax(geometry.elR[sats - 1])])

        reported_pivot = pivot if len(sats) >= self.min_nsat else 0

        n_old = len(configuration.active)
        selection = SatelliteSelection(
            sats=sats,
            pivot=pivot,
            reported_pivot=reported_pivot,
            geometry=geometry,
            check_on=len(sats) > n_old,
            check_off=len(sats) < n_old,
            check_pivot=reported_pivot != configuration.previous_pivot,
            check_cs=False,
        )

        logger.debug("Epoch %.3f: %d satellites %s, pivot %d (on=%s off=%s pivot=%s)",
                     epoch.time, selection.nsat, sats.tolist(), reported_pivot,
                     selection.check_on, selection.check_off, selection.check_pivot)
        return selection

    @staticmethod
    def commit(configuration: SatelliteConfiguration, selection: SatelliteSelection):
        """Make the selection the configuration the next epoch is compared with"""
        conf_sat = np.zeros(MAXSAT, dtype=np.int8)
        conf_sat[selection.sats - 1] = 1
        configuration.conf_sat = conf_sat
        configuration.conf_cs = np.zeros(MAXSAT, dtype=np.int8)
        if configuration.pivot != 0:
            configuration.pivot_old = configuration.pivot
        configuration.pivot = selection.reported_pivot
