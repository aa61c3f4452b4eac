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

"""Code double-difference weighted least squares positioning

Double differences are formed against a pivot satellite:

    DD_i = (P_R^i - P_M^i) - (P_R^p - P_M^p)

with observed-minus-computed values corrected for tropospheric delay
(Saastamoinen) and, when broadcast parameters are available, ionospheric
delay (Klobuchar). The DD covariance is the pivot-referenced form
``diag(q_i) + q_p``, with per-satellite variance factors ``q`` summed over
rover and master.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np
from scipy import linalg

from ..core.data_structures import DDSolution, DOP
from ..core.exceptions import DegenerateGeometryError
from ..core.time import gps_seconds_to_week_tow
from ..coordinate.aer_transforms import topocent
from ..coordinate.transforms import ecef2llh
from ..gnss.ionosphere import ionosphere_correction
from ..gnss.troposphere import troposphere_correction
from ..satellite.correction import correct_satellite
from .dop import geometry_dop

logger = logging.getLogger(__name__)

MAX_ITER = 10
CONV_THRESHOLD = 1e-4  # m
COND_LIMIT = 1e12

# SNR weighting parameters (dB-Hz)
SNR_A = 30.0
SNR_0 = 10.0
SNR_1 = 50.0
SNR_SLOPE = 30.0


def snr_weight(snr: np.ndarray) -> np.ndarray:
    """Variance factor from signal-to-noise ratio (1 above SNR_1)"""
    snr = np.asarray(snr, dtype=float)
    q = 10.0 ** (-(snr - SNR_1) / SNR_SLOPE) * (
        (SNR_A / 10.0 ** (-(SNR_0 - SNR_1) / SNR_SLOPE) - 1.0) / (SNR_0 - SNR_1) * (snr - SNR_1) + 1.0)
    return np.where(snr >= SNR_1, 1.0, q)


def variance_factors(el: np.ndarray, snr: np.ndarray, weighting: str) -> np.ndarray:
    """
    Per-satellite variance factors of one receiver

    Parameters:
    -----------
    el : np.ndarray
        Elevations (deg)
    snr : np.ndarray
        Signal-to-noise ratios (dB-Hz)
    weighting : str
        'same', 'elevation' (1/sin^2 el) or 'snr'
    """
    if weighting == 'same':
        return np.ones(len(el))
    if weighting == 'elevation':
        return 1.0 / np.sin(np.radians(el)) ** 2
    if weighting == 'snr':
        return snr_weight(snr)
    raise ValueError(f"Unknown weighting: {weighting}")


def dd_covariance(q: np.ndarray, pivot_index: int) -> np.ndarray:
    """Pivot-referenced DD cofactor matrix: diag(q_i) + q_p for i != p"""
    q = np.asarray(q, dtype=float)
    q_others = np.delete(q, pivot_index)
    return np.diag(q_others) + q[pivot_index] * np.ones((len(q_others), len(q_others)))


def _satellite_positions(eph, sats, time, pr, correct):
    positions = {}
    for sat, p in zip(sats, pr):
        result = correct(eph, int(sat), time, float(p))
        if result is None:
            logger.debug("Satellite %d dropped from DD solution: no position", sat)
            continue
        positions[int(sat)] = result[0]
    return positions


def _computed_ranges(pos, llh, sat_pos, tow, iono, frequency):
    """Geometric range, unit vectors, elevations and modelled delays"""
    n = len(sat_pos)
    rho = np.zeros(n)
    u = np.zeros((n, 3))
    el = np.zeros(n)
    delay = np.zeros(n)
    for i, xs in enumerate(sat_pos):
        az, el[i], rho[i] = topocent(pos, xs)
        u[i] = (xs - pos) / rho[i]
        delay[i] = troposphere_correction(el[i], llh)
        delay[i] += ionosphere_correction(llh, az, el[i], tow, iono, frequency)
    return rho, u, el, delay


def code_double_diff(pos_R: np.ndarray,
                     pr_R: Sequence[float],
                     snr_R: Sequence[float],
                     pos_M: np.ndarray,
                     pr_M: Sequence[float],
                     snr_M: Sequence[float],
                     time: float,
                     sats: Sequence[int],
                     pivot: int,
                     eph,
                     iono: Optional[np.ndarray] = None,
                     frequency: int = 1,
                     weighting: str = 'elevation',
                     max_iter: int = MAX_ITER,
                     correct: Callable = correct_satellite) -> DDSolution:
    """
    Rover position by code double differences with respect to a master station

    Parameters:
    -----------
    pos_R : np.ndarray
        Approximate rover ECEF position (m)
    pr_R, snr_R : array_like
        Rover pseudoranges (m) and SNR (dB-Hz), one per satellite of ``sats``
    pos_M : np.ndarray
        Master station ECEF position (m)
    pr_M, snr_M : array_like
        Master pseudoranges (m) and SNR (dB-Hz)
    time : float
        Reception time (GPS seconds)
    sats : array_like
        Satellite PRNs
    pivot : int
        Pivot satellite PRN (must be in ``sats``)
    eph : list of Ephemeris
        Broadcast ephemerides
    iono : np.ndarray, optional
        Klobuchar parameters; no ionospheric correction when None
    frequency : int
        1 for L1, 2 for L2
    weighting : str
        Observation weighting ('same', 'elevation' or 'snr')
    max_iter : int
        Maximum Gauss-Newton iterations
    correct : callable
        Satellite position provider ``(eph, sat, time, pr) -> (pos, dts) or None``

    Returns:
    --------
    DDSolution
        Position, covariance (None without redundancy) and geometric DOP

    Raises:
    -------
    DegenerateGeometryError
        Fewer than three DD observations or singular normal matrix
    """
    sats = np.asarray(sats, dtype=int)
    pr_R = np.asarray(pr_R, dtype=float)
    pr_M = np.asarray(pr_M, dtype=float)
    snr_R = np.asarray(snr_R, dtype=float)
    snr_M = np.asarray(snr_M, dtype=float)
    pos_M = np.asarray(pos_M, dtype=float)
    if not (len(sats) == len(pr_R) == len(pr_M) == len(snr_R) == len(snr_M)):
        raise ValueError("Observation arrays must have one entry per satellite")
    if pivot not in sats:
        raise ValueError(f"Pivot {pivot} is not among the satellites {sats.tolist()}")

    posR_sat = _satellite_positions(eph, sats, time, pr_R, correct)
    posM_sat = _satellite_positions(eph, sats, time, pr_M, correct)
    keep = np.array([s in posR_sat and s in posM_sat for s in sats], dtype=bool)
    if pivot not in sats[keep]:
        raise DegenerateGeometryError(f"No position for pivot satellite {pivot}")

    sats, pr_R, pr_M, snr_R, snr_M = sats[keep], pr_R[keep], pr_M[keep], snr_R[keep], snr_M[keep]
    n_dd = len(sats) - 1
    if n_dd < 3:
        raise DegenerateGeometryError(f"Not enough DD observations: {n_dd}")

    ip = int(np.flatnonzero(sats == pivot)[0])
    others = np.flatnonzero(sats != pivot)
    XS_R = np.array([posR_sat[s] for s in sats])
    XS_M = np.array([posM_sat[s] for s in sats])

    _, tow = gps_seconds_to_week_tow(time)
    llh_M = ecef2llh(pos_M)
    rho_M, _, el_M, delay_M = _computed_ranges(pos_M, llh_M, XS_M, tow, iono, frequency)

    x = np.asarray(pos_R, dtype=float).copy()
    for n_iter in range(1, max_iter + 1):
        llh_R = ecef2llh(x)
        rho_R, u_R, el_R, delay_R = _computed_ranges(x, llh_R, XS_R, tow, iono, frequency)

        sd = (pr_R - pr_M) - ((rho_R + delay_R) - (rho_M + delay_M))
        y = sd[others] - sd[ip]
        A = -u_R[others] + u_R[ip]

        q = variance_factors(el_R, snr_R, weighting) + variance_factors(el_M, snr_M, weighting)
        W = linalg.inv(dd_covariance(q, ip))

        N = A.T @ W @ A
        cond = np.linalg.cond(N) if np.all(np.isfinite(N)) else np.inf
        if not np.isfinite(cond) or cond > COND_LIMIT:
            raise DegenerateGeometryError("Singular DD normal matrix")
        try:
            dx = linalg.solve(N, A.T @ W @ y, assume_a='pos')
        except linalg.LinAlgError as e:
            raise DegenerateGeometryError(f"Singular DD normal matrix: {e}") from e

        x = x + dx
        if np.linalg.norm(dx) < CONV_THRESHOLD:
            break

    logger.trace("DD solution after %d iterations, pivot %d, %d DD", n_iter, pivot, n_dd)

    covariance = None
    if n_dd > 3:
        v = y - A @ dx
        sigma0_sq = float(v @ W @ v) / (n_dd - 3)
        covariance = sigma0_sq * linalg.inv(N)

    try:
        dop = geometry_dop(A, x)
    except DegenerateGeometryError:
        dop = DOP()

    return DDSolution(position=x, covariance=covariance, dop=dop, n_iter=n_iter)
