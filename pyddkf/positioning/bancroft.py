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

"""Bancroft closed-form position and clock bias from four or more pseudoranges

The Bancroft matrix has one row per satellite, ``(Xs, Ys, Zs, pr + c*dtS)``,
with satellite coordinates at transmission time. The solution is the
4-vector ``(X, Y, Z, c*dtR)``. It is used for the coarse position that
initialises the Kalman filter.

Each of the two iterations rotates the original satellite coordinates for
Earth rotation during the signal travel time; the second rotation replaces
the first instead of being applied on top of it.

References:
    Bancroft, S. (1985), An algebraic solution of the GPS equations,
    IEEE Transactions on Aerospace and Electronic Systems, 21(1)
"""

import logging

import numpy as np
from numba import njit
from scipy import linalg

from ..core.constants import CLIGHT, OMGE, TRAVELTIME_GUESS
from ..core.exceptions import DegenerateGeometryError
from ..coordinate.rotation import rotate_z

logger = logging.getLogger(__name__)

N_ITER = 2


@njit(cache=True, fastmath=True)
def lorentz(u, v):
    """Lorentz inner product <u, v> = u1 v1 + u2 v2 + u3 v3 - u4 v4"""
    return u[0] * v[0] + u[1] * v[1] + u[2] * v[2] - u[3] * v[3]


def rotate_rows(matB: np.ndarray, pos: np.ndarray, first: bool) -> np.ndarray:
    """Earth rotation correction of the satellite X/Y coordinates"""
    rotated = matB.copy()
    for s, row in enumerate(matB):
        if first:
            traveltime = TRAVELTIME_GUESS
        else:
            traveltime = np.linalg.norm(row[:3] - pos[:3]) / CLIGHT
        rotated[s, 0], rotated[s, 1] = rotate_z(row[0], row[1], traveltime * OMGE)
    return rotated


def generalized_solve(B: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """
    Least-squares solution of B x = rhs (exact solution when B is square)

    Raises:
    -------
    DegenerateGeometryError
        If B does not have full column rank
    """
    try:
        x, _, rank, _ = linalg.lstsq(B, rhs)
    except (linalg.LinAlgError, ValueError) as e:
        raise DegenerateGeometryError(f"Bancroft matrix inversion failed: {e}") from e
    if rank < B.shape[1] or not np.all(np.isfinite(x)):
        raise DegenerateGeometryError(f"Bancroft matrix is rank deficient (rank {rank})")
    return x


def bancroft_candidates(B: np.ndarray) -> np.ndarray:
    """
    The two algebraic solutions of the Bancroft equations

    Parameters:
    -----------
    B : np.ndarray, shape (N, 4)
        Bancroft matrix (already corrected for Earth rotation)

    Returns:
    --------
    np.ndarray, shape (2, 4)
        Candidate (X, Y, Z, c*dtR) vectors
    """
    nsat = B.shape[0]
    alpha = np.array([lorentz(row, row) for row in B]) / 2.0
    sol = generalized_solve(B, np.column_stack([np.ones(nsat), alpha]))
    BBBe, BBBalpha = sol[:, 0], sol[:, 1]

    a = lorentz(BBBe, BBBe)
    b = lorentz(BBBe, BBBalpha) - 1.0
    c = lorentz(BBBalpha, BBBalpha)
    disc = b * b - a * c

    if a == 0.0 or not np.isfinite(disc):
        raise DegenerateGeometryError("Degenerate Bancroft quadratic")
    if disc < 0.0:
        raise DegenerateGeometryError(f"Bancroft quadratic has no real root (discriminant {disc:.3e})")

    root = np.sqrt(disc)
    candidates = np.array([r * BBBe + BBBalpha for r in ((-b - root) / a, (-b + root) / a)])
    candidates[:, 3] = -candidates[:, 3]
    return candidates


def candidate_residuals(B: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """Sum over all rows of |observed - (range + clock)| for each candidate"""
    scores = []
    for cand in candidates:
        calc = np.linalg.norm(B[:, :3] - cand[:3], axis=1) + cand[3]
        scores.append(np.sum(np.abs(B[:, 3] - calc)))
    return np.array(scores)


def bancroft(matB: np.ndarray) -> np.ndarray:
    """
    Bancroft algorithm for the computation of ground coordinates
    having at least 4 visible satellites.

    Parameters:
    -----------
    matB : np.ndarray, shape (N, 4)
        Bancroft matrix, rows (Xs, Ys, Zs, pr + c*dtS)

    Returns:
    --------
    pos : np.ndarray, shape (4,)
        Receiver position (X, Y, Z) and clock bias times speed of light

    Raises:
    -------
    ValueError
        If the matrix does not have 4 columns and at least 4 rows
    DegenerateGeometryError
        If the satellite geometry makes the matrix singular
    """
    matB = np.asarray(matB, dtype=float)
    if matB.ndim != 2 or matB.shape[1] != 4:
        raise ValueError(f"Bancroft matrix must have shape (N, 4), got {matB.shape}")
    if matB.shape[0] < 4:
        raise ValueError(f"At least 4 satellites are required, got {matB.shape[0]}")

    pos = np.zeros(4)
    for iteration in range(N_ITER):
        B = rotate_rows(matB, pos, first=(iteration == 0))
        candidates = bancroft_candidates(B)
        scores = candidate_residuals(B, candidates)
        pos = candidates[np.argmin(scores)]
        logger.trace("Bancroft iteration %d: residual sums %s", iteration + 1, scores)

    return pos


def bancroft_position(XS: np.ndarray, dtS: np.ndarray, prR: np.ndarray) -> tuple:
    """
    Bancroft solution from one receiver

    Parameters:
    -----------
    XS : np.ndarray, shape (N, 3)
        Satellite ECEF positions at transmission time (m)
    dtS : np.ndarray, shape (N,)
        Satellite clock offsets (s)
    prR : np.ndarray, shape (N,)
        Receiver code pseudoranges (m)

    Returns:
    --------
    XR : np.ndarray, shape (3,)
        Receiver ECEF position (m)
    dtR : float
        Receiver clock offset (s)
    """
    XS = np.asarray(XS, dtype=float).reshape(-1, 3)
    matB = np.column_stack([XS, np.ravel(prR) + CLIGHT * np.ravel(dtS)])
    b = bancroft(matB)
    return b[:3], b[3] / CLIGHT
