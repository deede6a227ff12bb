# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import List, Optional, Tuple

import numpy as np

from .errors import NumericalInstabilityError
from .progress import ProgressReporter, ensure_reporter
from .utils import EPS, working_copy

logger = logging.getLogger(__name__)


def lu(
    A: np.ndarray,
    pivot: bool = False,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> Tuple[np.ndarray, np.ndarray, List[int]]:
    """
    Doolittle LU factorisation of an m by n matrix A.

    Parameters
    ----------
    A : (m, n) ndarray
    pivot : bool
        False (the default used by the ``lu`` operation) eliminates in the
        natural row order, so ``L @ U == A``. True applies partial pivoting
        and ``A[perm] == L @ U``; `solve` uses this form.
    tol : float
        A pivot with ``|u| < tol`` is treated as zero.

    Returns
    -------
    L    : (m, m) ndarray, unit lower-triangular
    U    : (m, n) ndarray, upper-trapezoidal
    perm : list[int]
        Row i of ``L @ U`` is row ``perm[i]`` of A.

    Raises
    ------
    NumericalInstabilityError
        Unpivoted elimination met a zero pivot with non-zero entries
        below it, so the column cannot be eliminated without dividing
        by zero.
    """
    U = working_copy(A)
    reporter = ensure_reporter(progress)
    m, n = U.shape
    L = np.eye(m)
    perm = list(range(m))

    steps = min(m, n)
    for i in range(steps):
        if pivot:
            pivot_row = i + int(np.abs(U[i:, i]).argmax())
            if pivot_row != i:
                U[[i, pivot_row]] = U[[pivot_row, i]]
                L[[i, pivot_row], :i] = L[[pivot_row, i], :i]
                perm[i], perm[pivot_row] = perm[pivot_row], perm[i]

        below = U[i + 1 :, i]
        if abs(U[i, i]) < tol:
            if np.all(np.abs(below) < tol):
                # nothing left to eliminate in this column
                U[i + 1 :, i] = 0.0
                reporter.step(i + 1, steps, f"LU column {i + 1}/{steps}")
                continue
            raise NumericalInstabilityError(
                f"zero pivot at ({i}, {i}) in unpivoted LU; "
                "the matrix needs row exchanges",
                {"pivot_index": i, "pivot_value": float(U[i, i])},
            )

        factors = below / U[i, i]
        L[i + 1 :, i] = factors
        U[i + 1 :, i:] -= factors[:, None] * U[i, i:]
        U[i + 1 :, i] = 0.0
        reporter.step(i + 1, steps, f"LU column {i + 1}/{steps}")

    logger.debug("lu: %dx%d pivot=%s perm=%s", m, n, pivot, perm)
    return L, U, perm


def permutation_matrix(perm: List[int]) -> np.ndarray:
    """P such that ``P @ A == A[perm]``."""
    return np.eye(len(perm))[perm]
