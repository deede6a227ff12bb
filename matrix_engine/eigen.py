# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import warnings
from typing import NamedTuple, Optional

import numpy as np

from .errors import (
    DimensionMismatchError,
    InvalidParameterError,
    NumericalInstabilityWarning,
)
from .progress import ProgressReporter, ensure_reporter
from .qr import qr
from .utils import EPS, MAX_EIGEN_ITERATIONS, working_copy

logger = logging.getLogger(__name__)


class EigenResult(NamedTuple):
    eigenvalues: np.ndarray
    iterations: int
    converged: bool


def eigenvalues(
    A: np.ndarray,
    max_iter: int = MAX_EIGEN_ITERATIONS,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> EigenResult:
    """
    Estimate the eigenvalues of a square matrix with the unshifted QR
    algorithm.

    Each sweep factors A_k = Q R and sets A_{k+1} = R Q, which is similar
    to A_k. Iteration stops once every sub-diagonal entry satisfies
    ``|A[i+1, i]| <= tol`` or after `max_iter` sweeps; the eigenvalue
    estimates are read off the diagonal.

    Complex-conjugate pairs leave a 2x2 block on the diagonal that never
    becomes triangular. In that case the full `max_iter` sweeps run, the
    returned diagonal is inaccurate, ``converged`` is False and a
    `NumericalInstabilityWarning` is issued.

    Parameters
    ----------
    A : (n,n) ndarray
        Real square matrix.
    max_iter : int
        Maximum number of QR sweeps.
    tol : float
        Convergence threshold on the sub-diagonal.

    Returns
    -------
    EigenResult(eigenvalues, iterations, converged)
    """
    T = working_copy(A)
    m, n = T.shape
    if m != n:
        raise DimensionMismatchError(
            f"dimension mismatch: eigenvalues need a square matrix, got {m}x{n}",
            {"rows": m, "cols": n},
        )
    if max_iter < 1:
        raise InvalidParameterError(
            f"max_iter must be at least 1, got {max_iter}", {"max_iter": max_iter}
        )
    reporter = ensure_reporter(progress)
    inner = reporter.silent()

    converged = False
    iterations = 0
    for iterations in range(1, max_iter + 1):
        Q, R = qr(T, tol=tol, progress=inner)
        T = R @ Q
        if np.all(np.abs(np.diag(T, -1)) <= tol):
            converged = True
            break
        reporter.step(iterations, max_iter, f"QR sweep {iterations}/{max_iter}")

    if not converged:
        residual = float(np.max(np.abs(np.diag(T, -1))))
        logger.warning(
            "eigenvalues: QR iteration did not converge in %d sweeps "
            "(max sub-diagonal %.3e); the matrix may have complex eigenvalues",
            max_iter,
            residual,
        )
        warnings.warn(
            f"QR iteration did not converge in {max_iter} sweeps; "
            "eigenvalue estimates may be inaccurate (complex eigenvalues?)",
            NumericalInstabilityWarning,
            stacklevel=2,
        )

    return EigenResult(np.diag(T).copy(), iterations, converged)
