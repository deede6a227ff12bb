# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import NamedTuple, Optional

import numpy as np

from .eigen import eigenvalues
from .progress import ProgressReporter
from .utils import EPS, MAX_EIGEN_ITERATIONS, working_copy


class SVDResult(NamedTuple):
    singular_values: np.ndarray
    rank: int
    converged: bool


def svd(
    A: np.ndarray,
    max_iter: int = MAX_EIGEN_ITERATIONS,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> SVDResult:
    """
    Singular values of an m-by-n matrix, without singular vectors.

        Algorithm outline
        -----------------
        1.  Form A.T @ A, a symmetric n-by-n matrix.
        2.  Run the QR eigenvalue iteration on it.
        3.  Singular values are sigma = sqrt(max(0, lambda)), sorted in
            descending order. Small negative lambdas are rounding noise.
        4.  Numerical rank is the number of sigma above `tol`.

    The result always has n singular values, so a wide matrix reports
    n - m trailing zeros.
    """
    A = working_copy(A)
    ATA = A.T @ A
    eig = eigenvalues(ATA, max_iter=max_iter, tol=tol, progress=progress)

    s = np.sqrt(np.clip(eig.eigenvalues, 0.0, None))
    s = np.sort(s)[::-1]
    rank = int(np.sum(s > tol))
    return SVDResult(s, rank, eig.converged)
