# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import numbers
from typing import Optional

import numpy as np

from .elimination import inverse
from .errors import DimensionMismatchError, InvalidParameterError
from .primitives import multiply
from .progress import ProgressReporter, ensure_reporter
from .utils import BLOCK_SIZE, EPS, working_copy

logger = logging.getLogger(__name__)


def matrix_power(
    A: np.ndarray,
    k: int,
    tol: float = EPS,
    block_size: int = BLOCK_SIZE,
    progress: Optional[ProgressReporter] = None,
) -> np.ndarray:
    """
    Compute A^k for integer k by binary exponentiation.

    Parameters
    ----------
    A : (n,n) ndarray
        Square matrix.
    k : int
        Integer power (can be negative or zero). k < 0 inverts first,
        which raises `SingularMatrixError` for a singular A.

    Returns
    -------
    Ak : (n,n) ndarray
        A raised to the k-th power.
    """
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidParameterError(
            f"matrix power must be an integer, got {k!r}", {"power": repr(k)}
        )
    k = int(k)
    A = working_copy(A)
    n, m = A.shape
    if n != m:
        raise DimensionMismatchError(
            f"dimension mismatch: matrix power needs a square matrix, got {n}x{m}",
            {"rows": n, "cols": m},
        )
    reporter = ensure_reporter(progress)

    if k == 0:
        return np.eye(n)
    if k == 1:
        return A
    if k < 0:
        logger.debug("matrix_power: inverting for k=%d", k)
        A_inv = inverse(A, tol=tol, progress=reporter.silent())
        return matrix_power(A_inv, -k, tol=tol, block_size=block_size, progress=progress)

    inner = reporter.silent()
    result = np.eye(n)
    base = A
    exp = k
    while exp > 0:
        if exp & 1:
            result = multiply(result, base, block_size=block_size, progress=inner)
        exp >>= 1
        if exp:
            base = multiply(base, base, block_size=block_size, progress=inner)
        reporter.step(k - exp, k, f"exponent bits left: {exp.bit_length()}")
    return result
