# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Element-wise helpers and cheap estimators shared by every kernel.
"""

import math
from typing import Iterable, Optional

import numpy as np

from .errors import DimensionMismatchError
from .matrix import MatrixAnalysis, MatrixProperties
from .progress import ProgressReporter, ensure_reporter
from .utils import BLOCK_SIZE, EPS


def transpose(A) -> np.ndarray:
    return np.array(A, dtype=float).T.copy()


def add(A, B) -> np.ndarray:
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape != B.shape:
        raise DimensionMismatchError(
            f"dimension mismatch: cannot add {_dims(A)} and {_dims(B)}",
            {"left": list(A.shape), "right": list(B.shape)},
        )
    return A + B


def subtract(A, B) -> np.ndarray:
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape != B.shape:
        raise DimensionMismatchError(
            f"dimension mismatch: cannot subtract {_dims(B)} from {_dims(A)}",
            {"left": list(A.shape), "right": list(B.shape)},
        )
    return A - B


def multiply(
    A,
    B,
    block_size: int = BLOCK_SIZE,
    progress: Optional[ProgressReporter] = None,
) -> np.ndarray:
    """
    Dense product C = A B, computed in square blocks of `block_size`.
    Progress (and the cancellation poll) happens once per block row.
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    reporter = ensure_reporter(progress)
    m, k = A.shape
    k2, n = B.shape
    if k != k2:
        raise DimensionMismatchError(
            f"dimension mismatch: {_dims(A)} cannot multiply {_dims(B)} "
            f"(inner dimensions {k} != {k2})",
            {"left": [m, k], "right": [k2, n]},
        )

    C = np.zeros((m, n), dtype=float)
    for ii in range(0, m, block_size):
        i_max = min(ii + block_size, m)
        for jj in range(0, n, block_size):
            j_max = min(jj + block_size, n)
            for kk in range(0, k, block_size):
                k_max = min(kk + block_size, k)
                C[ii:i_max, jj:j_max] += A[ii:i_max, kk:k_max] @ B[kk:k_max, jj:j_max]
        reporter.step(i_max, m, f"multiplied {i_max}/{m} rows")
    return C


def trace(A) -> float:
    A = np.asarray(A, dtype=float)
    if A.shape[0] != A.shape[1]:
        raise DimensionMismatchError(
            f"dimension mismatch: trace needs a square matrix, got {_dims(A)}",
            {"rows": A.shape[0], "cols": A.shape[1]},
        )
    return float(np.trace(A))


def frobenius_norm(A) -> float:
    return float(np.linalg.norm(np.asarray(A, dtype=float), ord="fro"))


def sparsity(A, tol: float = EPS) -> float:
    """Fraction of entries that are numerically zero."""
    A = np.asarray(A, dtype=float)
    nonzero = int(np.count_nonzero(np.abs(A) > tol))
    return 1.0 - nonzero / A.size


def condition_estimate(A, tol: float = EPS) -> float:
    """
    Ratio of the largest to the smallest non-zero magnitude.

    This is a cheap proxy for conditioning, not the 2-norm condition
    number. Returns 0.0 for an all-zero matrix.
    """
    mags = np.abs(np.asarray(A, dtype=float)).ravel()
    nonzero = mags[mags > tol]
    if nonzero.size == 0:
        return 0.0
    return float(mags.max() / nonzero.min())


def numerical_stability(matrices: Iterable, tol: float = EPS) -> float:
    """Score in [0, 1]; 1 means every input has a narrow magnitude range."""
    stability = 1.0
    for A in matrices:
        cond = condition_estimate(A, tol)
        if cond > 0:
            # cond == 1 gives log10(2), so the score can exceed 1 before the clamp
            stability *= max(0.1, 1.0 / math.log10(cond + 1.0))
    return max(0.0, min(1.0, stability))


def memory_usage(matrices: Iterable, result=None) -> int:
    """Bytes held by the operands and the result at 8 bytes per element."""
    total = sum(np.asarray(A).size for A in matrices)
    if result is not None:
        total += _element_count(result)
    return total * 8


def _element_count(value) -> int:
    if isinstance(value, dict):
        return sum(_element_count(v) for v in value.values())
    if isinstance(value, (int, float, bool, np.generic)):
        return 0
    return int(np.asarray(value, dtype=float).size)


def analyze(A, tol: float = EPS) -> MatrixProperties:
    A = np.asarray(A, dtype=float)
    m, n = A.shape
    is_square = m == n
    near_zero = np.abs(A) < tol
    nonzero = int(np.count_nonzero(np.abs(A) > tol))

    is_symmetric = is_identity = is_diagonal = False
    is_upper = is_lower = False
    tr = None
    if is_square:
        is_symmetric = bool(np.all(np.abs(A - A.T) < tol))
        is_identity = bool(np.all(np.abs(A - np.eye(n)) < tol))
        off_diag = ~np.eye(n, dtype=bool)
        is_diagonal = bool(np.all(near_zero[off_diag]))
        is_upper = bool(np.all(near_zero[np.tril_indices(n, -1)]))
        is_lower = bool(np.all(near_zero[np.triu_indices(n, 1)]))
        tr = float(np.trace(A))

    return MatrixProperties(
        is_square=is_square,
        is_zero=bool(np.all(near_zero)),
        is_symmetric=is_symmetric,
        is_identity=is_identity,
        is_diagonal=is_diagonal,
        is_upper_triangular=is_upper,
        is_lower_triangular=is_lower,
        trace=tr,
        frobenius_norm=frobenius_norm(A),
        sparsity=1.0 - nonzero / A.size,
        nonzero_elements=nonzero,
        total_elements=int(A.size),
    )


def analysis(A, tol: float = EPS) -> MatrixAnalysis:
    A = np.asarray(A, dtype=float)
    return MatrixAnalysis(
        dimensions=_dims(A),
        sparsity=sparsity(A, tol),
        norm=frobenius_norm(A),
        condition=condition_estimate(A, tol),
    )


def _dims(A) -> str:
    r, c = np.shape(A)
    return f"{r}x{c}"
