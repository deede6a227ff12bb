# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import Optional

import numpy as np

from .errors import DimensionMismatchError, SingularMatrixError
from .lu import lu
from .progress import ProgressReporter, ensure_reporter
from .utils import EPS, working_copy

logger = logging.getLogger(__name__)


def _require_square(A: np.ndarray, what: str) -> int:
    m, n = A.shape
    if m != n:
        raise DimensionMismatchError(
            f"dimension mismatch: {what} needs a square matrix, got {m}x{n}",
            {"rows": m, "cols": n},
        )
    return n


def inverse(
    A: np.ndarray,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> np.ndarray:
    """
    Gauss-Jordan inversion of [A | I] with partial pivoting.

    Raises
    ------
    SingularMatrixError : a pivot column has no entry with ``|x| >= tol``.
    """
    A = working_copy(A)
    n = _require_square(A, "inverse")
    reporter = ensure_reporter(progress)
    aug = np.hstack([A, np.eye(n)])

    for i in range(n):
        # The computation is more stable if we take the largest
        # magnitude entry at or below the diagonal as the pivot.
        pivot_row = i + int(np.abs(aug[i:, i]).argmax())
        if pivot_row != i:
            aug[[i, pivot_row]] = aug[[pivot_row, i]]

        pivot = aug[i, i]
        if abs(pivot) < tol:
            raise SingularMatrixError(
                "matrix is singular and cannot be inverted",
                {"pivot_index": i, "pivot_value": float(pivot), "tolerance": tol},
            )

        aug[i] /= pivot
        factors = aug[:, i].copy()
        factors[i] = 0.0
        aug -= factors[:, None] * aug[i]
        reporter.step(i + 1, n, f"eliminated column {i + 1}/{n}")

    return aug[:, n:].copy()


def determinant(
    A: np.ndarray,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> float:
    """
    Determinant by elimination with partial pivoting.

    det(A) = (-1)^swaps * prod(pivots). A pivot with ``|p| < tol`` means
    the matrix is singular and 0.0 is returned straight away.
    """
    U = working_copy(A)
    n = _require_square(U, "determinant")
    reporter = ensure_reporter(progress)

    det = 1.0
    swaps = 0
    for i in range(n):
        pivot_row = i + int(np.abs(U[i:, i]).argmax())
        if pivot_row != i:
            U[[i, pivot_row]] = U[[pivot_row, i]]
            swaps += 1

        if abs(U[i, i]) < tol:
            logger.debug("determinant: zero pivot at column %d", i)
            return 0.0

        factors = U[i + 1 :, i] / U[i, i]
        U[i + 1 :, i:] -= factors[:, None] * U[i, i:]
        det *= U[i, i]
        reporter.step(i + 1, n, f"eliminated column {i + 1}/{n}")

    return -det if swaps % 2 else det


def rank(
    A: np.ndarray,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> int:
    """Matrix rank is the number of pivot columns"""
    U = working_copy(A)
    reporter = ensure_reporter(progress)
    m, n = U.shape

    r = 0
    row = 0
    for col in range(n):
        if row == m:
            break
        col_slice = np.abs(U[row:, col])
        max_idx = int(col_slice.argmax())
        if col_slice[max_idx] < tol:
            # column is numerically zero, no new pivot
            reporter.step(col + 1, n)
            continue

        pivot_row = row + max_idx
        if pivot_row != row:
            U[[row, pivot_row]] = U[[pivot_row, row]]

        factors = U[row + 1 :, col] / U[row, col]
        U[row + 1 :, col:] -= factors[:, None] * U[row, col:]
        r += 1
        row += 1
        reporter.step(col + 1, n, f"scanned column {col + 1}/{n}")

    return r


def forward_substitute(L: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Solve L y = b for lower-triangular L.

    b may be (n,) or (n, k); the result has the same shape.
    """
    L = np.asarray(L, dtype=float)
    b = np.asarray(b, dtype=float)
    flat = b.ndim == 1
    c = b[:, None] if flat else b
    n = L.shape[0]
    y = np.zeros_like(c)
    for i in range(n):
        y[i] = (c[i] - L[i, :i] @ y[:i]) / L[i, i]
    return y.ravel() if flat else y


def back_substitute(U: np.ndarray, c: np.ndarray, tol: float = EPS) -> np.ndarray:
    """
    Parameters
    ----------
    U : (n, n) ndarray
        Upper-triangular matrix.
    c : (n,) or (n,k) ndarray
        RHS after identical row operations.
    Returns
    -------
    x : (n,) or (n,k) ndarray
        Solution(s) of Ux = c.
    Raises
    ------
    SingularMatrixError : a diagonal entry of U is below tolerance; the
        details say whether the system is inconsistent or has infinitely
        many solutions.
    """
    U = np.asarray(U, dtype=float)
    c = np.asarray(c, dtype=float)
    flat = c.ndim == 1
    if flat:
        c = c[:, None]
    n, k = c.shape
    x = np.zeros((n, k), dtype=float)

    for i in reversed(range(n)):
        pivot = U[i, i]
        if abs(pivot) < tol:
            residual = c[i] - U[i, i + 1 :] @ x[i + 1 :]
            consistent = bool(np.all(np.abs(residual) < tol))
            raise SingularMatrixError(
                "matrix is singular; the system has "
                + ("infinitely many solutions" if consistent else "no solution"),
                {"pivot_index": i, "consistent": consistent},
            )
        x[i] = (c[i] - U[i, i + 1 :] @ x[i + 1 :]) / pivot

    return x.ravel() if flat else x


def solve(
    A: np.ndarray,
    b: np.ndarray,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> np.ndarray:
    """
    Solve A x = b via LU with partial pivoting, then L y = P b and U x = y.

    Returns x with the same shape as b ((n,) or (n, 1)).
    """
    A = working_copy(A)
    b = np.asarray(b, dtype=float)
    n = _require_square(A, "solve")
    if b.shape[0] != n:
        raise DimensionMismatchError(
            f"dimension mismatch: coefficient matrix has {n} rows "
            f"but the constant vector has {b.shape[0]}",
            {"rows": n, "rhs_rows": b.shape[0]},
        )

    L, U, perm = lu(A, pivot=True, tol=tol, progress=progress)
    y = forward_substitute(L, b[perm])
    return back_substitute(U, y, tol=tol)
