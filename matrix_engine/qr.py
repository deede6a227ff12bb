# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import Optional, Tuple

import numpy as np

from .progress import ProgressReporter, ensure_reporter
from .utils import EPS, working_copy


def qr(
    A: np.ndarray,
    tol: float = EPS,
    progress: Optional[ProgressReporter] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the full QR decomposition of an m-by-n matrix A using
    Householder transformations.

    A = QR
    H = I - 2 * w * transpose(w),  ‖w‖ = 1

    Parameters
    ----------
    A : (m, n) ndarray, any shape
    tol : float
        A column whose sub-diagonal part has norm below `tol` is already
        triangular and is skipped.

    Returns
    -------
    Q : (m, m) ndarray | orthogonal
    R : (m, n) ndarray | upper-trapezoidal
    """
    R = working_copy(A)
    reporter = ensure_reporter(progress)
    m, n = R.shape
    Q = np.eye(m)

    steps = min(m - 1, n)
    for k in range(steps):
        # ---- build the reflector for column k --------------------------------
        x = R[k:, k]
        norm_x = np.linalg.norm(x)
        if norm_x < tol:  # already zero
            continue
        # w = x + sign(x0) ‖x‖ e₁
        w = x.copy()
        w[0] += norm_x if x[0] >= 0 else -norm_x
        norm_w = np.linalg.norm(w)
        if norm_w < tol:
            continue
        w /= norm_w

        # ---- apply H to the trailing block of R (from the left) --------------
        R[k:, k:] -= 2.0 * np.outer(w, w @ R[k:, k:])
        # ---- accumulate Q = Q H (H is symmetric) -----------------------------
        Q[:, k:] -= 2.0 * np.outer(Q[:, k:] @ w, w)

        reporter.step(k + 1, steps, f"reflected column {k + 1}/{steps}")

    # force exact upper-triangular shape / zero tiny noise
    R[np.tril_indices(m, -1, n)] = 0.0
    return Q, R

