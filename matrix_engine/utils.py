# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np

# Absolute threshold below which a pivot, norm or sub-diagonal entry is zero.
EPS: float = 1e-10

MAX_EIGEN_ITERATIONS: int = 100
BLOCK_SIZE: int = 64
DEFAULT_TIMEOUT: float = 300.0


def working_copy(A) -> np.ndarray:
    """Return a 2-D float64 copy of A that kernels are free to mutate."""
    W = np.array(A, dtype=float, copy=True)
    if W.ndim == 1:
        W = W[:, None]
    return W


def identity(n: int) -> np.ndarray:
    return np.eye(n, dtype=float)


def random_nonsingular_upper(n, low=-100, high=100, seed=None) -> np.ndarray:
    """
    Build a matrix U that is upper-triangular with random entries
    everywhere and put only non-zero values on its diagonal

    Returns
    -------
    Matrix with float64 dtype
    """
    rng = np.random.default_rng(seed)
    U = rng.uniform(low, high, size=(n, n))
    U = np.triu(U)
    # keep the diagonal well away from zero so pivots never fall under EPS
    diag = rng.uniform(1.0, high if high > 1.0 else 10.0, size=n)
    signs = rng.choice([-1.0, 1.0], size=n)
    U[np.diag_indices(n)] = signs * diag
    return np.asarray(U)


def random_nonsingular(n, seed=None) -> np.ndarray:
    """
    Random orthogonal matrix with its columns scaled by strictly
    non-zero factors, so det != 0 and the conditioning stays modest.
    """
    rng = np.random.default_rng(seed)
    Q, _R = np.linalg.qr(rng.standard_normal((n, n)))
    scales = rng.uniform(0.5, 10.0, size=n)
    return np.asarray(Q * scales)
