# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np
import pytest

from matrix_engine.qr import qr
from matrix_engine.utils import random_nonsingular_upper

TEST_ITERATIONS = 50
logger = logging.getLogger(__name__)


@pytest.mark.parametrize("m,n", [(100, 10), (20, 20), (3, 5), (1, 1), (6, 1)])
def test_orthogonality_and_reconstruction(m, n):
    V = np.random.randn(m, n)
    Q, R = qr(V)
    assert Q.shape == (m, m)
    assert R.shape == (m, n)
    assert np.allclose(Q.T @ Q, np.eye(m), atol=1e-6)
    assert np.allclose(Q @ R, V, atol=1e-6)
    assert np.allclose(np.tril(R, -1), 0.0)


def test_qr_random_nonsingular_upper():
    for i in range(TEST_ITERATIONS):
        n = 2 + i % 8
        A = random_nonsingular_upper(n, seed=i)
        Q, R = qr(A)
        logger.debug(f"\nR:\n{R}\n")
        assert np.allclose(Q @ R, A, atol=1e-8)
        # |diag(R)| are the column norms left after each reflection, so
        # they agree with NumPy up to sign
        R_np = np.linalg.qr(A)[1]
        np.testing.assert_allclose(np.abs(np.diag(R)), np.abs(np.diag(R_np)), rtol=1e-8)


def test_qr_skips_zero_column():
    A = np.array([[0.0, 1.0], [0.0, 2.0], [0.0, 3.0]])
    Q, R = qr(A)
    assert np.allclose(Q @ R, A)
    assert np.allclose(Q.T @ Q, np.eye(3))
    np.testing.assert_allclose(R[:, 0], 0.0)


def test_qr_of_upper_triangular_keeps_magnitudes():
    A = np.array([[2.0, 1.0], [0.0, 3.0]])
    Q, R = qr(A)
    np.testing.assert_allclose(np.abs(R), np.abs(A))
    assert np.allclose(Q @ R, A)


def test_qr_does_not_mutate_input():
    A = np.random.randn(4, 4)
    before = A.copy()
    qr(A)
    np.testing.assert_array_equal(A, before)
