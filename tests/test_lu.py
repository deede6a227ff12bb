# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from matrix_engine.errors import NumericalInstabilityError
from matrix_engine.lu import lu, permutation_matrix

TEST_ITERATIONS = 20


def _assert_triangular(L, U):
    assert np.allclose(np.diag(L), 1.0)
    assert np.allclose(np.triu(L, 1), 0.0)
    assert np.allclose(np.tril(U, -1), 0.0)


def test_lu_reconstruction_without_pivoting():
    M = np.array([[4.0, 3.0], [6.0, 3.0]])
    L, U, perm = lu(M)
    assert perm == [0, 1]
    np.testing.assert_allclose(L, [[1.0, 0.0], [1.5, 1.0]])
    np.testing.assert_allclose(U, [[4.0, 3.0], [0.0, -1.5]])
    assert np.allclose(L @ U, M, atol=1e-6)


def test_lu_diagonally_dominant_random():
    rng = np.random.default_rng(0)
    for _ in range(TEST_ITERATIONS):
        n = int(rng.integers(2, 12))
        A = rng.standard_normal((n, n)) + n * np.eye(n)
        L, U, _perm = lu(A)
        _assert_triangular(L, U)
        assert np.allclose(L @ U, A, atol=1e-6)


def test_lu_with_pivoting_permutes_rows():
    rng = np.random.default_rng(1)
    for _ in range(TEST_ITERATIONS):
        A = rng.standard_normal((7, 7))
        L, U, perm = lu(A, pivot=True)
        _assert_triangular(L, U)
        # partial pivoting keeps every multiplier at most 1 in magnitude
        assert np.all(np.abs(L) <= 1.0 + 1e-12)
        assert np.allclose(L @ U, A[perm], atol=1e-10)
        assert np.allclose(permutation_matrix(perm) @ A, L @ U, atol=1e-10)


def test_lu_zero_pivot_without_pivoting_raises():
    with pytest.raises(NumericalInstabilityError) as info:
        lu(np.array([[0.0, 1.0], [1.0, 0.0]]))
    assert info.value.details["pivot_index"] == 0


def test_lu_zero_column_is_skipped():
    M = np.array([[0.0, 1.0], [0.0, 2.0]])
    L, U, _perm = lu(M)
    assert np.allclose(L @ U, M)


def test_lu_rectangular():
    rng = np.random.default_rng(2)
    for shape in [(3, 2), (2, 4), (5, 3)]:
        A = rng.standard_normal(shape) + np.eye(*shape) * 5
        L, U, _perm = lu(A)
        assert L.shape == (shape[0], shape[0])
        assert U.shape == shape
        assert np.allclose(L @ U, A, atol=1e-10)


def test_lu_does_not_mutate_input():
    A = np.array([[2.0, 1.0], [4.0, 3.0]])
    before = A.copy()
    lu(A, pivot=True)
    np.testing.assert_array_equal(A, before)
