# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
import math

import numpy as np
import pytest

from matrix_engine.elimination import (
    back_substitute,
    determinant,
    forward_substitute,
    inverse,
    rank,
    solve,
)
from matrix_engine.errors import DimensionMismatchError, SingularMatrixError
from matrix_engine.lu import lu
from matrix_engine.utils import EPS, random_nonsingular, random_nonsingular_upper

TEST_ITERATIONS = 50
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# inverse
# ---------------------------------------------------------------------


def test_inverse_of_identity_is_identity():
    np.testing.assert_array_equal(inverse(np.eye(2)), np.eye(2))


def test_inverse_round_trip_random_nonsingular():
    for i in range(TEST_ITERATIONS):
        n = 2 + i % 9
        A = random_nonsingular(n, seed=i)
        logger.debug(f"\nRunning Test\n{A}\n")
        A_inv = inverse(A)
        assert np.allclose(A @ A_inv, np.eye(n), atol=1e-8)
        assert np.allclose(A_inv, np.linalg.inv(A), atol=1e-8)


def test_inverse_needs_pivoting():
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    np.testing.assert_allclose(inverse(A), A)


def test_inverse_singular_matrix_raises():
    with pytest.raises(SingularMatrixError) as info:
        inverse(np.array([[1.0, 2.0], [2.0, 4.0]]))
    assert info.value.details["pivot_index"] == 1


def test_inverse_non_square_raises():
    with pytest.raises(DimensionMismatchError):
        inverse(np.ones((2, 3)))


def test_inverse_does_not_mutate_input():
    A = np.array([[4.0, 7.0], [2.0, 6.0]])
    before = A.copy()
    inverse(A)
    np.testing.assert_array_equal(A, before)


# ---------------------------------------------------------------------
# determinant
# ---------------------------------------------------------------------


@pytest.mark.parametrize("n", [1, 2, 3, 5, 10])
def test_determinant_of_identity(n):
    assert determinant(np.eye(n)) == 1.0


def test_determinant_concrete_examples():
    assert determinant(np.array([[2.0, 0.0], [0.0, 3.0]])) == 6.0
    assert math.isclose(determinant(np.array([[1.0, 2.0], [3.0, 4.0]])), -2.0, rel_tol=1e-12)


def test_determinant_sign_flips_on_row_swap():
    A = random_nonsingular(5, seed=7)
    B = A.copy()
    B[[0, 3]] = B[[3, 0]]
    assert math.isclose(determinant(B), -determinant(A), rel_tol=1e-9)


def test_determinant_matches_numpy():
    rng = np.random.default_rng(0)
    A = rng.standard_normal((30, 30))
    assert math.isclose(determinant(A), np.linalg.det(A), rel_tol=1e-8)


def test_determinant_singular_is_exactly_zero():
    assert determinant(np.array([[1.0, 2.0], [2.0, 4.0]])) == 0.0
    assert determinant(np.zeros((3, 3))) == 0.0


def test_determinant_non_square_raises():
    with pytest.raises(DimensionMismatchError):
        determinant(np.ones((3, 2)))


# ---------------------------------------------------------------------
# rank
# ---------------------------------------------------------------------


@pytest.mark.parametrize("n", [1, 4, 9])
def test_rank_of_identity(n):
    assert rank(np.eye(n)) == n


def test_rank_of_zero_matrix():
    assert rank(np.zeros((4, 6))) == 0


def test_rank_dependent_rows():
    A = np.array([[1.0, 2.0, 3.0, 4.0, 5.0], [0.0, 1.0, 0.0, 1.0, 0.0]])
    A = np.vstack([A, A[0] + A[1]])
    assert rank(A) == 2
    assert rank(np.array([[1.0, 2.0], [2.0, 4.0]])) == 1


def test_rank_skips_zero_column():
    A = np.array([[0.0, 1.0, 2.0], [0.0, 2.0, 4.0], [0.0, 0.0, 1.0]])
    assert rank(A) == 2


def test_rank_agreement():
    rng = np.random.default_rng(3)
    for _ in range(TEST_ITERATIONS):
        A = rng.standard_normal((8, 6))
        assert rank(A) == np.linalg.matrix_rank(A)


def test_rank_of_low_rank_product():
    rng = np.random.default_rng(11)
    A = rng.standard_normal((6, 3)) @ rng.standard_normal((3, 5))
    assert rank(A) == 3


@pytest.mark.parametrize("m,n", [(1, 1), (2, 7), (7, 2), (5, 5)])
def test_rank_bounds(m, n):
    A = np.random.randn(m, n)
    assert 0 <= rank(A) <= min(m, n)


# ---------------------------------------------------------------------
# substitution and solve
# ---------------------------------------------------------------------


def test_forward_and_back_substitution_basic_n_by_n():
    n = 200
    rng = np.random.default_rng(5)
    A = rng.standard_normal((n, n))
    x0 = rng.standard_normal(n)
    b = A @ x0

    L, U, perm = lu(A, pivot=True)
    y = forward_substitute(L, b[perm])
    x = back_substitute(U, y)
    assert np.allclose(x, x0, rtol=1e-6, atol=1e-8)


def test_back_substitute_reports_consistency():
    U = np.array([[1.0, 1.0], [0.0, 0.0]])
    with pytest.raises(SingularMatrixError) as info:
        back_substitute(U, np.array([2.0, 0.0]))
    assert info.value.details["consistent"] is True

    with pytest.raises(SingularMatrixError) as info:
        back_substitute(U, np.array([2.0, 1.0]))
    assert info.value.details["consistent"] is False


def test_solve_concrete_example():
    x = solve(np.array([[2.0, 0.0], [0.0, 2.0]]), np.array([[4.0], [6.0]]))
    np.testing.assert_allclose(x, np.array([[2.0], [3.0]]))


def test_solve_random_nonsingular_upper_triangular():
    for i in range(TEST_ITERATIONS):
        n = 2 + i % 10
        A = random_nonsingular_upper(n, seed=i)
        x_true = np.random.rand(n, 1)
        b = A @ x_true

        x_np = np.linalg.solve(A, b)
        x_ours = solve(A, b)
        logger.debug(f"\n==== Results ====\nOurs:\n{x_ours}\nNumpy:\n{x_np}")

        # Compare the residual (r = b - Ax), this judges numerical
        # correctness in a way that is independent of conditioning
        res_np = np.linalg.norm(A @ x_np - b, ord=np.inf)
        res_ours = np.linalg.norm(A @ x_ours - b, ord=np.inf)
        assert res_ours <= max(10 * res_np, 1e-8)


def test_solve_random_nonsingular_matches_numpy():
    for i in range(TEST_ITERATIONS):
        A = random_nonsingular(12, seed=100 + i)
        b = np.random.rand(12, 1)
        x = solve(A, b)
        assert np.allclose(A @ x, b, atol=1e-6)
        np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=5e-8, atol=EPS)


def test_solve_needs_row_exchange():
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    x = solve(A, np.array([[3.0], [5.0]]))
    np.testing.assert_allclose(x, np.array([[5.0], [3.0]]))


def test_solve_flat_rhs_keeps_shape():
    x = solve(np.array([[3.0, 1.0], [1.0, 2.0]]), np.array([9.0, 8.0]))
    assert x.shape == (2,)
    np.testing.assert_allclose(x, [2.0, 3.0])


def test_solve_singular_raises():
    with pytest.raises(SingularMatrixError):
        solve(np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([[1.0], [2.0]]))


def test_solve_row_mismatch_raises():
    with pytest.raises(DimensionMismatchError):
        solve(np.eye(3), np.ones((2, 1)))
