#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import platform
import time

import numpy as np
import pandas as pd

from .elimination import inverse, solve
from .primitives import multiply
from .qr import qr

REPEATS = 5  # best of 5 runs leads to stable numbers
SIZES = [(50, 50), (200, 200), (400, 400)]


def wall(f, *args, **kwargs):
    t0 = time.perf_counter()
    f(*args, **kwargs)
    return time.perf_counter() - t0


def best(f, *args, repeats=REPEATS, **kwargs):
    return min(wall(f, *args, **kwargs) for _ in range(repeats))


def run_benchmark(sizes=SIZES, repeats=REPEATS, seed=0) -> pd.DataFrame:
    """
    Time the engine kernels against their NumPy / LAPACK counterparts.

    Returns
    -------
    DataFrame with columns kernel, size, sec, sec/NumPy, residual
    """
    rng = np.random.default_rng(seed)
    records = []
    for m, n in sizes:
        A = rng.standard_normal((m, n))
        B = rng.standard_normal((n, m))
        size = f"{m}x{n}"

        t_mm = best(multiply, A, B, repeats=repeats)
        t_np = best(np.matmul, A, B, repeats=repeats)
        err = np.linalg.norm(multiply(A, B) - A @ B, np.inf)
        records.append(("multiply", size, t_mm, t_mm / t_np, err))

        Q, R = qr(A)
        t_qr = best(qr, A, repeats=repeats)
        t_np = best(np.linalg.qr, A, repeats=repeats)
        records.append(("qr", size, t_qr, t_qr / t_np, np.linalg.norm(Q @ R - A, np.inf)))

        if m == n:
            b = rng.standard_normal((n, 1))
            t_inv = best(inverse, A, repeats=repeats)
            t_np = best(np.linalg.inv, A, repeats=repeats)
            err = np.linalg.norm(A @ inverse(A) - np.eye(n), np.inf)
            records.append(("inverse", size, t_inv, t_inv / t_np, err))

            t_solve = best(solve, A, b, repeats=repeats)
            t_np = best(np.linalg.solve, A, b, repeats=repeats)
            err = np.linalg.norm(A @ solve(A, b) - b, np.inf)
            records.append(("solve", size, t_solve, t_solve / t_np, err))

    return pd.DataFrame(records, columns=["kernel", "size", "sec", "sec/NumPy", "residual"])


def main():
    print(f"# {platform.python_implementation()} {platform.python_version()}, numpy {np.__version__}")
    df = run_benchmark()
    print(df.to_string(index=False))
    df.to_csv("bench_results.csv", index=False)


if __name__ == "__main__":
    main()
