# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from matrix_engine.benchmark import run_benchmark


def test_benchmark_frame():
    df = run_benchmark(sizes=[(6, 6), (8, 5)], repeats=1)
    assert list(df.columns) == ["kernel", "size", "sec", "sec/NumPy", "residual"]
    assert list(df["kernel"]) == ["multiply", "qr", "inverse", "solve", "multiply", "qr"]
    assert (df["sec"] > 0).all()
    assert (df["residual"] < 1e-8).all()
