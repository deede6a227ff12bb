# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from dataclasses import dataclass

from .utils import BLOCK_SIZE, DEFAULT_TIMEOUT, EPS, MAX_EIGEN_ITERATIONS


@dataclass(frozen=True)
class EngineConfig:
    tol: float = EPS
    max_eigen_iterations: int = MAX_EIGEN_ITERATIONS
    block_size: int = BLOCK_SIZE
    timeout: float = DEFAULT_TIMEOUT  # host-level, the kernels never read it

    def __post_init__(self):
        if self.tol <= 0:
            raise ValueError("tol must be positive")
        if self.max_eigen_iterations < 1:
            raise ValueError("max_eigen_iterations must be at least 1")
        if self.block_size < 1:
            raise ValueError("block_size must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


DEFAULT_CONFIG = EngineConfig()
