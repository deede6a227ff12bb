# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
matrix_engine
=============

A stateless dense-matrix engine: a host hands it a named operation and
one or more matrices, and gets back progress updates plus a result or a
structured error.

Public API
~~~~~~~~~~
- Entry points
    - `execute`, `handle_request`, `MatrixTaskRunner`
- Elimination
    - `inverse`, `determinant`, `rank`, `solve`
- Decompositions
    - `lu`, `qr`, `svd`
- Iterative methods
    - `eigenvalues`
- Matrix utilities
    - `matrix_power`, `multiply`, `transpose`, `trace`, `analyze`

Every kernel accepts a ``tol`` keyword (default `EPS` = 1e-10) and an
optional `ProgressReporter` for progress and cooperative cancellation.

Example
-------
>>> import matrix_engine as me
>>> round(me.execute("determinant", [[[1, 2], [3, 4]]]).value, 12)
-2.0
>>> me.handle_request({"operation": "multiply",
...                    "matrices": [{"data": [[1, 2, 3], [4, 5, 6]]},
...                                 {"data": [[1, 2], [3, 4], [5, 6], [7, 8]]}]})["error"]["kind"]
'dimension_mismatch'
"""

from importlib.metadata import version as _pkg_version

from .config import DEFAULT_CONFIG, EngineConfig
from .dispatcher import OPERATIONS, execute, handle_request, validate
from .eigen import EigenResult, eigenvalues
from .elimination import (
    back_substitute,
    determinant,
    forward_substitute,
    inverse,
    rank,
    solve,
)
from .errors import (
    DimensionMismatchError,
    InvalidParameterError,
    MatrixEngineError,
    MatrixFormatError,
    NumericalInstabilityError,
    NumericalInstabilityWarning,
    OperationCancelledError,
    OperationTimeoutError,
    SingularMatrixError,
    UnknownOperationError,
)
from .host import MatrixTask, MatrixTaskRunner
from .lu import lu
from .matrix import (
    Matrix,
    OperationMetadata,
    OperationRequest,
    OperationResult,
)
from .matrix_functions import matrix_power
from .primitives import (
    add,
    analyze,
    condition_estimate,
    frobenius_norm,
    multiply,
    sparsity,
    subtract,
    trace,
    transpose,
)
from .progress import CancellationToken, ProgressReporter
from .qr import qr
from .svd import SVDResult, svd
from .utils import EPS, identity

__all__ = [
    "execute",
    "handle_request",
    "validate",
    "OPERATIONS",
    "MatrixTaskRunner",
    "MatrixTask",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "Matrix",
    "OperationRequest",
    "OperationResult",
    "OperationMetadata",
    "inverse",
    "determinant",
    "rank",
    "solve",
    "forward_substitute",
    "back_substitute",
    "lu",
    "qr",
    "svd",
    "SVDResult",
    "eigenvalues",
    "EigenResult",
    "matrix_power",
    "add",
    "subtract",
    "multiply",
    "transpose",
    "trace",
    "analyze",
    "frobenius_norm",
    "sparsity",
    "condition_estimate",
    "CancellationToken",
    "ProgressReporter",
    "EPS",
    "identity",
    "MatrixEngineError",
    "MatrixFormatError",
    "DimensionMismatchError",
    "SingularMatrixError",
    "NumericalInstabilityError",
    "NumericalInstabilityWarning",
    "InvalidParameterError",
    "UnknownOperationError",
    "OperationCancelledError",
    "OperationTimeoutError",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show matrix-engine”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version("matrix-engine")
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Optional: lightweight default logging config so users see warnings
# only if they deliberately enable them.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
