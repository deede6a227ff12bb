# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Error taxonomy shared by the kernels, the dispatcher and the host.

Every hard failure derives from `MatrixEngineError`, which is itself a
`ValueError` so callers that only know about the plain numpy-style
``ValueError`` keep working. Each error carries a stable ``kind`` string
and a ``details`` dict so a UI can render targeted guidance.
"""

from typing import Any, Dict, Optional


class MatrixEngineError(ValueError):
    kind = "engine_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class MatrixFormatError(MatrixEngineError):
    """Input could not be read as a rectangular, finite, non-empty matrix."""

    kind = "format"


class DimensionMismatchError(MatrixEngineError):
    """Wrong operand count, or shapes incompatible with the operation."""

    kind = "dimension_mismatch"


class SingularMatrixError(MatrixEngineError):
    """A pivot fell below tolerance during inversion or solve."""

    kind = "singular_matrix"


class NumericalInstabilityError(MatrixEngineError):
    """The algorithm cannot continue without producing NaN / inf."""

    kind = "numerical_instability"


class InvalidParameterError(MatrixEngineError):
    kind = "invalid_parameter"


class UnknownOperationError(MatrixEngineError):
    kind = "unknown_operation"


class OperationCancelledError(MatrixEngineError):
    kind = "cancelled"


class OperationTimeoutError(MatrixEngineError):
    kind = "timeout"


class NumericalInstabilityWarning(UserWarning):
    """
    Non-fatal: the result was produced but may be inaccurate, e.g. the
    QR iteration hit its iteration cap on a matrix with complex eigenvalues.
    """
