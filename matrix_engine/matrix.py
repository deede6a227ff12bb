# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Value types passed between the host, the dispatcher and the kernels.

`Matrix` wraps a read-only float64 ndarray. Kernels work on plain
ndarrays (``np.asarray(matrix)`` is zero-copy) and only the dispatcher
wraps their output back into `Matrix` objects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .errors import MatrixFormatError
from .utils import identity

OPERATIONS = (
    "add",
    "subtract",
    "multiply",
    "transpose",
    "inverse",
    "determinant",
    "trace",
    "rank",
    "eigenvalues",
    "lu",
    "qr",
    "svd",
    "solve",
    "power",
)


@dataclass(frozen=True, eq=False)
class Matrix:
    """
    Dense row-major matrix, rows >= 1 and cols >= 1, every entry finite.

    Build one from nested lists with `Matrix.from_rows` or from the wire
    shape ``{"data": [[...]], "rows": r, "cols": c}`` with `Matrix.from_dict`.
    """

    data: np.ndarray

    def __post_init__(self):
        try:
            arr = np.array(self.data, dtype=float, copy=True)
        except (TypeError, ValueError) as e:
            raise MatrixFormatError(f"matrix data is not numeric: {e}") from e
        if arr.ndim != 2:
            raise MatrixFormatError(
                f"matrix data must be 2-D, got {arr.ndim}-D",
                {"ndim": arr.ndim},
            )
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise MatrixFormatError(
                "matrix must have at least one row and one column",
                {"rows": arr.shape[0], "cols": arr.shape[1]},
            )
        if not np.all(np.isfinite(arr)):
            raise MatrixFormatError("matrix entries must be finite numbers")
        arr.setflags(write=False)
        object.__setattr__(self, "data", arr)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        rows = list(rows)
        if not rows:
            raise MatrixFormatError("matrix must have at least one row")
        width = None
        for i, row in enumerate(rows):
            if isinstance(row, (str, bytes)) or not hasattr(row, "__len__"):
                raise MatrixFormatError(f"row {i} is not a sequence", {"row": i})
            if width is None:
                width = len(row)
            elif len(row) != width:
                raise MatrixFormatError(
                    f"ragged matrix: row {i} has {len(row)} entries, expected {width}",
                    {"row": i, "expected": width, "actual": len(row)},
                )
        return cls(rows)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Matrix":
        if not isinstance(payload, dict) or "data" not in payload:
            raise MatrixFormatError("matrix payload must be an object with a 'data' field")
        m = cls.from_rows(payload["data"])
        for key, actual in (("rows", m.rows), ("cols", m.cols)):
            declared = payload.get(key)
            if declared is not None and declared != actual:
                raise MatrixFormatError(
                    f"declared {key}={declared} but data has {actual}",
                    {key: declared, "actual": actual},
                )
        return m

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        return cls(identity(n))

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self):
        return self.data.shape

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols

    @property
    def dimensions(self) -> str:
        return f"{self.rows}x{self.cols}"

    def tolist(self) -> List[List[float]]:
        return self.data.tolist()

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.tolist(), "rows": self.rows, "cols": self.cols}

    def allclose(self, other, atol: float = 1e-8) -> bool:
        other = np.asarray(other, dtype=float)
        return other.shape == self.shape and np.allclose(self.data, other, atol=atol)

    def __array__(self, dtype=None, copy=None):
        arr = self.data if dtype is None else self.data.astype(dtype, copy=False)
        if copy:
            arr = arr.copy()
        return arr

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.data, other.data))

    __hash__ = None

    def __repr__(self):
        return f"Matrix({self.dimensions}, {self.tolist()!r})"


MatrixLike = Union[Matrix, np.ndarray, Sequence[Sequence[float]]]


def as_matrix(value: MatrixLike) -> Matrix:
    if isinstance(value, Matrix):
        return value
    if isinstance(value, dict):
        return Matrix.from_dict(value)
    if isinstance(value, np.ndarray):
        return Matrix(value)
    return Matrix.from_rows(value)


@dataclass
class OperationRequest:
    operation: str
    matrices: List[Matrix]
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, message: Dict[str, Any]) -> "OperationRequest":
        if not isinstance(message, dict):
            raise MatrixFormatError("request must be an object")
        operation = message.get("operation")
        if not isinstance(operation, str):
            raise MatrixFormatError("request is missing an 'operation' name")
        raw = message.get("matrices") or []
        if not isinstance(raw, list):
            raise MatrixFormatError("'matrices' must be a list")
        params = message.get("params") or {}
        if not isinstance(params, dict):
            raise MatrixFormatError("'params' must be an object")
        return cls(operation, [as_matrix(m) for m in raw], dict(params))


@dataclass
class MatrixProperties:
    is_square: bool
    is_zero: bool
    is_symmetric: bool
    is_identity: bool
    is_diagonal: bool
    is_upper_triangular: bool
    is_lower_triangular: bool
    trace: Optional[float]
    frobenius_norm: float
    sparsity: float
    nonzero_elements: int
    total_elements: int


@dataclass
class MatrixAnalysis:
    dimensions: str
    sparsity: float
    norm: float
    condition: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensions": self.dimensions,
            "sparsity": self.sparsity,
            "norm": self.norm,
            "condition": self.condition,
        }


@dataclass
class OperationMetadata:
    operation_time: float
    algorithm_used: str
    complexity: float
    numerical_stability: float = 1.0
    memory_usage: int = 0
    converged: Optional[bool] = None
    iterations: Optional[int] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "operationTime": self.operation_time,
            "algorithmUsed": self.algorithm_used,
            "complexity": self.complexity,
            "numericalStability": self.numerical_stability,
            "memoryUsage": self.memory_usage,
            "warnings": list(self.warnings),
        }
        if self.converged is not None:
            out["converged"] = self.converged
        if self.iterations is not None:
            out["iterations"] = self.iterations
        return out


ResultValue = Union[Matrix, float, int, List[float], Dict[str, Any]]


@dataclass
class OperationResult:
    operation: str
    value: ResultValue
    metadata: OperationMetadata
    analysis: Optional[MatrixAnalysis] = None


def encode_value(value: Any) -> Any:
    """Turn a result value into JSON-compatible data (the wire shape)."""
    if isinstance(value, Matrix):
        return value.to_dict()
    if isinstance(value, dict):
        return {_camel(k): encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
