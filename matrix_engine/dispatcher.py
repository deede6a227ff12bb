# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Operation dispatcher: the single entry point of the engine.

`execute` looks the operation up in `OPERATIONS`, validates operand count
and shapes before any arithmetic happens, runs the kernel with a
progress/cancellation reporter, and wraps the outcome with metadata.

`handle_request` is the message boundary used by hosts: it takes the wire
shape ``{"operation", "matrices", "params"}`` and always answers with a
dict, either ``{"result", "metadata", "analysis"}`` or ``{"error": {...}}``.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from . import primitives
from .config import DEFAULT_CONFIG, EngineConfig
from .eigen import eigenvalues
from .elimination import determinant, inverse, rank, solve
from .errors import (
    DimensionMismatchError,
    InvalidParameterError,
    MatrixEngineError,
    NumericalInstabilityError,
    UnknownOperationError,
)
from .lu import lu, permutation_matrix
from .matrix import (
    Matrix,
    MatrixLike,
    OperationMetadata,
    OperationRequest,
    OperationResult,
    as_matrix,
    encode_value,
)
from .matrix_functions import matrix_power
from .progress import CancellationToken, ProgressCallback, ProgressReporter
from .qr import qr
from .svd import svd

logger = logging.getLogger(__name__)

Extras = Dict[str, Any]
Runner = Callable[[List[np.ndarray], Dict[str, Any], EngineConfig, ProgressReporter], Tuple[Any, Extras]]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    arity: int
    algorithm: str
    complexity: Callable[[List[np.ndarray], Dict[str, Any]], float]
    run: Runner
    square: bool = False


# ---------------------------------------------------------------------
# Runners: adapt each kernel to (arrays, params, config, reporter)
# ---------------------------------------------------------------------


def _run_add(ms, params, config, reporter):
    return primitives.add(ms[0], ms[1]), {}


def _run_subtract(ms, params, config, reporter):
    return primitives.subtract(ms[0], ms[1]), {}


def _run_multiply(ms, params, config, reporter):
    return primitives.multiply(ms[0], ms[1], block_size=config.block_size, progress=reporter), {}


def _run_transpose(ms, params, config, reporter):
    return primitives.transpose(ms[0]), {}


def _run_trace(ms, params, config, reporter):
    return primitives.trace(ms[0]), {}


def _run_inverse(ms, params, config, reporter):
    return inverse(ms[0], tol=config.tol, progress=reporter), {}


def _run_determinant(ms, params, config, reporter):
    return float(determinant(ms[0], tol=config.tol, progress=reporter)), {}


def _run_rank(ms, params, config, reporter):
    return int(rank(ms[0], tol=config.tol, progress=reporter)), {}


def _run_eigenvalues(ms, params, config, reporter):
    res = eigenvalues(
        ms[0], max_iter=config.max_eigen_iterations, tol=config.tol, progress=reporter
    )
    values = [float(v) for v in res.eigenvalues]
    return values, {"converged": res.converged, "iterations": res.iterations}


def _run_lu(ms, params, config, reporter):
    pivot = bool(params.get("pivot", False))
    L, U, perm = lu(ms[0], pivot=pivot, tol=config.tol, progress=reporter)
    factors = {"L": L, "U": U}
    if pivot:
        factors["P"] = permutation_matrix(perm)
    return factors, {}


def _run_qr(ms, params, config, reporter):
    Q, R = qr(ms[0], tol=config.tol, progress=reporter)
    return {"Q": Q, "R": R}, {}


def _run_svd(ms, params, config, reporter):
    res = svd(ms[0], max_iter=config.max_eigen_iterations, tol=config.tol, progress=reporter)
    bundle = {
        "singular_values": [float(s) for s in res.singular_values],
        "rank": res.rank,
    }
    return bundle, {"converged": res.converged}


def _run_solve(ms, params, config, reporter):
    return solve(ms[0], ms[1], tol=config.tol, progress=reporter), {}


def _run_power(ms, params, config, reporter):
    k = params["power"]
    out = matrix_power(
        ms[0], k, tol=config.tol, block_size=config.block_size, progress=reporter
    )
    return out, {}


def _n(ms):
    return ms[0].shape[0]


def _elements(ms, params):
    return float(ms[0].size)


OPERATIONS: Dict[str, OperationSpec] = {
    spec.name: spec
    for spec in (
        OperationSpec("add", 2, "Element-wise Addition", _elements, _run_add),
        OperationSpec("subtract", 2, "Element-wise Subtraction", _elements, _run_subtract),
        OperationSpec(
            "multiply",
            2,
            "Block Matrix Multiplication",
            lambda ms, p: float(ms[0].shape[0] * ms[0].shape[1] * ms[1].shape[1]),
            _run_multiply,
        ),
        OperationSpec("transpose", 1, "Transpose", _elements, _run_transpose),
        OperationSpec(
            "trace", 1, "Diagonal Sum", lambda ms, p: float(_n(ms)), _run_trace, square=True
        ),
        OperationSpec(
            "inverse",
            1,
            "Gauss-Jordan Elimination",
            lambda ms, p: float(_n(ms) ** 3),
            _run_inverse,
            square=True,
        ),
        OperationSpec(
            "determinant",
            1,
            "Gaussian Elimination with Partial Pivoting",
            lambda ms, p: float(_n(ms) ** 3),
            _run_determinant,
            square=True,
        ),
        OperationSpec(
            "rank",
            1,
            "Gaussian Elimination",
            lambda ms, p: float(min(ms[0].shape) ** 3),
            _run_rank,
        ),
        OperationSpec(
            "eigenvalues",
            1,
            "Unshifted QR Algorithm",
            lambda ms, p: float(_n(ms) ** 3),
            _run_eigenvalues,
            square=True,
        ),
        OperationSpec(
            "lu",
            1,
            "Doolittle LU",
            lambda ms, p: _n(ms) ** 3 / 3,
            _run_lu,
        ),
        OperationSpec(
            "qr",
            1,
            "Householder Reflections",
            lambda ms, p: 2 * _n(ms) ** 3 / 3,
            _run_qr,
        ),
        OperationSpec(
            "svd",
            1,
            "Eigenvalues of AᵀA (QR Algorithm)",
            lambda ms, p: float(min(ms[0].shape) ** 3),
            _run_svd,
        ),
        OperationSpec(
            "solve",
            2,
            "LU Decomposition with Partial Pivoting",
            lambda ms, p: _n(ms) ** 3 / 3,
            _run_solve,
        ),
        OperationSpec(
            "power",
            1,
            "Fast Matrix Exponentiation",
            lambda ms, p: math.log2(max(abs(p["power"]), 1)) * _n(ms) ** 3,
            _run_power,
            square=True,
        ),
    )
}


def get_operation(name: str) -> OperationSpec:
    if name not in OPERATIONS:
        raise UnknownOperationError(
            f"Unknown matrix operation: {name}. Available: {list(OPERATIONS.keys())}",
            {"operation": name},
        )
    return OPERATIONS[name]


def validate(operation: str, matrices: Sequence[Matrix], params: Optional[Dict[str, Any]] = None):
    """
    Check operand count, shapes and parameters for `operation`.

    Raises `DimensionMismatchError` or `InvalidParameterError`; returns
    the `OperationSpec` on success. An integral float power (e.g. 2.0
    from JSON) is normalised to int in `params`.
    """
    spec = get_operation(operation)
    params = params or {}

    if len(matrices) != spec.arity:
        raise DimensionMismatchError(
            f"operation '{operation}' requires {spec.arity} matrix(es), "
            f"but {len(matrices)} provided",
            {"expected": spec.arity, "actual": len(matrices)},
        )

    A = matrices[0]
    if spec.square and not A.is_square:
        raise DimensionMismatchError(
            f"dimension mismatch: {operation} needs a square matrix, got {A.dimensions}",
            {"rows": A.rows, "cols": A.cols},
        )

    if operation in ("add", "subtract"):
        B = matrices[1]
        if A.shape != B.shape:
            raise DimensionMismatchError(
                f"dimension mismatch: {A.dimensions} and {B.dimensions} "
                f"must have the same dimensions for {operation}",
                {"left": list(A.shape), "right": list(B.shape)},
            )
    elif operation == "multiply":
        B = matrices[1]
        if A.cols != B.rows:
            raise DimensionMismatchError(
                f"dimension mismatch: {A.dimensions} cannot multiply {B.dimensions} "
                f"(inner dimensions {A.cols} != {B.rows})",
                {"left": list(A.shape), "right": list(B.shape)},
            )
    elif operation == "solve":
        b = matrices[1]
        if not A.is_square:
            raise DimensionMismatchError(
                f"dimension mismatch: coefficient matrix must be square, got {A.dimensions}",
                {"rows": A.rows, "cols": A.cols},
            )
        if A.rows != b.rows:
            raise DimensionMismatchError(
                f"dimension mismatch: coefficient matrix has {A.rows} rows "
                f"but the constant vector has {b.rows}",
                {"rows": A.rows, "rhs_rows": b.rows},
            )
        if b.cols != 1:
            raise DimensionMismatchError(
                f"dimension mismatch: constant vector must be a single column, got {b.dimensions}",
                {"rhs_cols": b.cols},
            )
    elif operation == "power":
        k = params.get("power")
        if k is None:
            raise InvalidParameterError("power requires params['power']", {"power": None})
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            if isinstance(k, float) and k.is_integer():
                params["power"] = int(k)
            else:
                raise InvalidParameterError(
                    f"matrix power must be an integer, got {k!r}", {"power": repr(k)}
                )
    elif operation == "lu":
        pivot = params.get("pivot", False)
        if not isinstance(pivot, bool):
            raise InvalidParameterError(
                f"'pivot' must be a boolean, got {pivot!r}", {"pivot": repr(pivot)}
            )
    return spec


def _wrap(value: Any) -> Any:
    """Turn kernel ndarrays into `Matrix` values, rejecting overflow."""
    if isinstance(value, np.ndarray):
        if not np.all(np.isfinite(value)):
            raise NumericalInstabilityError(
                "result contains non-finite values (overflow or division by zero)"
            )
        return Matrix(value)
    if isinstance(value, dict):
        return {k: _wrap(v) for k, v in value.items()}
    if isinstance(value, float) and not math.isfinite(value):
        raise NumericalInstabilityError("result is not a finite number")
    if isinstance(value, list) and not all(math.isfinite(v) for v in value):
        raise NumericalInstabilityError("result contains non-finite values")
    return value


def execute(
    operation: str,
    matrices: Sequence[MatrixLike],
    params: Optional[Dict[str, Any]] = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
    config: Optional[EngineConfig] = None,
) -> OperationResult:
    """
    Run one named operation.

    Parameters
    ----------
    operation : str
        One of `OPERATIONS`.
    matrices : sequence of Matrix | ndarray | nested lists
    params : dict | None
        ``{"power": int}`` for power, optional ``{"pivot": bool}`` for lu.
    progress : callable | None
        ``progress(percent, message)``, called at coarse granularity.
    cancel : CancellationToken | None
        Polled once per outer kernel loop.
    config : EngineConfig | None

    Raises
    ------
    MatrixEngineError (or a subclass) on any failure. No partial results.
    """
    config = config or DEFAULT_CONFIG
    params = dict(params or {})
    ms = [as_matrix(m) for m in matrices]
    spec = validate(operation, ms, params)

    reporter = ProgressReporter(progress, cancel)
    reporter.emit(10, f"starting {operation}")
    logger.debug(
        "execute: %s on %s params=%s",
        operation,
        [m.dimensions for m in ms],
        params,
    )

    arrays = [m.data for m in ms]
    t0 = time.perf_counter()
    raw, extras = spec.run(arrays, params, config, reporter)
    elapsed = time.perf_counter() - t0
    value = _wrap(raw)

    algorithm = spec.algorithm
    if operation == "lu":
        algorithm += " with Partial Pivoting" if params.get("pivot") else " (no pivoting)"
    elif operation == "power" and params["power"] < 0:
        algorithm = "Gauss-Jordan Inverse + " + algorithm

    warnings_: List[str] = []
    if extras.get("converged") is False:
        note = (
            f"{operation}: QR iteration did not converge in "
            f"{config.max_eigen_iterations} sweeps; values may be inaccurate"
        )
        logger.warning(note)
        warnings_.append(note)

    metadata = OperationMetadata(
        operation_time=elapsed,
        algorithm_used=algorithm,
        complexity=float(spec.complexity(arrays, params)),
        numerical_stability=primitives.numerical_stability(arrays, config.tol),
        memory_usage=primitives.memory_usage(arrays, raw),
        converged=extras.get("converged"),
        iterations=extras.get("iterations"),
        warnings=warnings_,
    )
    logger.debug("execute: %s finished in %.6fs", operation, elapsed)
    reporter.emit(100, f"{operation} complete")

    return OperationResult(
        operation=operation,
        value=value,
        metadata=metadata,
        analysis=primitives.analysis(arrays[0], config.tol),
    )


def handle_request(
    message: Dict[str, Any],
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """
    Message-level wrapper around `execute`. Never raises for engine
    failures; they come back as ``{"error": {"kind", "message", "details"}}``.
    """
    try:
        request = OperationRequest.from_dict(message)
        result = execute(
            request.operation,
            request.matrices,
            request.params,
            progress=progress,
            cancel=cancel,
            config=config,
        )
    except MatrixEngineError as e:
        logger.debug("handle_request: %s failed: %s", e.kind, e)
        return {"error": e.to_dict()}
    except Exception as e:
        logger.exception("handle_request: unexpected failure")
        return {
            "error": {
                "kind": "internal",
                "message": str(e) or "Matrix processing error",
                "details": {"type": type(e).__name__},
            }
        }

    return to_response(result)


def to_response(result: OperationResult) -> Dict[str, Any]:
    response = {
        "result": encode_value(result.value),
        "metadata": result.metadata.to_dict(),
    }
    if result.analysis is not None:
        response["analysis"] = result.analysis.to_dict()
    return response
