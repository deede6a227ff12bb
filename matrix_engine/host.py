# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Thin host for running operations off the calling thread.

The engine itself is synchronous. `MatrixTaskRunner` submits each request
to a thread pool, forwards progress, and enforces a per-task timeout. On
timeout or `cancel()` the task's `CancellationToken` is tripped, so the
kernel stops at its next poll point instead of running to completion.
"""

import concurrent.futures
import logging
import threading
from typing import Any, Dict, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .dispatcher import handle_request
from .errors import OperationCancelledError, OperationTimeoutError
from .progress import CancellationToken, ProgressCallback

logger = logging.getLogger(__name__)


class MatrixTask:
    """Handle for one submitted request."""

    def __init__(self, task_id: str, future: concurrent.futures.Future, token: CancellationToken, timeout: float):
        self.task_id = task_id
        self._future = future
        self._token = token
        self.timeout = timeout

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> None:
        self._token.cancel()
        self._future.cancel()

    def response(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Wait for the wire-shaped response dict.

        Raises
        ------
        OperationTimeoutError : no answer within `timeout` (default: the
            runner's timeout). The kernel is asked to stop.
        OperationCancelledError : the task was cancelled before it started.
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            return self._future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            self._token.cancel()
            logger.warning("task %s timed out after %.1fs", self.task_id, timeout)
            raise OperationTimeoutError(
                f"operation timed out after {timeout:g} seconds",
                {"task_id": self.task_id, "timeout": timeout},
            ) from None
        except concurrent.futures.CancelledError:
            raise OperationCancelledError(
                "operation cancelled", {"task_id": self.task_id}
            ) from None


class MatrixTaskRunner:
    """
    Parameters
    ----------
    max_workers : int | None
        Thread pool size, passed to ThreadPoolExecutor.
    config : EngineConfig | None
        Forwarded to every request; ``config.timeout`` is the default
        per-task timeout (5 minutes).
    """

    def __init__(self, max_workers: Optional[int] = None, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="matrix-engine"
        )
        self._lock = threading.Lock()
        self._counter = 0

    def submit(
        self,
        message: Dict[str, Any],
        on_progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
    ) -> MatrixTask:
        with self._lock:
            self._counter += 1
            task_id = f"matrix-{message.get('operation', 'unknown')}-{self._counter}"
        token = CancellationToken()
        future = self._executor.submit(handle_request, message, on_progress, token, self.config)
        logger.debug("submitted %s", task_id)
        return MatrixTask(task_id, future, token, self.config.timeout if timeout is None else timeout)

    def run(self, message: Dict[str, Any], on_progress: Optional[ProgressCallback] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Submit and wait; timeouts come back as an error response."""
        task = self.submit(message, on_progress, timeout)
        try:
            return task.response()
        except (OperationTimeoutError, OperationCancelledError) as e:
            return {"error": e.to_dict()}

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
