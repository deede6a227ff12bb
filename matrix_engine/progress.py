# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Progress and cancellation channel.

Kernels never talk to a host directly. They receive a `ProgressReporter`
argument and call `step()` once per outer-loop iteration (one pivot column,
one block row, one QR sweep). Each call is also the poll point for
cooperative cancellation: if the attached `CancellationToken` has been
tripped, `step()` raises `OperationCancelledError` and the kernel unwinds
without a partial result.

Progress values follow the worker convention of 10 at start, 10..90 while
sweeping and 100 on completion.
"""

import logging
import threading
from typing import Callable, Optional

from .errors import OperationCancelledError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Optional[str]], None]


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")


class ProgressReporter:
    """
    Parameters
    ----------
    callback : callable | None
        ``callback(progress, message)``; progress is an int in [0, 100].
    cancel_token : CancellationToken | None
        Polled on every `emit` / `step`.
    start, span : int
        `step(done, total)` maps to ``start + round(span * done / total)``.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        start: int = 10,
        span: int = 80,
    ) -> None:
        self.callback = callback
        self.cancel_token = cancel_token
        self.start = start
        self.span = span

    def checkpoint(self) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()

    def emit(self, progress: int, message: Optional[str] = None) -> None:
        self.checkpoint()
        if self.callback is None:
            return
        progress = max(0, min(100, int(progress)))
        try:
            self.callback(progress, message)
        except OperationCancelledError:
            raise
        except Exception:
            # progress is advisory
            logger.exception("progress callback failed")

    def step(self, done: int, total: int, message: Optional[str] = None) -> None:
        fraction = done / total if total > 0 else 1.0
        self.emit(self.start + round(self.span * fraction), message)

    def silent(self) -> "ProgressReporter":
        """Same cancellation token, no callback: for kernels nested in a sweep."""
        return ProgressReporter(None, self.cancel_token, self.start, self.span)


def ensure_reporter(progress: Optional[ProgressReporter]) -> ProgressReporter:
    return progress if progress is not None else ProgressReporter()
