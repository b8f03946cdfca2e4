"""ProgressReporter adapters."""
from __future__ import annotations

import logging
import threading
from typing import Callable

from hsv_segmentation.ports import ProgressReporter

logger = logging.getLogger(__name__)


class LoggingProgressReporter(ProgressReporter):
    """Logs progress; answers False once `request_cancel()` was called.

    `request_cancel` is safe to call from a signal handler or another thread.
    """

    def __init__(self) -> None:
        self._cancel_requested = threading.Event()

    def request_cancel(self) -> None:
        self._cancel_requested.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested.is_set()

    def update(self, fraction: float, *, label: str = "") -> bool:
        if fraction >= 1.0:
            logger.info("%s: done", label or "progress")
        else:
            logger.debug("%s: %.1f%%", label or "progress", fraction * 100.0)
        return not self._cancel_requested.is_set()


class CallbackProgressReporter(ProgressReporter):
    """Adapts a plain `fn(fraction) -> bool` callable."""

    def __init__(self, fn: Callable[[float], bool]) -> None:
        self._fn = fn

    def update(self, fraction: float, *, label: str = "") -> bool:
        return bool(self._fn(fraction))
