"""Execution contexts that own feed state mutation."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class InlineDispatcher:
    """Run work immediately on the calling thread."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run fn(*args) now."""
        fn(*args)

    def shutdown(self) -> None:
        """Nothing to release."""


class SerialDispatcher:
    """Run work, in submission order, on a single dedicated thread.

    Firestore invokes snapshot callbacks on its own background threads;
    funnelling them through one worker keeps every state change on the
    same execution context without locks.
    """

    def __init__(self, name: str = "feed") -> None:
        """Initialize the dispatcher."""
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue fn(*args) on the worker thread."""
        future = self._executor.submit(fn, *args)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self) -> None:
        """Wait for queued work and stop the worker."""
        self._executor.shutdown(wait=True)


def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Feed task failed: {exc}")
