"""
Deferred delivery of exceptions raised inside engine callbacks.

A callback invoked by the engine must return an integer and must not raise.
When the Python code behind it fails, the exception is parked here and the
callback returns the stashed-error sentinel instead. The next ``err_check``
on the same thread drains the slot and re-raises the original exception.
"""

from __future__ import annotations

import sys
import threading

from ._logging import scoped_logger
from .exceptions import STASHED_ERROR_CODE

__all__ = ["ExceptionStash", "default_stash"]

log = scoped_logger("callback")


class ExceptionStash:
    """
    One pending-exception slot per thread.

    Within a thread the slot holds at most one exception. Stashing while the
    slot is occupied drops the older exception after logging it, so the next
    ``consume()`` always returns the most recent failure.

    Example
    -------
    >>> stash = ExceptionStash()
    >>> try:
    ...     raise ValueError("boom")
    ... except ValueError:
    ...     code = stash.stash()
    >>> code == -STASHED_ERROR_CODE
    True
    >>> stash.consume()
    ValueError('boom')
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def stash(self, exc: BaseException | None = None) -> int:
        """Hold ``exc`` (default: the exception being handled).

        Returns the negative sentinel code for the callback to hand back to
        the engine.
        """
        if exc is None:
            exc = sys.exc_info()[1]
            if exc is None:
                raise ValueError("stash() called with no exception being handled")

        local = self._local
        existing = getattr(local, "exc", None)
        if existing is not None:
            log.error(
                "Dropping unhandled exception from I/O callback: %s: %s",
                type(existing).__name__,
                existing,
                exc_info=(type(existing), existing, existing.__traceback__),
            )
            # Balance out the increment below.
            local.count -= 1

        local.exc = exc
        local.count = getattr(local, "count", 0) + 1
        return -STASHED_ERROR_CODE

    def consume(self) -> BaseException | None:
        """Remove and return this thread's pending exception, if any."""
        local = self._local
        if not getattr(local, "count", 0):
            return None
        exc = local.exc
        local.count -= 1
        local.exc = None
        return exc

    def pending(self) -> int:
        """Number of exceptions waiting on this thread (0 or 1)."""
        return getattr(self._local, "count", 0)

    def clear(self) -> None:
        """Discard this thread's pending exception without raising it."""
        self._local.exc = None
        self._local.count = 0


# Shared by every adapter and checker that is not given its own.
default_stash = ExceptionStash()
