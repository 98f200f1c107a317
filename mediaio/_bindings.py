"""
FFI bindings and the error choke point.

Justification: Owns every raw allocation shared with the engine (transfer
buffers, I/O contexts) and the conversion of engine result codes into
exceptions. Memory comes from the C runtime so the engine can free or
replace it with its own allocator.

Every call site that receives an engine result code passes it through
``err_check``; it is the only place a negative code becomes an exception.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import errno
import sys
import threading
from typing import Any

from . import _logging, _native
from ._logging import LogBridge
from ._stash import ExceptionStash, default_stash
from .exceptions import (
    STASHED_ERROR_CODE,
    STASHED_ERROR_MESSAGE,
    ErrorType,
    error_class,
)

__all__ = [
    "get_lib",
    "buffer_alloc",
    "buffer_free",
    "io_context_alloc",
    "io_context_free",
    "strerror",
    "ErrorChecker",
    "err_check",
]

# =============================================================================
# Library Loading
# =============================================================================

_lib: ctypes.CDLL | None = None
_lib_lock = threading.Lock()


def _load_lib() -> ctypes.CDLL:
    if sys.platform == "win32":
        lib = ctypes.CDLL("msvcrt")
    else:
        # find_library may return None; CDLL(None) is the process image.
        lib = ctypes.CDLL(ctypes.util.find_library("c"))

    lib.malloc.argtypes = [ctypes.c_size_t]
    lib.malloc.restype = ctypes.c_void_p
    lib.calloc.argtypes = [ctypes.c_size_t, ctypes.c_size_t]
    lib.calloc.restype = ctypes.c_void_p
    lib.free.argtypes = [ctypes.c_void_p]
    lib.free.restype = None
    lib.strerror.argtypes = [ctypes.c_int]
    lib.strerror.restype = ctypes.c_char_p
    return lib


def get_lib() -> ctypes.CDLL:
    """Return the loaded C runtime, loading it on first use."""
    global _lib
    if _lib is None:
        with _lib_lock:
            if _lib is None:
                _lib = _load_lib()
    return _lib


# =============================================================================
# Memory
# =============================================================================


def buffer_alloc(size: int) -> Any:
    """Allocate a native transfer buffer.

    Returns:
        ``POINTER(c_uint8)`` to ``size`` bytes, or None if allocation failed.
    """
    raw = get_lib().malloc(size)
    if not raw:
        return None
    return ctypes.cast(raw, ctypes.POINTER(ctypes.c_uint8))


def buffer_free(buf: Any) -> None:
    """Free a buffer returned by ``buffer_alloc``. NULL is ignored."""
    if buf:
        get_lib().free(ctypes.cast(buf, ctypes.c_void_p))


def io_context_alloc(
    buffer: Any,
    buffer_size: int,
    write_flag: bool,
    opaque: int,
    read_packet: Any,
    write_packet: Any,
    seek: Any = None,
) -> Any:
    """Allocate an engine I/O context around ``buffer``.

    On success the context owns ``buffer``: free it with ``io_context_free``
    and never through the original pointer. On failure (None) ownership
    stays with the caller.

    Args:
        buffer: Transfer buffer from ``buffer_alloc``.
        buffer_size: Size of ``buffer`` in bytes.
        write_flag: True for output contexts.
        opaque: Token handed back to every callback.
        read_packet: ``ReadPacketFunc`` instance.
        write_packet: ``WritePacketFunc`` instance.
        seek: ``SeekFunc`` instance, or None for a non-seekable stream.

    Returns:
        ``POINTER(IOContext)``, or None if allocation failed.
    """
    lib = get_lib()
    raw = lib.calloc(1, ctypes.sizeof(_native.IOContext))
    if not raw:
        return None

    ctx = ctypes.cast(raw, _native.IOContextPtr)
    c = ctx.contents
    c.buffer = buffer
    c.buffer_size = buffer_size
    c.buf_ptr = 0
    c.write_flag = 1 if write_flag else 0
    c.opaque = opaque
    c.read_packet = read_packet
    c.write_packet = write_packet
    c.seek = seek if seek is not None else _native.SeekFunc()
    c.max_packet_size = 0
    return ctx


def io_context_free(ctx: Any) -> None:
    """Free an I/O context and whatever buffer it currently owns."""
    if not ctx:
        return
    c = ctx.contents
    if c.buffer:
        buffer_free(c.buffer)
        c.buffer = None
    get_lib().free(ctypes.cast(ctx, ctypes.c_void_p))


# =============================================================================
# Error Messages
# =============================================================================


def strerror(res: int) -> str:
    """Render the engine's message for a negative result code."""
    code = -res
    try:
        return ErrorType(code).strerror
    except ValueError:
        pass

    if code in errno.errorcode:
        raw = get_lib().strerror(code)
        if raw:
            return raw.decode("utf-8", "replace")[: _native.ERROR_MAX_STRING_SIZE - 1]

    return f"Error number {res} occurred"


# =============================================================================
# Error Checking
# =============================================================================


class ErrorChecker:
    """
    Converts engine result codes into exceptions.

    A pending callback exception always wins over the code: the sentinel a
    callback returns carries no information of its own, and an unrelated
    failure code may have been produced while unwinding from it.

    Args:
        stash: Where callbacks park their exceptions. Defaults to the
            process-wide stash shared with ``PyIOFile``.
        log_bridge: Source of the last native error log line.
    """

    def __init__(
        self,
        stash: ExceptionStash | None = None,
        log_bridge: LogBridge | None = None,
    ) -> None:
        self.stash = stash if stash is not None else default_stash
        self.log_bridge = log_bridge if log_bridge is not None else _logging.log_bridge
        self._lock = threading.Lock()
        self._last_log_count = 0

    def check(self, res: int, filename: str | None = None) -> int:
        """Return ``res`` if it is a success code, otherwise raise.

        Raises:
            The stashed callback exception, if one is pending on this
            thread; otherwise the ``MediaIOError`` subclass mapped to
            ``-res`` (``UndefinedError`` when unmapped).
        """
        exc = self.stash.consume()
        if exc is not None:
            raise exc

        if res >= 0:
            return res

        log = self._take_log()

        code = -res
        if code == STASHED_ERROR_CODE:
            message = STASHED_ERROR_MESSAGE
        else:
            message = strerror(res)

        raise error_class(code)(code, message, filename, log)

    def _take_log(self) -> tuple[int, str, str] | None:
        # A log line is attached to at most one exception.
        log_count, last_log = self.log_bridge.get_last_error()
        with self._lock:
            if log_count > self._last_log_count:
                self._last_log_count = log_count
                return last_log
        return None


_default_checker = ErrorChecker()


def err_check(res: int, filename: str | None = None) -> int:
    """Raise the appropriate exception for an engine result code.

    Returns ``res`` unchanged when it is non-negative and no callback
    exception is pending.

    Example:
        >>> err_check(0)
        0
        >>> err_check(-errno.ENOENT, "in.mkv")  # raises FileNotFoundError
    """
    return _default_checker.check(res, filename)
