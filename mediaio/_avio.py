"""
Engine-side buffered I/O over an ``IOContext``.

These routines do what the engine does with a custom I/O context: they call
the installed function pointers with the context's transfer buffer and
report plain integer codes. Nothing here raises for an engine failure;
callers hand the codes to ``err_check``.
"""

from __future__ import annotations

import ctypes
import errno
from typing import Any

from . import _native
from .exceptions import ErrorType

__all__ = ["read_packet", "write", "flush", "seek", "size"]

_EOF = -int(ErrorType.EOF)


def read_packet(ctx: Any, size: int) -> tuple[int, bytes]:
    """Read up to ``size`` bytes (capped at the buffer size) in one callback.

    Returns:
        ``(code, data)``. ``code`` is the byte count, or a negative error
        (the end-of-stream sentinel at end of data) with empty ``data``.
    """
    c = ctx.contents
    if c.write_flag:
        return -errno.EBADF, b""
    if not c.read_packet:
        return -errno.ENOSYS, b""

    n = min(size, c.buffer_size)
    ret = c.read_packet(c.opaque, c.buffer, n)
    if ret < 0:
        if ret == _EOF:
            c.eof_reached = 1
        else:
            c.error = ret
        return ret, b""
    if ret == 0:
        # A zero-length read is not end of stream; the engine retries.
        return 0, b""

    c.pos += ret
    return ret, ctypes.string_at(c.buffer, ret)


def flush(ctx: Any) -> int:
    """Hand any buffered output to the write callback."""
    c = ctx.contents
    if not c.write_flag or c.buf_ptr == 0:
        return 0

    pending = c.buf_ptr
    c.buf_ptr = 0
    ret = c.write_packet(c.opaque, c.buffer, pending)
    if ret < 0:
        c.error = ret
        return ret
    c.pos += pending
    return 0


def write(ctx: Any, data: bytes) -> int:
    """Buffer ``data``, flushing whenever the transfer buffer fills.

    Each callback receives at most ``max_packet_size`` bytes.
    """
    c = ctx.contents
    if not c.write_flag:
        return -errno.EBADF
    if c.error < 0:
        return c.error

    limit = c.max_packet_size or c.buffer_size
    view = memoryview(data)
    while view:
        room = limit - c.buf_ptr
        chunk = view[:room]
        dst = ctypes.addressof(c.buffer.contents) + c.buf_ptr
        ctypes.memmove(dst, bytes(chunk), len(chunk))
        c.buf_ptr += len(chunk)
        view = view[len(chunk) :]
        if c.buf_ptr >= limit:
            ret = flush(ctx)
            if ret < 0:
                return ret
    return 0


def seek(ctx: Any, offset: int, whence: int) -> int:
    """Move to a new position; returns it, or a negative error code."""
    c = ctx.contents
    whence &= ~_native.AVSEEK_FORCE
    if not c.seek:
        return -errno.ESPIPE

    if whence != _native.AVSEEK_SIZE:
        ret = flush(ctx)
        if ret < 0:
            return ret

    ret = c.seek(c.opaque, offset, whence)
    if ret < 0 or whence == _native.AVSEEK_SIZE:
        return ret
    c.pos = ret
    c.eof_reached = 0
    return ret


def size(ctx: Any) -> int:
    """Total stream size in bytes, or a negative error code.

    Asks the seek callback first; when it declines, measures by seeking to
    the end and back.
    """
    c = ctx.contents
    if not c.seek:
        return -errno.ENOSYS

    total = c.seek(c.opaque, 0, _native.AVSEEK_SIZE)
    if total >= 0:
        return total

    pos = seek(ctx, 0, _native.SEEK_CUR)
    if pos < 0:
        return pos
    total = seek(ctx, -1, _native.SEEK_END)
    if total < 0:
        return total
    total += 1
    ret = seek(ctx, pos, _native.SEEK_SET)
    if ret < 0:
        return ret
    return total
