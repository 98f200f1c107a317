"""
Python file objects as custom engine I/O.

``PyIOFile`` wraps any object with ``read``/``write``/``seek``/``tell``
methods and exposes it to the engine as an ``IOContext`` whose callbacks
call back into Python.

The engine calls the trampolines below with a fixed C signature and cannot
handle Python exceptions. ctypes re-acquires the GIL on entry, the body
runs with it held, and any exception is handed to the stash so the engine
only ever sees an integer. The next ``err_check`` re-raises it.

Example
-------
>>> import io
>>> f = PyIOFile(io.BytesIO(b"0123456789"), 4, writeable=False)
>>> _avio.read_packet(f.iocontext, 4)
(4, b'0123')
>>> f.close()
"""

from __future__ import annotations

import ctypes
import errno
import itertools
import weakref
from typing import Any

from . import _avio, _bindings, _native
from ._avio import _EOF
from ._bindings import err_check
from ._logging import scoped_logger
from ._stash import ExceptionStash, default_stash
from .exceptions import ConfigurationError

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "PyIOFile",
    "pyio_read",
    "pyio_write",
    "pyio_seek",
    "pyio_close_custom",
]

log = scoped_logger("pyio")

DEFAULT_BUFFER_SIZE = 32768

# opaque token -> live PyIOFile. Tokens start at 1 so NULL is never valid.
_open_files: weakref.WeakValueDictionary[int, PyIOFile] = weakref.WeakValueDictionary()
_tokens = itertools.count(1)


class PyIOFile:
    """
    Adapts a Python file-like object into an engine I/O context.

    The object is borrowed, not owned: ``close()`` closes it only because
    the engine's close path expects that of custom I/O.

    To be seekable the object needs ``seek`` and ``tell``; if it also has
    ``seekable()``, that must return True. Without seeking the engine can
    still stream through it.

    Args:
        file: Object with ``read(n)`` (input) or ``write(b)`` (output).
        buffer_size: Size of the transfer buffer; the largest single read
            or write the engine will request.
        writeable: Force output (True) or input (False) mode. When None,
            output is chosen iff the object has ``write``.
        stash: Where callback exceptions are parked. Must be the stash the
            checker consuming this context's codes drains.

    Raises:
        ConfigurationError: The object lacks the method the mode needs, or
            its ``readable()``/``writable()`` probe returned False.
        MemoryError: The buffer or context could not be allocated.
    """

    def __init__(
        self,
        file: Any,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        writeable: bool | None = None,
        stash: ExceptionStash | None = None,
    ) -> None:
        # Teardown must work however far construction gets.
        self.buffer = None
        self.iocontext = None
        self._token = 0

        self.file = file
        self.stash = stash if stash is not None else default_stash

        readable = getattr(file, "readable", None)
        writable = getattr(file, "writable", None)
        seekable = getattr(file, "seekable", None)
        self.fread = getattr(file, "read", None)
        self.fwrite = getattr(file, "write", None)
        self.fseek = getattr(file, "seek", None)
        self.ftell = getattr(file, "tell", None)
        self.fclose = getattr(file, "close", None)

        self.seekable = (
            self.fseek is not None
            and self.ftell is not None
            and (seekable is None or bool(seekable()))
        )

        if writeable is None:
            writeable = self.fwrite is not None
        self.writeable = bool(writeable)

        if self.writeable:
            if self.fwrite is None or (writable is not None and not writable()):
                raise ConfigurationError(
                    "File object has no write() method, or writable() returned False."
                )
        else:
            if self.fread is None or (readable is not None and not readable()):
                raise ConfigurationError(
                    "File object has no read() method, or readable() returned False."
                )

        if buffer_size <= 0:
            raise ConfigurationError(f"buffer_size must be positive, got {buffer_size}")
        self.buffer_size = buffer_size

        self.pos = 0
        self.pos_is_valid = True

        self._token = next(_tokens)
        _open_files[self._token] = self

        # This is effectively the maximum size of reads.
        self.buffer = _bindings.buffer_alloc(buffer_size)
        if not self.buffer:
            self._release()
            err_check(-errno.ENOMEM)

        self.iocontext = _bindings.io_context_alloc(
            self.buffer,
            buffer_size,
            self.writeable,
            self._token,
            _read_trampoline,
            _write_trampoline,
            _seek_trampoline if self.seekable else None,
        )
        if not self.iocontext:
            # No context took the buffer, so it is still ours to free.
            self._release()
            err_check(-errno.ENOMEM)

        ctx = self.iocontext.contents
        if self.seekable:
            ctx.seekable = _native.IO_SEEKABLE_NORMAL
        ctx.max_packet_size = buffer_size

        log.debug(
            "Opened custom I/O",
            extra={
                "mode": "write" if self.writeable else "read",
                "seekable": self.seekable,
                "buffer_size": buffer_size,
            },
        )

    @property
    def closed(self) -> bool:
        return self.iocontext is None and self.buffer is None

    def close(self) -> None:
        """Flush pending output, close the wrapped object, free native memory.

        Idempotent. Errors from flushing or from ``file.close()`` are raised
        after the native memory has been released.
        """
        if self.closed:
            return
        try:
            if self.iocontext:
                err_check(pyio_close_custom(self.iocontext))
        finally:
            self._release()

    def _release(self) -> None:
        if self.iocontext:
            # The engine owns the buffer now and may have replaced it.
            _bindings.io_context_free(self.iocontext)
        elif self.buffer:
            # Context allocation never happened or failed; the buffer is ours.
            _bindings.buffer_free(self.buffer)
        self.iocontext = None
        self.buffer = None
        _open_files.pop(self._token, None)

    def __enter__(self) -> PyIOFile:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        # Never closes the borrowed file; only native memory is ours.
        try:
            self._release()
        except Exception:
            pass

    def __repr__(self) -> str:
        if self.closed:
            return "PyIOFile(closed)"
        mode = "w" if self.writeable else "r"
        return f"PyIOFile({self.file!r}, mode={mode!r}, pos={self.pos})"


# =============================================================================
# Trampolines
# =============================================================================


def _lookup(opaque: int | None) -> PyIOFile:
    try:
        return _open_files[opaque]
    except KeyError:
        raise RuntimeError(f"I/O callback for unknown or released file (opaque={opaque})") from None


def _stash_for(opaque: int | None) -> ExceptionStash:
    f = _open_files.get(opaque)
    return f.stash if f is not None else default_stash


def pyio_read(opaque: int | None, buf: Any, buf_size: int) -> int:
    """Fill ``buf`` with up to ``buf_size`` bytes from ``file.read``."""
    try:
        self = _lookup(opaque)
        res = self.fread(buf_size)
        if len(res) > buf_size:
            raise ValueError(f"read({buf_size}) returned {len(res)} bytes")
        ctypes.memmove(buf, bytes(res), len(res))
        self.pos += len(res)
        if not res:
            return _EOF
        return len(res)
    except Exception:
        return _stash_for(opaque).stash()


def pyio_write(opaque: int | None, buf: Any, buf_size: int) -> int:
    """Pass ``buf_size`` bytes from ``buf`` to ``file.write``."""
    try:
        self = _lookup(opaque)
        bytes_to_write = ctypes.string_at(buf, buf_size)
        ret_value = self.fwrite(bytes_to_write)
        bytes_written = ret_value if isinstance(ret_value, int) else buf_size
        self.pos += bytes_written
        return bytes_written
    except Exception:
        return _stash_for(opaque).stash()


def pyio_seek(opaque: int | None, offset: int, whence: int) -> int:
    """Seek the file and return the new absolute position."""
    # The engine may ask for the total size; declining is always allowed.
    if whence == _native.AVSEEK_SIZE:
        return -1
    try:
        self = _lookup(opaque)
        res = self.fseek(offset, whence)

        # Track the position for the user.
        if whence == _native.SEEK_SET:
            self.pos = offset
            self.pos_is_valid = True
        elif whence == _native.SEEK_CUR:
            self.pos += offset
        else:
            self.pos_is_valid = False

        if not isinstance(res, int):
            if self.pos_is_valid:
                res = self.pos
            else:
                res = self.ftell()
                self.pos = res
                self.pos_is_valid = True
        return res
    except Exception:
        return _stash_for(opaque).stash()


def pyio_close_custom(ctx: Any) -> int:
    """Close path for custom I/O: flush engine buffers, then ``file.close()``."""
    c = ctx.contents
    try:
        self = _lookup(c.opaque)
        try:
            ret = _avio.flush(ctx)
        finally:
            # The file is closed even when the final flush fails.
            if self.fclose is not None:
                self.fclose()
        return min(ret, 0)
    except Exception:
        return _stash_for(c.opaque).stash()


# Module level so the function pointers outlive every IOContext using them.
_read_trampoline = _native.ReadPacketFunc(pyio_read)
_write_trampoline = _native.WritePacketFunc(pyio_write)
_seek_trampoline = _native.SeekFunc(pyio_seek)
