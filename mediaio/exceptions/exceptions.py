"""
mediaio exceptions.

This module defines the exception hierarchy for mediaio:

    MediaIOError (base)
    ├── ConfigurationError - Stream object cannot back a custom I/O context
    ├── StashedCallbackError - Sentinel for an exception held by a callback
    ├── LookupError - Something the engine looked up does not exist
    │   └── DecoderNotFoundError, MuxerNotFoundError, ...
    ├── HTTPError - HTTP-level failures reported by network protocols
    │   ├── HTTPServerError
    │   └── HTTPClientError
    │       └── HTTPBadRequestError, HTTPNotFoundError, ...
    ├── EOFError, InvalidDataError, BugError, ... - library error codes
    ├── PermissionError, TimeoutError, ... - errno codes, mirroring builtins
    ├── OSError - any other errno code
    ├── ArgumentError - EINVAL
    └── UndefinedError - a code nobody recognizes

Every class also inherits the matching builtin, so callers can catch at
either granularity::

    try:
        err_check(rc, filename)
    except mediaio.exceptions.InvalidDataError:
        ...  # exactly this code
    except ValueError:
        ...  # any value-style failure, mediaio or not
    except mediaio.MediaIOError as e:
        print(f"Error {e.errno}: {e.strerror}")

Use ``error_class(code)`` to resolve the class for a positive code.
"""

import builtins
import errno as _errno

from .codes import ErrorType

__all__ = [
    "ERROR_MAP",
    "error_class",
    # Base
    "MediaIOError",
    "ConfigurationError",
    "StashedCallbackError",
    "UndefinedError",
    "ArgumentError",
    # Families
    "LookupError",
    "HTTPError",
    "HTTPClientError",
    # Library codes
    "BSFNotFoundError",
    "BugError",
    "BufferTooSmallError",
    "DecoderNotFoundError",
    "DemuxerNotFoundError",
    "EncoderNotFoundError",
    "EOFError",
    "ExitError",
    "ExternalError",
    "FilterNotFoundError",
    "InvalidDataError",
    "MuxerNotFoundError",
    "OptionNotFoundError",
    "PatchWelcomeError",
    "ProtocolNotFoundError",
    "StreamNotFoundError",
    "UnknownError",
    "ExperimentalError",
    "InputChangedError",
    "OutputChangedError",
    "HTTPBadRequestError",
    "HTTPUnauthorizedError",
    "HTTPForbiddenError",
    "HTTPNotFoundError",
    "HTTPOtherClientError",
    "HTTPServerError",
    # errno codes
    "PermissionError",
    "BlockingIOError",
    "ChildProcessError",
    "ConnectionAbortedError",
    "ConnectionRefusedError",
    "ConnectionResetError",
    "FileExistsError",
    "InterruptedError",
    "IsADirectoryError",
    "FileNotFoundError",
    "NotADirectoryError",
    "BrokenPipeError",
    "ProcessLookupError",
    "TimeoutError",
    "MemoryError",
    "NotImplementedError",
    "OverflowError",
    "OSError",
]


class MediaIOError(Exception):
    """
    Base exception for all errors reported by the engine.

    Attributes
    ----------
    errno : int | None
        The positive error code (negated engine return value).
    strerror : str | None
        Human-readable message for the code.
    filename : str | None
        The file that was being operated on, when known.
    log : tuple | None
        ``(level, category, message)`` of the last native error log line
        recorded before the failure, or None.

    Example
    -------
    >>> try:
    ...     err_check(-errno.ENOENT, "missing.mkv")
    ... except MediaIOError as e:
    ...     print(e)
    [Errno 2] No such file or directory: 'missing.mkv'
    """

    def __init__(self, code, message, filename=None, log=None):
        self.errno = code
        self.strerror = message

        args = [code, message]
        if filename or log:
            args.append(filename)
            if log:
                args.append(log)
        super().__init__(*args)
        # OSError truncates args when a filename is given.
        self.args = tuple(args)

    @property
    def filename(self):
        try:
            return self.args[2]
        except IndexError:
            return None

    @property
    def log(self):
        try:
            return self.args[3]
        except IndexError:
            return None

    def __str__(self) -> str:
        msg = ""
        if self.errno is not None:
            msg = f"{msg}[Errno {self.errno}] "
        if self.strerror is not None:
            msg = f"{msg}{self.strerror}"
        if self.filename:
            msg = f"{msg}: {self.filename!r}"
        if self.log:
            msg = f"{msg}; last error log: [{self.log[1].strip()}] {self.log[2].strip()}"
        return msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.errno!r}, {self.strerror!r})"


# =============================================================================
# Adapter / Callback Errors
# =============================================================================


class ConfigurationError(MediaIOError, builtins.ValueError):
    """
    A stream object cannot back a custom I/O context.

    Raised by ``PyIOFile`` when the object lacks the method its mode needs
    (``read`` for input, ``write`` for output), or when its ``readable()``
    / ``writable()`` probe returns False.
    """

    def __init__(self, message, filename=None):
        super().__init__(None, message, filename)


class StashedCallbackError(MediaIOError, builtins.RuntimeError):
    """
    The sentinel code a callback returns after stashing an exception.

    Seen only when the stash was already drained (or belongs to another
    thread) by the time the code reaches ``err_check``; normally the
    original exception is re-raised instead.
    """


class UndefinedError(MediaIOError):
    """Fallback for a code that matches no known error."""


class ArgumentError(MediaIOError, builtins.ValueError):
    """Invalid argument (EINVAL)."""

    def __str__(self) -> str:
        msg = ""
        if self.strerror is not None:
            msg = f"{msg}{self.strerror}"
        if self.filename:
            msg = f"{msg}: {self.filename!r}"
        if self.errno is not None:
            msg = f"{msg} returned {self.errno}"
        if self.log:
            msg = f"{msg}; last error log: [{self.log[1].strip()}] {self.log[2].strip()}"
        return msg


# =============================================================================
# Families
# =============================================================================


class LookupError(MediaIOError, builtins.LookupError):
    """A component (codec, muxer, option, ...) could not be found."""


class HTTPError(MediaIOError):
    """An HTTP request made by a network protocol failed."""


class HTTPClientError(HTTPError):
    """The server rejected the request (4xx)."""


# =============================================================================
# Library Codes
# =============================================================================


class BSFNotFoundError(LookupError):
    pass


class BugError(MediaIOError, builtins.RuntimeError):
    pass


class BufferTooSmallError(MediaIOError, builtins.ValueError):
    pass


class DecoderNotFoundError(LookupError):
    pass


class DemuxerNotFoundError(LookupError):
    pass


class EncoderNotFoundError(LookupError):
    pass


class EOFError(MediaIOError, builtins.EOFError):
    """End of stream."""


class ExitError(MediaIOError):
    pass


class ExternalError(MediaIOError):
    pass


class FilterNotFoundError(LookupError):
    pass


class InvalidDataError(MediaIOError, builtins.ValueError):
    """The input could not be parsed."""


class MuxerNotFoundError(LookupError):
    pass


class OptionNotFoundError(LookupError):
    pass


class PatchWelcomeError(MediaIOError):
    pass


class ProtocolNotFoundError(LookupError):
    pass


class StreamNotFoundError(LookupError):
    pass


class UnknownError(MediaIOError):
    pass


class ExperimentalError(MediaIOError):
    pass


class InputChangedError(MediaIOError):
    pass


class OutputChangedError(MediaIOError):
    pass


class HTTPBadRequestError(HTTPClientError):
    pass


class HTTPUnauthorizedError(HTTPClientError):
    pass


class HTTPForbiddenError(HTTPClientError):
    pass


class HTTPNotFoundError(HTTPClientError):
    pass


class HTTPOtherClientError(HTTPClientError):
    pass


class HTTPServerError(HTTPError):
    pass


# =============================================================================
# errno Codes
# =============================================================================


class PermissionError(MediaIOError, builtins.PermissionError):
    pass


class BlockingIOError(MediaIOError, builtins.BlockingIOError):
    pass


class ChildProcessError(MediaIOError, builtins.ChildProcessError):
    pass


class ConnectionAbortedError(MediaIOError, builtins.ConnectionAbortedError):
    pass


class ConnectionRefusedError(MediaIOError, builtins.ConnectionRefusedError):
    pass


class ConnectionResetError(MediaIOError, builtins.ConnectionResetError):
    pass


class FileExistsError(MediaIOError, builtins.FileExistsError):
    pass


class InterruptedError(MediaIOError, builtins.InterruptedError):
    pass


class IsADirectoryError(MediaIOError, builtins.IsADirectoryError):
    pass


class FileNotFoundError(MediaIOError, builtins.FileNotFoundError):
    pass


class NotADirectoryError(MediaIOError, builtins.NotADirectoryError):
    pass


class BrokenPipeError(MediaIOError, builtins.BrokenPipeError):
    pass


class ProcessLookupError(MediaIOError, builtins.ProcessLookupError):
    pass


class TimeoutError(MediaIOError, builtins.TimeoutError):
    pass


class MemoryError(MediaIOError, builtins.MemoryError):
    pass


class NotImplementedError(MediaIOError, builtins.NotImplementedError):
    pass


class OverflowError(MediaIOError, builtins.OverflowError):
    pass


class OSError(MediaIOError, builtins.OSError):
    """Any errno code without a more specific class."""


# =============================================================================
# Code Registry
# =============================================================================

_ERRNO_CLASSES = (
    (PermissionError, (_errno.EACCES, _errno.EPERM)),
    (
        BlockingIOError,
        (_errno.EAGAIN, _errno.EALREADY, _errno.EINPROGRESS, _errno.EWOULDBLOCK),
    ),
    (ChildProcessError, (_errno.ECHILD,)),
    (ConnectionAbortedError, (_errno.ECONNABORTED,)),
    (ConnectionRefusedError, (_errno.ECONNREFUSED,)),
    (ConnectionResetError, (_errno.ECONNRESET,)),
    (FileExistsError, (_errno.EEXIST,)),
    (InterruptedError, (_errno.EINTR,)),
    (IsADirectoryError, (_errno.EISDIR,)),
    (FileNotFoundError, (_errno.ENOENT,)),
    (NotADirectoryError, (_errno.ENOTDIR,)),
    (BrokenPipeError, (_errno.EPIPE, _errno.ESHUTDOWN)),
    (ProcessLookupError, (_errno.ESRCH,)),
    (TimeoutError, (_errno.ETIMEDOUT,)),
    (MemoryError, (_errno.ENOMEM,)),
    (NotImplementedError, (_errno.ENOSYS,)),
    (OverflowError, (_errno.ERANGE,)),
)

_LIBRARY_CLASSES = {
    ErrorType.BSF_NOT_FOUND: BSFNotFoundError,
    ErrorType.BUG: BugError,
    ErrorType.BUFFER_TOO_SMALL: BufferTooSmallError,
    ErrorType.DECODER_NOT_FOUND: DecoderNotFoundError,
    ErrorType.DEMUXER_NOT_FOUND: DemuxerNotFoundError,
    ErrorType.ENCODER_NOT_FOUND: EncoderNotFoundError,
    ErrorType.EOF: EOFError,
    ErrorType.EXIT: ExitError,
    ErrorType.EXTERNAL: ExternalError,
    ErrorType.FILTER_NOT_FOUND: FilterNotFoundError,
    ErrorType.INVALIDDATA: InvalidDataError,
    ErrorType.MUXER_NOT_FOUND: MuxerNotFoundError,
    ErrorType.OPTION_NOT_FOUND: OptionNotFoundError,
    ErrorType.PATCHWELCOME: PatchWelcomeError,
    ErrorType.PROTOCOL_NOT_FOUND: ProtocolNotFoundError,
    ErrorType.STREAM_NOT_FOUND: StreamNotFoundError,
    ErrorType.UNKNOWN: UnknownError,
    ErrorType.EXPERIMENTAL: ExperimentalError,
    ErrorType.INPUT_CHANGED: InputChangedError,
    ErrorType.OUTPUT_CHANGED: OutputChangedError,
    ErrorType.HTTP_BAD_REQUEST: HTTPBadRequestError,
    ErrorType.HTTP_UNAUTHORIZED: HTTPUnauthorizedError,
    ErrorType.HTTP_FORBIDDEN: HTTPForbiddenError,
    ErrorType.HTTP_NOT_FOUND: HTTPNotFoundError,
    ErrorType.HTTP_OTHER_4XX: HTTPOtherClientError,
    ErrorType.HTTP_SERVER_ERROR: HTTPServerError,
    ErrorType.STASHED_CALLBACK: StashedCallbackError,
}


def _build_error_map() -> dict[int, type[MediaIOError]]:
    classes: dict[int, type[MediaIOError]] = {}
    for cls, codes in _ERRNO_CLASSES:
        for code in codes:
            classes[code] = cls
    for code in _errno.errorcode:
        classes.setdefault(code, OSError)
    classes[_errno.EINVAL] = ArgumentError
    for error_type, cls in _LIBRARY_CLASSES.items():
        classes[int(error_type)] = cls
    return classes


# Positive code -> exception class. Built once; never mutated.
ERROR_MAP = _build_error_map()


def error_class(code: int) -> type[MediaIOError]:
    """Return the exception class for a positive error code.

    Unknown codes resolve to ``UndefinedError`` rather than failing.
    """
    return ERROR_MAP.get(code, UndefinedError)
