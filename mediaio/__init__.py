"""
mediaio - Python file objects as native media I/O.

mediaio lets any object with ``read``/``write``/``seek`` methods back a
native demuxer or muxer. The engine talks to it through fixed-signature C
callbacks; exceptions raised by your file object are carried across that
boundary and re-raised, unchanged, where the engine's result is checked.

Quick Start
-----------

    >>> import io
    >>> import mediaio
    >>>
    >>> f = mediaio.PyIOFile(io.BytesIO(b"..."), buffer_size=32768)
    >>> # hand f.iocontext to the engine, then check every result code:
    >>> rc = engine_call(f.iocontext)
    >>> mediaio.err_check(rc, filename="stream.ts")
    >>> f.close()

Errors
------

Every engine failure is raised as a subclass of ``MediaIOError`` that also
inherits the closest builtin (``EOFError``, ``FileNotFoundError``,
``ValueError``, ...). See ``mediaio.exceptions``.

Logging
-------

Python and native log lines go to the ``mediaio`` logger. Configure with
``setup_logging()`` or the ``MEDIAIO_LOG_LEVEL`` / ``MEDIAIO_LOG_FORMAT``
environment variables.
"""

from mediaio._bindings import ErrorChecker, err_check
from mediaio._logging import LogBridge, adapt_level, log_bridge, setup_logging
from mediaio._stash import ExceptionStash
from mediaio.exceptions import (
    ConfigurationError,
    ErrorType,
    MediaIOError,
    StashedCallbackError,
    UndefinedError,
    code_to_tag,
    tag_to_code,
)
from mediaio.pyio import DEFAULT_BUFFER_SIZE, PyIOFile

__all__ = [
    "PyIOFile",
    "DEFAULT_BUFFER_SIZE",
    "err_check",
    "ErrorChecker",
    "ExceptionStash",
    "ErrorType",
    "code_to_tag",
    "tag_to_code",
    "MediaIOError",
    "ConfigurationError",
    "StashedCallbackError",
    "UndefinedError",
    "LogBridge",
    "log_bridge",
    "adapt_level",
    "setup_logging",
]
