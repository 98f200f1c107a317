"""
mediaio exceptions.

This module defines the exception hierarchy for mediaio:

    MediaIOError (base)
    ├── ConfigurationError - Stream object cannot back a custom I/O context
    ├── StashedCallbackError - Sentinel for an exception held by a callback
    ├── LookupError - Decoder/muxer/protocol/... not found
    ├── HTTPError - HTTP failures (HTTPClientError for 4xx)
    ├── EOFError, InvalidDataError, ... - library error codes
    ├── PermissionError, TimeoutError, ... - errno codes
    ├── OSError - remaining errno codes
    ├── ArgumentError - EINVAL
    └── UndefinedError - unrecognized codes
"""

from .codes import (
    STASHED_ERROR_CODE,
    STASHED_ERROR_MESSAGE,
    ErrorType,
    code_to_tag,
    tag_to_code,
)
from .exceptions import *  # noqa: F403
from .exceptions import __all__ as _exception_names

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    "STASHED_ERROR_CODE",
    "STASHED_ERROR_MESSAGE",
    "ErrorType",
    "code_to_tag",
    "tag_to_code",
    *_exception_names,
]
