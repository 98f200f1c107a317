"""
Structured logging (OpenTelemetry-compliant) and the native log bridge.

Python code logs through the ``mediaio`` logger; lines emitted by the engine
arrive through ``LogBridge`` and are forwarded to ``mediaio.native``.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("pyio")
    log.debug("Installed seek callback", extra={"buffer_size": 32768})

Environment::

    MEDIAIO_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    MEDIAIO_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from collections.abc import MutableMapping
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Any

from . import _native

__all__ = [
    "logger",
    "setup_logging",
    "scoped_logger",
    "adapt_level",
    "LogBridge",
    "log_bridge",
]


def _get_version() -> str:
    try:
        return get_version("mediaio")
    except (ImportError, PackageNotFoundError, AttributeError):
        return "0.0.0"


# =============================================================================
# Level Mapping
# =============================================================================

_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

_NAME_TO_LEVEL = {
    "trace": 1,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
    "none": logging.CRITICAL + 10,
}

# Levels that include code location
_CODE_LOCATION_LEVELS = {logging.DEBUG, logging.ERROR, logging.CRITICAL}


def adapt_level(level: int) -> int:
    """Convert a native log level to a Python logging level.

    Values between two native levels map to the more severe one.
    """
    if level <= _native.LOG_FATAL:
        return logging.CRITICAL
    if level <= _native.LOG_ERROR:
        return logging.ERROR
    if level <= _native.LOG_WARNING:
        return logging.WARNING
    if level <= _native.LOG_INFO:
        return logging.INFO
    if level <= _native.LOG_VERBOSE:
        return logging.DEBUG
    if level <= _native.LOG_DEBUG:
        return 5
    return 1


def _severity(levelno: int) -> str:
    if levelno < logging.DEBUG:
        return "TRACE"
    return _LEVEL_TO_SEVERITY.get(levelno, "INFO")


def _infer_scope(logger_name: str) -> str:
    if logger_name.endswith(".native"):
        return "native"
    return logger_name.split(".")[-1] if logger_name else "mediaio"


def _strip_path_prefix(filepath: str) -> str:
    prefix = "mediaio/"
    if prefix in filepath:
        return filepath[filepath.index(prefix) + len(prefix) :]
    return filepath


# =============================================================================
# Formatters
# =============================================================================

_STANDARD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "scope",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """OpenTelemetry-compliant JSON formatter."""

    def __init__(self) -> None:
        super().__init__()
        self._version = _get_version()

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(dt.microsecond * 1000):09d}Z"

        attributes: dict[str, Any] = {
            "scope": getattr(record, "scope", None) or _infer_scope(record.name)
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_FIELDS and not key.startswith("_"):
                attributes[key] = value

        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _strip_path_prefix(record.pathname)
            attributes["code.lineno"] = record.lineno

        if record.exc_info:
            attributes["exception.type"] = record.exc_info[0].__name__
            attributes["exception.message"] = str(record.exc_info[1])
            attributes["exception.stacktrace"] = self.formatException(record.exc_info)

        log_record = {
            "timestamp": timestamp,
            "severityText": _severity(record.levelno),
            "body": record.getMessage(),
            "attributes": attributes,
            "resource": {
                "service.name": "mediaio",
                "service.version": self._version,
            },
        }
        return json.dumps(log_record, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for terminal output."""

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _RED = "\x1b[31m"
    _YELLOW = "\x1b[33m"
    _CYAN = "\x1b[36m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _color(self, code: str, text: str) -> str:
        if not self._use_colors or not code:
            return text
        return f"{code}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)

        if record.levelno <= logging.DEBUG:
            level_color = self._DIM
        elif record.levelno >= logging.ERROR:
            level_color = self._RED
        elif record.levelno >= logging.WARNING:
            level_color = self._YELLOW
        else:
            level_color = ""

        scope = getattr(record, "scope", None) or _infer_scope(record.name)
        parts = [
            dt.strftime("%H:%M:%S"),
            " ",
            self._color(level_color, f"{_severity(record.levelno):<5} "),
            self._color(self._CYAN, f"[{scope}] "),
            record.getMessage(),
        ]

        # Native category shown in parentheses
        category = getattr(record, "category", None)
        if category:
            parts.append(f" ({category})")

        if record.levelno in _CODE_LOCATION_LEVELS and scope != "native":
            filepath = _strip_path_prefix(record.pathname)
            parts.append(self._color(self._DIM, f" [{filepath}:{record.lineno}]"))

        if record.exc_info:
            parts.append("\n")
            parts.append(self.formatException(record.exc_info))

        return "".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    level_name = os.environ.get("MEDIAIO_LOG_LEVEL", "warn")
    return _NAME_TO_LEVEL.get(level_name.lower(), logging.WARNING)


def _get_log_format() -> str:
    fmt = os.environ.get("MEDIAIO_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if _get_log_format() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


# Single logger for all of mediaio
logger = logging.getLogger("mediaio")


def _setup_default_handler() -> None:
    # Don't add handler if user already configured logging
    if logger.handlers:
        return
    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "WARN",
    format: str | None = None,
) -> None:
    """
    Configure mediaio logging.

    Parameters
    ----------
    level : str or int, default "WARN"
        Log level name ("trace", "debug", "info", "warn", "error", "fatal",
        "off") or a logging constant like ``logging.DEBUG``. Native engine
        lines are forwarded at the adapted level, so "debug" also shows the
        engine's verbose output.

    format : str, optional
        Either "json" or "human". If not specified, uses MEDIAIO_LOG_FORMAT
        or auto-detects based on TTY.

    Examples
    --------
    >>> import mediaio
    >>> mediaio.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _NAME_TO_LEVEL.get(level.lower(), logging.WARNING)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if format:
        os.environ["MEDIAIO_LOG_FORMAT"] = format

    logger.addHandler(_create_handler())
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges extra attributes with scope."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra: dict[str, Any] = dict(self.extra) if self.extra else {}
        if "extra" in kwargs:
            extra.update(kwargs["extra"])
        kwargs["extra"] = extra
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Create a logger adapter that tags every record with ``scope``."""
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# =============================================================================
# Native Log Bridge
# =============================================================================


class LogBridge:
    """
    Receives log lines from the engine.

    Every line is forwarded to the ``mediaio.native`` logger. Lines at
    native ERROR level or worse are also remembered, together with a
    monotonic count, so ``err_check`` can attach the most recent one to the
    exception it raises. The count lets a consumer tell a fresh line from
    one it has already attached.

    Example
    -------
    >>> bridge = LogBridge()
    >>> bridge.record(_native.LOG_ERROR, "mov,mp4", "moov atom not found")
    >>> bridge.get_last_error()
    (1, (16, 'mov,mp4', 'moov atom not found'))
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger.getChild("native")
        self._lock = threading.Lock()
        self._error_count = 0
        self._last_error: tuple[int, str, str] | None = None
        # Keep a reference: the engine holds only the raw function pointer.
        self._c_callback = _native.LogCallbackFunc(self._handle_log)

    @property
    def callback(self) -> Any:
        """The C callback to install in the engine."""
        return self._c_callback

    def record(self, level: int, category: str, message: str) -> None:
        """Record one native log line."""
        if level <= _native.LOG_ERROR:
            with self._lock:
                self._error_count += 1
                self._last_error = (level, category, message)

        py_level = adapt_level(level)
        if self._logger.isEnabledFor(py_level):
            self._logger.log(
                py_level,
                message.rstrip(),
                extra={"scope": "native", "category": category},
            )

    def get_last_error(self) -> tuple[int, tuple[int, str, str] | None]:
        """Return ``(count, (level, category, message))`` for the last error line."""
        with self._lock:
            return self._error_count, self._last_error

    def _handle_log(self, level: int, category: bytes | None, message: bytes | None) -> None:
        try:
            self.record(
                level,
                category.decode("utf-8", "replace") if category else "",
                message.decode("utf-8", "replace") if message else "",
            )
        except Exception:
            # Nothing may propagate into the engine; the line is lost.
            logger.exception("Failed to record native log line", extra={"scope": "native"})


# Process-wide bridge; the engine has a single log callback slot.
log_bridge = LogBridge()

# Initialize on import
_setup_default_handler()
