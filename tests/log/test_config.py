"""
Logging configuration tests.

Tests for mediaio._logging setup and native level mapping.
"""

import logging

import pytest


class TestSetupLogging:
    """Tests for setup_logging() function."""

    def test_setup_logging_accessible(self):
        """setup_logging is accessible from mediaio."""
        from mediaio import setup_logging

        assert callable(setup_logging)

    def test_setup_logging_default_level(self):
        """setup_logging() defaults to WARN level."""
        from mediaio._logging import logger, setup_logging

        setup_logging()

        assert logger.level == logging.WARNING

    def test_setup_logging_accepts_string_level(self):
        from mediaio._logging import logger, setup_logging

        setup_logging("DEBUG")

        assert logger.level == logging.DEBUG

    def test_setup_logging_accepts_int_level(self):
        from mediaio._logging import logger, setup_logging

        setup_logging(logging.ERROR)

        assert logger.level == logging.ERROR

    def test_setup_logging_trace_below_debug(self):
        """trace enables the levels native DEBUG and TRACE lines map to."""
        from mediaio._logging import logger, setup_logging

        setup_logging("trace")

        assert logger.isEnabledFor(1)

    def test_setup_logging_replaces_handlers(self):
        """setup_logging() replaces existing handlers."""
        from mediaio._logging import logger, setup_logging

        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging("INFO")

        assert len(logger.handlers) == 1

    def test_setup_logging_format(self):
        from mediaio._logging import HumanFormatter, JsonFormatter, logger, setup_logging

        setup_logging("INFO", format="json")
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

        setup_logging("INFO", format="human")
        assert isinstance(logger.handlers[0].formatter, HumanFormatter)


class TestEnvironment:
    """Tests for MEDIAIO_LOG_LEVEL / MEDIAIO_LOG_FORMAT."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("nonsense", logging.WARNING),
        ],
    )
    def test_level_from_env(self, monkeypatch, name, expected):
        from mediaio._logging import _get_log_level

        monkeypatch.setenv("MEDIAIO_LOG_LEVEL", name)

        assert _get_log_level() == expected

    def test_default_level(self, monkeypatch):
        from mediaio._logging import _get_log_level

        monkeypatch.delenv("MEDIAIO_LOG_LEVEL", raising=False)

        assert _get_log_level() == logging.WARNING

    def test_off_silences_everything(self, monkeypatch):
        from mediaio._logging import _get_log_level

        monkeypatch.setenv("MEDIAIO_LOG_LEVEL", "off")

        assert _get_log_level() > logging.CRITICAL

    def test_format_from_env(self, monkeypatch):
        from mediaio._logging import _get_log_format

        monkeypatch.setenv("MEDIAIO_LOG_FORMAT", "JSON")

        assert _get_log_format() == "json"


class TestAdaptLevel:
    """Native level -> Python level."""

    @pytest.mark.parametrize(
        "native, expected",
        [
            ("LOG_PANIC", logging.CRITICAL),
            ("LOG_FATAL", logging.CRITICAL),
            ("LOG_ERROR", logging.ERROR),
            ("LOG_WARNING", logging.WARNING),
            ("LOG_INFO", logging.INFO),
            ("LOG_VERBOSE", logging.DEBUG),
            ("LOG_DEBUG", 5),
            ("LOG_TRACE", 1),
        ],
    )
    def test_named_levels(self, native, expected):
        from mediaio import _native, adapt_level

        assert adapt_level(getattr(_native, native)) == expected

    def test_between_levels_rounds_to_more_severe(self):
        from mediaio import _native, adapt_level

        assert adapt_level((_native.LOG_WARNING + _native.LOG_ERROR) // 2) == logging.WARNING
        assert adapt_level(_native.LOG_ERROR + 1) == logging.WARNING
        assert adapt_level(_native.LOG_FATAL + 1) == logging.ERROR

    def test_quiet_is_critical(self):
        from mediaio import _native, adapt_level

        assert adapt_level(_native.LOG_QUIET) == logging.CRITICAL


class TestLoggerHierarchy:
    """Tests for logger hierarchy."""

    def test_logger_name(self):
        from mediaio._logging import logger

        assert logger.name == "mediaio"

    def test_native_logger_is_child(self):
        native = logging.getLogger("mediaio.native")

        assert native.parent.name == "mediaio"
