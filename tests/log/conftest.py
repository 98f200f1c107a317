"""
Fixtures for logging tests.

setup_logging() mutates the process-wide ``mediaio`` logger; restore it so
later tests see the default configuration.
"""

import pytest


@pytest.fixture(autouse=True)
def restore_logger(monkeypatch):
    from mediaio._logging import logger

    handlers = logger.handlers[:]
    level = logger.level
    # setup_logging(format=...) writes this to the environment.
    monkeypatch.setenv("MEDIAIO_LOG_FORMAT", "human")
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
