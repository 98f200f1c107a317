"""
Global pytest fixtures for mediaio tests.

This module provides:
- Fault handling for native crashes (bad pointers in callbacks)
- Isolation of the process-wide exception stash and log bridge
"""

import faulthandler

import pytest

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()


@pytest.fixture(scope="session")
def mediaio():
    """Import and return the mediaio module."""
    import mediaio

    return mediaio


@pytest.fixture(autouse=True)
def clean_stash():
    """Make sure no test sees an exception stashed by another."""
    from mediaio._stash import default_stash

    default_stash.clear()
    yield default_stash
    default_stash.clear()


@pytest.fixture
def stash():
    """A private ExceptionStash."""
    from mediaio import ExceptionStash

    return ExceptionStash()


@pytest.fixture
def log_bridge():
    """A private LogBridge."""
    from mediaio import LogBridge

    return LogBridge()


@pytest.fixture
def checker(stash, log_bridge):
    """An ErrorChecker wired to the private stash and log bridge."""
    from mediaio import ErrorChecker

    return ErrorChecker(stash=stash, log_bridge=log_bridge)
