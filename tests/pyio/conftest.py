"""
Fixtures for PyIOFile tests.

Provides file-like doubles that record how the engine drives them.
"""

import io

import pytest


class RecordingReader:
    """Read-only stream that records every call it receives."""

    def __init__(self, data: bytes):
        self._io = io.BytesIO(data)
        self.calls = []
        self.closed = False

    def read(self, n):
        self.calls.append(("read", n))
        return self._io.read(n)

    def seek(self, offset, whence=0):
        self.calls.append(("seek", offset, whence))
        return self._io.seek(offset, whence)

    def tell(self):
        self.calls.append(("tell",))
        return self._io.tell()

    def close(self):
        self.calls.append(("close",))
        self.closed = True


class RecordingWriter:
    """Write-only sink that keeps each chunk it is handed."""

    def __init__(self):
        self.chunks = []
        self.closed = False

    def write(self, data):
        self.chunks.append(bytes(data))
        return len(data)

    def close(self):
        self.closed = True

    def getvalue(self):
        return b"".join(self.chunks)


@pytest.fixture
def open_files():
    """Collects adapters and closes any the test left open."""
    adapters = []
    yield adapters
    for f in adapters:
        if not f.closed:
            f._release()


@pytest.fixture
def make_reader(open_files):
    """Build a read-mode PyIOFile over ``RecordingReader(data)``."""
    from mediaio import PyIOFile

    def _make(data=b"0123456789", buffer_size=4, **kwargs):
        f = PyIOFile(RecordingReader(data), buffer_size, **kwargs)
        open_files.append(f)
        return f

    return _make


@pytest.fixture
def make_writer(open_files):
    """Build a write-mode PyIOFile over ``RecordingWriter()``."""
    from mediaio import PyIOFile

    def _make(buffer_size=4, **kwargs):
        f = PyIOFile(RecordingWriter(), buffer_size, **kwargs)
        open_files.append(f)
        return f

    return _make
