"""
Tests for PyIOFile construction, lifecycle and native memory ownership.
"""

import errno
import io

import pytest

from .conftest import RecordingReader, RecordingWriter


class ReadOnly:
    def read(self, n):
        return b""


class WriteOnly:
    def write(self, data):
        return len(data)


class TestModeSelection:
    """Input or output mode, from the object or forced."""

    def test_read_mode_inferred(self, make_reader):
        f = make_reader()
        assert f.writeable is False
        assert f.iocontext.contents.write_flag == 0

    def test_write_mode_inferred(self, make_writer):
        f = make_writer()
        assert f.writeable is True
        assert f.iocontext.contents.write_flag == 1

    def test_object_with_both_is_output(self):
        """An object with write() defaults to output mode."""
        from mediaio import PyIOFile

        with PyIOFile(io.BytesIO()) as f:
            assert f.writeable is True

    def test_forced_read_mode(self):
        from mediaio import PyIOFile

        with PyIOFile(io.BytesIO(b"abc"), writeable=False) as f:
            assert f.writeable is False

    def test_read_mode_without_read(self):
        from mediaio import ConfigurationError, PyIOFile

        with pytest.raises(ConfigurationError, match="no read"):
            PyIOFile(WriteOnly(), writeable=False)

    def test_write_mode_without_write(self):
        from mediaio import ConfigurationError, PyIOFile

        with pytest.raises(ConfigurationError, match="no write"):
            PyIOFile(ReadOnly(), writeable=True)

    def test_readable_probe_false(self):
        from mediaio import ConfigurationError, PyIOFile

        class NotReadable(ReadOnly):
            def readable(self):
                return False

        with pytest.raises(ConfigurationError):
            PyIOFile(NotReadable())

    def test_writable_probe_false(self):
        from mediaio import ConfigurationError, PyIOFile

        class NotWritable(WriteOnly):
            def writable(self):
                return False

        with pytest.raises(ConfigurationError):
            PyIOFile(NotWritable())

    def test_configuration_error_is_value_error(self):
        from mediaio import PyIOFile

        with pytest.raises(ValueError):
            PyIOFile(ReadOnly(), writeable=True)

    @pytest.mark.parametrize("size", [0, -1])
    def test_buffer_size_must_be_positive(self, size):
        from mediaio import ConfigurationError, PyIOFile

        with pytest.raises(ConfigurationError, match="buffer_size"):
            PyIOFile(ReadOnly(), size)


class TestSeekability:
    """The seek callback is installed only for seekable objects."""

    def test_seek_and_tell_make_seekable(self, make_reader):
        from mediaio._native import IO_SEEKABLE_NORMAL

        f = make_reader()
        ctx = f.iocontext.contents
        assert f.seekable is True
        assert ctx.seekable == IO_SEEKABLE_NORMAL
        assert bool(ctx.seek)

    def test_read_only_stream_not_seekable(self):
        from mediaio import PyIOFile

        with PyIOFile(ReadOnly()) as f:
            ctx = f.iocontext.contents
            assert f.seekable is False
            assert ctx.seekable == 0
            assert not ctx.seek

    def test_seek_without_tell_not_seekable(self):
        from mediaio import PyIOFile

        class SeekNoTell(ReadOnly):
            def seek(self, offset, whence=0):
                return 0

        with PyIOFile(SeekNoTell()) as f:
            assert f.seekable is False

    def test_seekable_probe_false(self):
        from mediaio import PyIOFile

        class Pipe(RecordingReader):
            def seekable(self):
                return False

        with PyIOFile(Pipe(b"abc")) as f:
            assert f.seekable is False
            assert not f.iocontext.contents.seek


class TestContext:
    """Fields of the allocated I/O context."""

    def test_buffer_and_sizes(self, make_reader):
        f = make_reader(buffer_size=16)
        ctx = f.iocontext.contents
        assert ctx.buffer_size == 16
        assert ctx.max_packet_size == 16
        assert bool(ctx.buffer)
        assert f.buffer_size == 16

    def test_default_buffer_size(self):
        from mediaio import DEFAULT_BUFFER_SIZE, PyIOFile

        assert DEFAULT_BUFFER_SIZE == 32768
        with PyIOFile(ReadOnly()) as f:
            assert f.iocontext.contents.buffer_size == DEFAULT_BUFFER_SIZE

    def test_opaque_identifies_adapter(self, make_reader):
        from mediaio import pyio

        a = make_reader()
        b = make_reader()
        token_a = a.iocontext.contents.opaque
        token_b = b.iocontext.contents.opaque
        assert token_a != token_b
        assert pyio._open_files[token_a] is a
        assert pyio._open_files[token_b] is b

    def test_position_starts_valid(self, make_reader):
        f = make_reader()
        assert f.pos == 0
        assert f.pos_is_valid is True


class TestClose:
    """close() flushes, closes the wrapped object and frees native memory."""

    def test_close_closes_file(self, make_reader):
        f = make_reader()
        f.close()

        assert f.file.closed is True
        assert f.closed is True
        assert f.iocontext is None
        assert f.buffer is None

    def test_close_idempotent(self, make_reader):
        f = make_reader()
        f.close()
        f.close()

        assert f.file.calls.count(("close",)) == 1

    def test_close_unregisters_token(self, make_reader):
        from mediaio import pyio

        f = make_reader()
        token = f.iocontext.contents.opaque
        f.close()

        assert token not in pyio._open_files

    def test_close_flushes_pending_output(self, make_writer):
        from mediaio import _avio

        f = make_writer(buffer_size=8)
        assert _avio.write(f.iocontext, b"abc") == 0
        assert f.file.chunks == []

        f.close()
        assert f.file.chunks == [b"abc"]
        assert f.file.closed is True

    def test_close_without_close_method(self):
        from mediaio import PyIOFile

        f = PyIOFile(ReadOnly())
        f.close()
        assert f.closed is True

    def test_close_error_raised_after_release(self, make_reader):
        """A failing file.close() is raised, and native memory is still freed."""
        f = make_reader()

        def broken_close():
            raise OSError(errno.EIO, "close failed")

        f.fclose = broken_close
        with pytest.raises(OSError, match="close failed"):
            f.close()
        assert f.closed is True

    def test_close_after_failed_flush(self, make_writer):
        """The wrapped file is closed even when the final flush fails."""
        from mediaio import _avio

        class DiskFull(Exception):
            pass

        f = make_writer(buffer_size=8)
        assert _avio.write(f.iocontext, b"abc") == 0

        def broken(data):
            raise DiskFull("disk full")

        f.fwrite = broken
        with pytest.raises(DiskFull, match="disk full"):
            f.close()
        assert f.file.closed is True
        assert f.closed is True

    def test_context_manager(self):
        from mediaio import PyIOFile

        reader = RecordingReader(b"abc")
        with PyIOFile(reader) as f:
            assert not f.closed
        assert f.closed
        assert reader.closed

    def test_repr(self, make_reader):
        f = make_reader()
        assert "mode='r'" in repr(f)
        f.close()
        assert repr(f) == "PyIOFile(closed)"


class TestOwnership:
    """The buffer is freed exactly once, by whoever owns it at teardown."""

    @pytest.fixture
    def freed(self, monkeypatch):
        from mediaio import _bindings

        calls = []
        original = _bindings.buffer_free

        def recording_free(buf):
            calls.append(buf)
            original(buf)

        monkeypatch.setattr(_bindings, "buffer_free", recording_free)
        return calls

    def test_context_frees_buffer(self, freed):
        from mediaio import PyIOFile

        f = PyIOFile(RecordingReader(b"abc"))
        f.close()

        assert len(freed) == 1

    def test_buffer_freed_when_context_alloc_fails(self, monkeypatch, freed):
        from mediaio import PyIOFile, _bindings
        from mediaio.exceptions import MemoryError

        monkeypatch.setattr(_bindings, "io_context_alloc", lambda *args: None)

        with pytest.raises(MemoryError) as exc:
            PyIOFile(RecordingReader(b"abc"))
        assert exc.value.errno == errno.ENOMEM
        assert len(freed) == 1
        assert bool(freed[0])

    def test_buffer_alloc_failure(self, monkeypatch, freed):
        from mediaio import PyIOFile, _bindings
        from mediaio.exceptions import MemoryError

        monkeypatch.setattr(_bindings, "buffer_alloc", lambda size: None)

        with pytest.raises(MemoryError):
            PyIOFile(RecordingReader(b"abc"))
        assert freed == []

    def test_failed_construction_unregisters(self, monkeypatch):
        from mediaio import PyIOFile, _bindings, pyio

        before = set(pyio._open_files)
        monkeypatch.setattr(_bindings, "io_context_alloc", lambda *args: None)

        with pytest.raises(MemoryError):
            PyIOFile(RecordingReader(b"abc"))
        assert set(pyio._open_files) <= before

    def test_del_does_not_close_file(self):
        """Garbage collection frees native memory but leaves the file open."""
        import gc

        from mediaio import PyIOFile

        writer = RecordingWriter()
        f = PyIOFile(writer)
        del f
        gc.collect()

        assert writer.closed is False
