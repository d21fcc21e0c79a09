"""Tests for the stream-to-pipe source adapter."""

import io
import threading

import pytest

from bigram_histogram.config import PipelineConfig
from bigram_histogram.core.errors import PipelineError, SourceReadError
from bigram_histogram.engine.pipe import Pipe
from bigram_histogram.engine.source import write_stream_to_pipe


def drain(pipe):
    chunks = []
    while True:
        result = pipe.reader.read()
        pipe.reader.advance_to(len(result.buffer))
        chunks.append(result.buffer)
        if result.is_completed:
            return b"".join(chunks)


class ReadOnly:
    """Stream with read() but no readinto()."""

    def __init__(self, data):
        self._inner = io.BytesIO(data)

    def read(self, size=-1):
        return self._inner.read(size)


class TestWriteStreamToPipe:
    def test_copies_everything_then_completes(self):
        pipe = Pipe()
        data = b"The quick brown fox"
        assert write_stream_to_pipe(io.BytesIO(data), pipe.writer) == len(data)
        assert pipe.writer.is_completed
        assert drain(pipe) == data

    def test_small_reads_preserve_order(self, chunked):
        pipe = Pipe(PipelineConfig(segment_size=3))
        data = bytes(range(256)) * 4
        t = threading.Thread(target=write_stream_to_pipe, args=(chunked(data, sizes=(1, 2, 3)), pipe.writer))
        t.start()
        assert drain(pipe) == data
        t.join(timeout=2)

    def test_source_without_readinto(self):
        pipe = Pipe()
        write_stream_to_pipe(ReadOnly(b"plain read"), pipe.writer)
        assert drain(pipe) == b"plain read"

    def test_text_stream_rejected(self):
        pipe = Pipe()
        with pytest.raises(SourceReadError) as info:
            write_stream_to_pipe(io.StringIO("text"), pipe.writer)
        assert isinstance(info.value.__cause__, TypeError)

    def test_read_failure_completes_writer_with_error(self, chunked):
        pipe = Pipe()
        stream = chunked(b"abcdefgh", sizes=(4,), fail_after=4)
        with pytest.raises(SourceReadError) as info:
            write_stream_to_pipe(stream, pipe.writer, name="broken.txt")
        assert isinstance(info.value.__cause__, OSError)
        assert "broken.txt" in str(info.value)
        assert pipe.writer.is_completed
        with pytest.raises(PipelineError):
            drain(pipe)

    def test_stops_when_reader_finishes_early(self, chunked):
        pipe = Pipe(PipelineConfig(segment_size=2))
        pipe.reader.complete()
        stream = chunked(b"x" * 100, sizes=(2,))
        assert write_stream_to_pipe(stream, pipe.writer) == 2
        assert stream.reads == 1
