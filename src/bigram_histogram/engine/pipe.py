"""Bounded byte pipe between one producer thread and one consumer.

The writer side borrows a scratch region (get_memory), fills it, commits the
filled part (advance) and publishes it (flush). The reader side sees every
published byte it has not yet consumed, reports how many leading bytes it is
done with (advance_to), and keeps the rest for its next read. That retained
tail is how a word split across two reads gets put back together.

Backpressure: flush() blocks once the unconsumed bytes reach the pause
threshold and wakes when the reader drains them below the resume threshold.
A reader that has examined everything and is waiting for more bytes never
holds the writer back, so a single word larger than the threshold still
makes progress instead of deadlocking.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..config import DEFAULT_CONFIG, PipelineConfig
from ..core.errors import PipelineError, PipelineTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadResult:
    """Unconsumed bytes plus whether the writer has finished."""
    buffer: bytes
    is_completed: bool


@dataclass(frozen=True)
class FlushResult:
    """is_completed is True once the reader has stopped listening."""
    is_completed: bool


class Pipe:
    """A single-producer, single-consumer byte pipe with backpressure."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._cond = threading.Condition()
        # Published, not yet consumed
        self._buffer = bytearray()
        # Bytes of _buffer the reader has already looked at
        self._examined = 0
        # Length of the last ReadResult handed out, None if no read outstanding
        self._outstanding: int | None = None

        self._writer_completed = False
        self._writer_error: BaseException | None = None
        self._reader_completed = False

        self.reader = PipeReader(self)
        self.writer = PipeWriter(self)

    @property
    def unconsumed(self) -> int:
        with self._cond:
            return len(self._buffer)

    def _writer_may_proceed(self) -> bool:
        return (
            self._reader_completed
            or len(self._buffer) < self.config.resume_writer_threshold
            or self._examined >= len(self._buffer)
        )


class PipeWriter:
    """Producer side of a Pipe."""

    def __init__(self, pipe: Pipe) -> None:
        self._pipe = pipe
        self._scratch = bytearray(pipe.config.segment_size)
        self._unflushed = bytearray()

    def get_memory(self, size_hint: int = 0) -> memoryview:
        """Borrow a writable region of at least size_hint bytes (one segment by default)."""
        self._check_open()
        size = max(size_hint, self._pipe.config.segment_size)
        if len(self._scratch) < size:
            self._scratch = bytearray(size)
        return memoryview(self._scratch)[:size]

    def advance(self, count: int) -> None:
        """Commit the first count bytes of the region from get_memory()."""
        self._check_open()
        if count < 0 or count > len(self._scratch):
            raise ValueError(f"cannot advance by {count} bytes")
        self._unflushed += self._scratch[:count]

    def write(self, data: bytes) -> FlushResult:
        """Copy data into the pipe and flush it."""
        self._check_open()
        self._unflushed += data
        return self.flush()

    def flush(self) -> FlushResult:
        """Publish committed bytes to the reader, blocking while the pipe is full."""
        pipe = self._pipe
        with pipe._cond:
            self._check_open()
            if pipe._reader_completed:
                self._unflushed.clear()
                return FlushResult(is_completed=True)
            if self._unflushed:
                pipe._buffer += self._unflushed
                self._unflushed.clear()
                pipe._cond.notify_all()

            if len(pipe._buffer) >= pipe.config.pause_writer_threshold and not pipe._writer_may_proceed():
                logger.debug("Writer paused at %d unconsumed bytes", len(pipe._buffer))
                pipe._cond.wait_for(pipe._writer_may_proceed)

            return FlushResult(is_completed=pipe._reader_completed)

    def complete(self, exc: BaseException | None = None) -> None:
        """Mark the end of the data, optionally with the error that ended it."""
        pipe = self._pipe
        with pipe._cond:
            if pipe._writer_completed:
                return
            if exc is None and self._unflushed:
                pipe._buffer += self._unflushed
            self._unflushed.clear()
            pipe._writer_completed = True
            pipe._writer_error = exc
            pipe._cond.notify_all()

    @property
    def is_completed(self) -> bool:
        return self._pipe._writer_completed

    def _check_open(self) -> None:
        if self._pipe._writer_completed:
            raise PipelineError("writer already completed")


class PipeReader:
    """Consumer side of a Pipe."""

    def __init__(self, pipe: Pipe) -> None:
        self._pipe = pipe

    def read(self) -> ReadResult:
        """Block until unexamined bytes arrive or the writer completes.

        Raises PipelineError if the writer completed with an error, and
        PipelineTimeoutError if the configured read timeout expires first.
        """
        pipe = self._pipe
        timeout = pipe.config.read_timeout
        with pipe._cond:
            if pipe._reader_completed:
                raise PipelineError("reader already completed")
            if pipe._outstanding is not None:
                raise PipelineError("read() called again before advance_to()")

            ready = pipe._cond.wait_for(
                lambda: pipe._writer_completed or len(pipe._buffer) > pipe._examined,
                timeout=timeout,
            )
            if not ready:
                raise PipelineTimeoutError(f"no data within {timeout} seconds")

            if pipe._writer_error is not None:
                raise PipelineError("writer failed") from pipe._writer_error

            data = bytes(pipe._buffer)
            pipe._outstanding = len(data)
            return ReadResult(data, is_completed=pipe._writer_completed)

    def advance_to(self, consumed: int, examined: int | None = None) -> None:
        """Release the first consumed bytes of the last read.

        Bytes between consumed and examined stay in the pipe, but the next
        read() waits for new data beyond them. examined defaults to the whole
        buffer that was returned.
        """
        pipe = self._pipe
        with pipe._cond:
            length = pipe._outstanding
            if length is None:
                raise PipelineError("advance_to() without a preceding read()")
            if examined is None:
                examined = length
            if not 0 <= consumed <= examined <= length:
                raise ValueError(
                    f"invalid advance: consumed={consumed} examined={examined} length={length}"
                )
            del pipe._buffer[:consumed]
            pipe._examined = examined - consumed
            pipe._outstanding = None
            pipe._cond.notify_all()

    def complete(self, exc: BaseException | None = None) -> None:
        """Stop reading. The writer learns of it on its next flush."""
        pipe = self._pipe
        with pipe._cond:
            if pipe._reader_completed:
                return
            if exc is not None:
                logger.debug("Reader completed with error: %r", exc)
            pipe._reader_completed = True
            pipe._outstanding = None
            pipe._buffer.clear()
            pipe._examined = 0
            pipe._cond.notify_all()

    @property
    def is_completed(self) -> bool:
        return self._pipe._reader_completed
