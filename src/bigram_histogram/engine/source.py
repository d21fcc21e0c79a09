"""Source adapter: copy an open binary stream into a pipe writer.

The stream is owned by the caller. It is read until end-of-stream, an error,
or the pipe's reader going away, and is never closed here.
"""
from __future__ import annotations

import logging
from typing import BinaryIO

from ..core.errors import SourceReadError
from .pipe import PipeWriter

logger = logging.getLogger(__name__)


def _read_into(source: BinaryIO, memory: memoryview) -> int:
    """One read from source into memory. Returns the byte count, 0 at end-of-stream."""
    readinto = getattr(source, "readinto", None)
    if readinto is not None:
        count = readinto(memory)
        if count is None:
            raise BlockingIOError("non-blocking source has no data available")
        return count

    data = source.read(len(memory))
    if isinstance(data, str):
        raise TypeError("source is a text stream; open it in binary mode")
    if data is None:
        raise BlockingIOError("non-blocking source has no data available")
    memory[:len(data)] = data
    return len(data)


def write_stream_to_pipe(source: BinaryIO, writer: PipeWriter, name: str = "<stream>") -> int:
    """Write the entire contents of source to writer.

    Returns the number of bytes written. On failure the writer is completed
    with the error, so the reader sees it too, and SourceReadError is raised.
    """
    total = 0
    try:
        while True:
            memory = writer.get_memory()

            count = _read_into(source, memory)
            if count == 0:  # stream finished
                break

            writer.advance(count)
            total += count

            result = writer.flush()
            if result.is_completed:
                logger.debug("%s: reader finished early after %d bytes", name, total)
                break
    except Exception as exc:
        writer.complete(exc)
        raise SourceReadError(f"error reading {name}: {exc}") from exc

    writer.complete()
    logger.debug("%s: read %d bytes", name, total)
    return total
