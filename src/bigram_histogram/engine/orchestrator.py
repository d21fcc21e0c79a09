"""Stream orchestrator: count bigrams over several input streams at once.

Per stream:
1. A producer thread copies the stream into a Pipe (engine.source)
2. The worker thread drains the pipe through a BigramTokenizer (engine.tokenizer)
3. Bigrams land in a private BigramMap, merged into the shared histogram
   only once the whole stream has been read

Streams run concurrently. One stream failing stops its own chain and nothing
else; every failure is reported together with the histogram the other
streams built.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable

from ..config import DEFAULT_CONFIG, PipelineConfig
from ..core.bigram_map import BigramMap, SharedBigramMap
from ..core.errors import PipelineError, PipelineTimeoutError, StreamProcessingError
from .pipe import Pipe
from .source import write_stream_to_pipe
from .tokenizer import BigramSink, BigramTokenizer, read_pipe_and_process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamFailure:
    """A stream that could not be fully processed."""
    index: int
    name: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.name}: {self.error}"


@dataclass(frozen=True)
class StreamStats:
    """What one successfully processed stream contributed."""
    index: int
    name: str
    bytes_read: int
    word_count: int
    bigram_count: int
    elapsed: float


@dataclass
class CountResult:
    """The finished histogram plus every stream failure (possibly none)."""
    histogram: SharedBigramMap
    failures: list[StreamFailure] = field(default_factory=list)
    stats: list[StreamStats] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise StreamProcessingError carrying all failures, if there were any."""
        if self.failures:
            raise StreamProcessingError(self.failures)


class _Producer(threading.Thread):
    """Runs the source adapter and keeps its outcome for the worker to inspect."""

    def __init__(self, stream: BinaryIO, pipe: Pipe, name: str) -> None:
        super().__init__(name=f"bigram-producer[{name}]", daemon=True)
        self.stream = stream
        self.pipe = pipe
        self.source_name = name
        self.bytes_read = 0
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            self.bytes_read = write_stream_to_pipe(self.stream, self.pipe.writer, self.source_name)
        except Exception as exc:
            self.error = exc


def _stream_name(stream: BinaryIO, index: int) -> str:
    name = getattr(stream, "name", None)
    if isinstance(name, str) and name:
        return name
    return f"<stream {index}>"


def process_stream(
    stream: BinaryIO,
    sink: BigramSink,
    config: PipelineConfig | None = None,
    name: str = "<stream>",
) -> tuple[int, BigramTokenizer]:
    """Count one stream's bigrams into sink, reading and parsing concurrently.

    Returns (bytes_read, tokenizer). Raises the stream's SourceReadError or
    PipelineError on failure; when both halves fail, the read error wins
    because it is the root cause.
    """
    config = config or DEFAULT_CONFIG
    pipe = Pipe(config)
    tokenizer = BigramTokenizer(sink)

    producer = _Producer(stream, pipe, name)
    producer.start()

    consumer_error: PipelineError | None = None
    try:
        read_pipe_and_process(pipe.reader, tokenizer)
    except PipelineError as exc:
        consumer_error = exc
    finally:
        # A producer stuck in a blocking read cannot be interrupted; after a
        # timeout it is left to exit on its own once the read returns.
        if not isinstance(consumer_error, PipelineTimeoutError):
            producer.join()

    if producer.error is not None:
        raise producer.error
    if consumer_error is not None:
        raise consumer_error
    return producer.bytes_read, tokenizer


def _run_worker(
    index: int,
    stream: BinaryIO,
    histogram: SharedBigramMap,
    config: PipelineConfig,
) -> StreamStats | StreamFailure:
    """Process one stream; return its stats or its failure, never raise."""
    name = _stream_name(stream, index)
    logger.debug("Starting %s", name)
    start = time.monotonic()

    local = BigramMap()
    try:
        bytes_read, tokenizer = process_stream(stream, local, config, name)
    except Exception as exc:
        logger.warning("Failed %s: %s", name, exc)
        return StreamFailure(index, name, exc)

    histogram.merge(local)
    elapsed = time.monotonic() - start
    logger.debug(
        "Finished %s: %d bytes, %d words, %d bigrams (%.3fs)",
        name, bytes_read, tokenizer.word_count, tokenizer.bigram_count, elapsed,
    )
    return StreamStats(index, name, bytes_read, tokenizer.word_count, tokenizer.bigram_count, elapsed)


def count_streams(
    streams: Iterable[BinaryIO],
    histogram: SharedBigramMap | None = None,
    config: PipelineConfig | None = None,
) -> CountResult:
    """Count bigrams across all streams into one histogram.

    Args:
        streams: Non-empty collection of already-open binary streams. They
            are read to the end but not closed.
        histogram: Histogram to add to; a fresh one by default.
        config: Pipeline settings.

    Returns:
        CountResult with the histogram, the failures of every stream that
        failed (in stream order), and stats for the ones that succeeded.
    """
    streams = list(streams)
    if not streams:
        raise ValueError("at least one stream is required")

    config = config or DEFAULT_CONFIG
    histogram = histogram if histogram is not None else SharedBigramMap()
    workers = config.max_workers or len(streams)

    result = CountResult(histogram)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bigram-worker") as executor:
        future_to_index = {
            executor.submit(_run_worker, index, stream, histogram, config): index
            for index, stream in enumerate(streams)
        }
        # Every future is waited on; a failed stream does not cut the others short
        for future in as_completed(future_to_index):
            outcome = future.result()
            if isinstance(outcome, StreamFailure):
                result.failures.append(outcome)
            else:
                result.stats.append(outcome)

    result.failures.sort(key=lambda f: f.index)
    result.stats.sort(key=lambda s: s.index)
    logger.info(
        "Counted %d streams: %d unique bigrams, %d failures",
        len(streams), histogram.unique_bigrams, len(result.failures),
    )
    return result
