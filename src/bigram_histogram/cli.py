"""
Command-line interface for bigram counting.

Reads the files named on the command line (or stdin when there are none),
counts their bigrams in parallel and prints one "word1 word2": count line per
bigram.

Exit codes:
    0  success
    1  an input file could not be opened
    2  an input could not be processed
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import ExitStack
from typing import BinaryIO, Sequence, TextIO

from .config import PipelineConfig
from .core.bigram_map import BigramMap
from .core.errors import StreamProcessingError
from .engine.orchestrator import count_streams
from .log import setup_logging

EXIT_OK = 0
EXIT_OPEN_FAILED = 1
EXIT_PROCESSING_FAILED = 2

logger = logging.getLogger(__name__)


def write_exceptions(exception: BaseException | None, out: TextIO, _seen: set[int] | None = None) -> None:
    """Write an exception and everything behind it.

    Follows __cause__/__context__ chains, and expands StreamProcessingError
    into the failure of each stream.
    """
    if exception is None:
        return
    seen = _seen if _seen is not None else set()
    if id(exception) in seen:
        return
    seen.add(id(exception))

    out.write("\n")
    out.write(f"{type(exception).__name__}: {exception}\n")

    if isinstance(exception, StreamProcessingError):
        for failure in exception.failures:
            write_exceptions(failure.error, out, seen)
    elif exception.__cause__ is not None:
        write_exceptions(exception.__cause__, out, seen)
    elif exception.__context__ is not None and not exception.__suppress_context__:
        write_exceptions(exception.__context__, out, seen)


def format_histogram(histogram: BigramMap, sort: bool = False) -> list[str]:
    entries = histogram.most_common() if sort else histogram.items()
    return [f'"{key}": {count}' for key, count in entries]


def _open_inputs(files: Sequence[str], stack: ExitStack) -> list[BinaryIO]:
    if not files:  # no files to open, so use stdin instead
        return [sys.stdin.buffer]
    return [stack.enter_context(open(path, "rb")) for path in files]


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bigram-histogram",
        description="Count adjacent word pairs in ASCII text",
    )
    parser.add_argument("files", nargs="*", metavar="FILE",
                        help="Text files to read (default: stdin)")
    parser.add_argument("--sort", action="store_true",
                        help="Print bigrams by descending count")
    parser.add_argument("--json", action="store_true",
                        help="Print the histogram as a JSON object")
    parser.add_argument("--segment-size", type=int, default=None,
                        help="Bytes per read from each input")
    parser.add_argument("--read-timeout", type=float, default=None,
                        help="Give up on an input that produces no data for this many seconds")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (stderr)")
    return parser


def run(args: argparse.Namespace, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    """Run with parsed arguments. Returns the exit code."""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    base = PipelineConfig.from_env()
    config = PipelineConfig(
        segment_size=args.segment_size or base.segment_size,
        pause_writer_threshold=base.pause_writer_threshold,
        resume_writer_threshold=base.resume_writer_threshold,
        read_timeout=args.read_timeout or base.read_timeout,
    )

    with ExitStack() as stack:
        try:
            streams = _open_inputs(args.files, stack)
        except OSError as exc:
            stderr.write(f'Error opening file "{exc.filename}":\n')
            write_exceptions(exc, stderr)
            return EXIT_OPEN_FAILED

        logger.info("Reading %d input(s)", len(streams))
        result = count_streams(streams, config=config)

    try:
        result.raise_for_failures()
    except StreamProcessingError as exc:
        stderr.write("Error processing text:\n")
        write_exceptions(exc, stderr)
        return EXIT_PROCESSING_FAILED

    if args.json:
        histogram = result.histogram
        data = {str(k): v for k, v in histogram.most_common()} if args.sort else histogram.to_dict()
        stdout.write(json.dumps(data, indent=2) + "\n")
    else:
        for line in format_histogram(result.histogram, sort=args.sort):
            stdout.write(line + "\n")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
