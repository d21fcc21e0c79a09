"""Exception hierarchy for bigram counting.

A failure belongs to exactly one stream. Source and pipe errors tear down that
stream's chain only; the orchestrator collects them into a single
StreamProcessingError alongside whatever the healthy streams counted.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..engine.orchestrator import StreamFailure


class BigramHistogramError(Exception):
    """Base class for every error raised by this package."""


class SourceReadError(BigramHistogramError):
    """Reading from an input stream failed. The underlying error is the cause."""


class PipelineError(BigramHistogramError):
    """The pipe between a stream's reader and its tokenizer failed."""


class PipelineTimeoutError(PipelineError):
    """No bytes and no completion arrived within the configured read timeout."""


class StreamProcessingError(BigramHistogramError):
    """One or more streams failed. Carries every failure, not just the first."""

    def __init__(self, failures: Sequence[StreamFailure]) -> None:
        self.failures = list(failures)
        count = len(self.failures)
        noun = "stream" if count == 1 else "streams"
        super().__init__(f"{count} {noun} failed: " + "; ".join(
            f"{f.name}: {f.error}" for f in self.failures
        ))
