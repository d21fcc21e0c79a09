"""Tuning knobs for the read/parse pipeline.

Defaults: 4 KiB reads, the writer pauses at 64 KiB of unconsumed bytes and
resumes once the reader drains them below 32 KiB.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SEGMENT_SIZE = 4096
DEFAULT_PAUSE_WRITER_THRESHOLD = 65536
DEFAULT_RESUME_WRITER_THRESHOLD = 32768

ENV_SEGMENT_SIZE = "BIGRAM_SEGMENT_SIZE"
ENV_PAUSE_THRESHOLD = "BIGRAM_PAUSE_THRESHOLD"
ENV_RESUME_THRESHOLD = "BIGRAM_RESUME_THRESHOLD"
ENV_READ_TIMEOUT = "BIGRAM_READ_TIMEOUT"


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for one run of the counter."""
    segment_size: int = DEFAULT_SEGMENT_SIZE                        # Bytes per source read
    pause_writer_threshold: int = DEFAULT_PAUSE_WRITER_THRESHOLD    # Writer blocks at this many unconsumed bytes
    resume_writer_threshold: int = DEFAULT_RESUME_WRITER_THRESHOLD  # ...until the reader drains below this
    read_timeout: float | None = None                               # Seconds the tokenizer waits for bytes
    max_workers: int | None = None                                  # Concurrent streams; None = all at once

    def __post_init__(self) -> None:
        if self.segment_size < 1:
            raise ValueError(f"segment_size must be positive, got {self.segment_size}")
        if self.resume_writer_threshold < 1:
            raise ValueError("resume_writer_threshold must be positive")
        if self.pause_writer_threshold < self.resume_writer_threshold:
            raise ValueError(
                f"pause_writer_threshold ({self.pause_writer_threshold}) must not be "
                f"below resume_writer_threshold ({self.resume_writer_threshold})"
            )
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError(f"read_timeout must be positive, got {self.read_timeout}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> PipelineConfig:
        """Build a config from BIGRAM_* environment variables, defaulting the rest."""
        env = os.environ if environ is None else environ
        timeout = env.get(ENV_READ_TIMEOUT)
        return cls(
            segment_size=int(env.get(ENV_SEGMENT_SIZE, DEFAULT_SEGMENT_SIZE)),
            pause_writer_threshold=int(env.get(ENV_PAUSE_THRESHOLD, DEFAULT_PAUSE_WRITER_THRESHOLD)),
            resume_writer_threshold=int(env.get(ENV_RESUME_THRESHOLD, DEFAULT_RESUME_WRITER_THRESHOLD)),
            read_timeout=float(timeout) if timeout else None,
        )


DEFAULT_CONFIG = PipelineConfig()
