"""Streaming word tokenizer and bigram counter.

Bytes go in a buffer at a time; words come out as soon as the byte that ends
them is seen. A word is a run of ASCII letters, lowercased, that may hold a
single hyphen or apostrophe between two letters ("don't", "well-known").

State machine:
  - outside a word: letters start a word, everything else is skipped
  - in a word: letters extend it, a hyphen/apostrophe is held as pending,
    anything else ends the word
  - pending: a letter keeps the pending byte inside the word; anything else
    (including a second hyphen/apostrophe) ends the word without it

feed() returns how many leading bytes are completely done with. A word still
being read is never consumed, so when the caller hands back the same bytes
plus more, the word continues where it left off. The tokenizer remembers how
far it already scanned and never looks at a byte twice.
"""
from __future__ import annotations

import logging
from typing import Protocol

from ..core.bigram_map import BigramMap
from ..core.byte_codes import ROLE_TABLE, WordRole
from ..core.errors import PipelineError
from .pipe import PipeReader

logger = logging.getLogger(__name__)

_LETTER = WordRole.LETTER
_JOINER = WordRole.JOINER


class BigramSink(Protocol):
    def increment(self, first: str, second: str) -> object: ...


class WordTokenizer:
    """Byte-at-a-time word splitter. Subclasses decide what a word is for."""

    def __init__(self) -> None:
        self.in_word = False
        self.pending_punctuation = False
        # Bytes of the retained tail that were already scanned
        self._scanned = 0
        self.word_count = 0
        self.finished = False

    def on_word(self, word: str) -> None:
        raise NotImplementedError

    def feed(self, buffer: bytes, is_completed: bool = False) -> int:
        """Scan buffer and emit every word it completes.

        buffer must start with the bytes left unconsumed by the previous call.
        Returns the number of leading bytes consumed. With is_completed, a
        trailing word is flushed and the whole buffer is consumed.
        """
        if self.finished:
            raise ValueError("tokenizer already finished")
        if len(buffer) < self._scanned:
            raise ValueError("buffer is shorter than the retained tail")

        roles = ROLE_TABLE
        in_word = self.in_word
        pending = self.pending_punctuation
        # An unfinished word always starts at the front of the retained tail
        word_start = 0
        consumed = 0

        for pos in range(self._scanned, len(buffer)):
            role = roles[buffer[pos]]
            if role is _LETTER:
                if not in_word:
                    in_word = True
                    word_start = pos
                pending = False
            elif role is _JOINER and in_word and not pending:
                pending = True
            else:
                if in_word:
                    # a pending hyphen/apostrophe is a break, not part of the word
                    self._emit(buffer[word_start:pos - 1 if pending else pos])
                    in_word = False
                    pending = False
                consumed = pos + 1

        if is_completed:
            if in_word:
                end = len(buffer) - 1 if pending else len(buffer)
                self._emit(buffer[word_start:end])
                in_word = False
                pending = False
            consumed = len(buffer)
            self.finished = True

        self.in_word = in_word
        self.pending_punctuation = pending
        self._scanned = len(buffer) - consumed
        return consumed

    def finish(self, tail: bytes = b"") -> None:
        """End of stream: flush whatever word the retained tail holds."""
        self.feed(tail, is_completed=True)

    def _emit(self, raw: bytes) -> None:
        # bytes.lower() folds ASCII only, which is all a word can contain
        self.word_count += 1
        self.on_word(bytes(raw).lower().decode("ascii"))


class BigramTokenizer(WordTokenizer):
    """Pairs each word with the one before it and counts the pair into sink."""

    def __init__(self, sink: BigramSink) -> None:
        super().__init__()
        self.sink = sink
        self.previous_word: str | None = None
        self.bigram_count = 0

    def on_word(self, word: str) -> None:
        if self.previous_word is not None:
            self.sink.increment(self.previous_word, word)
            self.bigram_count += 1
        self.previous_word = word


class _WordCollector(WordTokenizer):
    def __init__(self) -> None:
        super().__init__()
        self.words: list[str] = []

    def on_word(self, word: str) -> None:
        self.words.append(word)


def tokenize(data: bytes) -> list[str]:
    """Split an in-memory byte string into lowercase words."""
    collector = _WordCollector()
    collector.finish(data)
    return collector.words


def count_bigrams(data: bytes, histogram: BigramMap | None = None) -> BigramMap:
    """Count the bigrams of an in-memory byte string."""
    histogram = histogram if histogram is not None else BigramMap()
    BigramTokenizer(histogram).finish(data)
    return histogram


def read_pipe_and_process(reader: PipeReader, tokenizer: WordTokenizer) -> int:
    """Drain a pipe through tokenizer until the writer completes.

    Returns the number of words emitted. Any failure completes the reader
    with the error, which stops the writer, then propagates.
    """
    try:
        while True:
            result = reader.read()
            consumed = tokenizer.feed(result.buffer, result.is_completed)
            reader.advance_to(consumed)
            if result.is_completed:
                reader.complete()
                return tokenizer.word_count
    except PipelineError as exc:
        reader.complete(exc)
        raise
    except Exception as exc:
        reader.complete(exc)
        raise PipelineError(f"error processing text: {exc}") from exc
