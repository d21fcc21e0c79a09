"""
Bigram data structures: Bigram (an ordered word pair) and BigramMap (the histogram).

A bigram records that one word was immediately followed by another inside a
single stream. The map counts how often each bigram occurs.
"""
from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, slots=True)
class Bigram:
    """
    An ordered pair of consecutive words.

    first -> second indicates that 'second' directly follows 'first' in a stream.
    """
    first: str
    second: str

    def __str__(self) -> str:
        return f"{self.first} {self.second}"

    def __repr__(self) -> str:
        return f"Bigram({self.first!r}, {self.second!r})"

    def as_tuple(self) -> tuple[str, str]:
        return (self.first, self.second)

    @classmethod
    def from_string(cls, s: str) -> Bigram:
        """Parse the "first second" form produced by str()."""
        first, sep, second = s.partition(" ")
        if not sep or not first or not second or " " in second:
            raise ValueError(f"not a bigram: {s!r}")
        return cls(first, second)


class BigramMap:
    """
    Bigram histogram - counts of ordered word pairs.

    Not synchronized. Each stream worker fills its own map; use
    SharedBigramMap for the one that several threads write into.
    """

    def __init__(self) -> None:
        self._counts: dict[Bigram, int] = {}
        # Total count across all bigrams
        self._total: int = 0

    def increment(self, first: str, second: str, count: int = 1) -> int:
        """Add an occurrence of first -> second. Returns the new count."""
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        key = Bigram(first, second)
        new = self._counts.get(key, 0) + count
        self._counts[key] = new
        self._total += count
        return new

    def merge(self, other: BigramMap) -> None:
        """Merge another map's counts into this one."""
        for key, count in other.items():
            self.increment(key.first, key.second, count)

    def get_count(self, first: str, second: str) -> int:
        return self._counts.get(Bigram(first, second), 0)

    def items(self) -> list[tuple[Bigram, int]]:
        return list(self._counts.items())

    def most_common(self, n: int | None = None) -> list[tuple[Bigram, int]]:
        """Bigrams by descending count, ties broken alphabetically."""
        ranked = sorted(self.items(), key=lambda kv: (-kv[1], kv[0].first, kv[0].second))
        return ranked if n is None else ranked[:n]

    @property
    def total_bigrams(self) -> int:
        """Total number of bigram occurrences (sum of all counts)."""
        return self._total

    @property
    def unique_bigrams(self) -> int:
        return len(self._counts)

    def to_dict(self) -> dict[str, int]:
        """Serialize as {"first second": count}."""
        return {str(key): count for key, count in self.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> BigramMap:
        histogram = cls()
        for text, count in data.items():
            key = Bigram.from_string(text)
            histogram.increment(key.first, key.second, count)
        return histogram

    def as_tuples(self) -> dict[tuple[str, str], int]:
        return {key.as_tuple(): count for key, count in self.items()}

    def __len__(self) -> int:
        return self.unique_bigrams

    def __iter__(self) -> Iterator[Bigram]:
        return iter([key for key, _ in self.items()])

    def __contains__(self, key: object) -> bool:
        if isinstance(key, tuple) and len(key) == 2:
            key = Bigram(*key)
        return self._lookup(key) is not None

    def _lookup(self, key: object) -> int | None:
        return self._counts.get(key)  # type: ignore[call-overload]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BigramMap):
            return self.as_tuples() == other.as_tuples()
        if isinstance(other, Mapping):
            return self.as_tuples() == {tuple(k): v for k, v in other.items()}
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        lines = [f"BigramMap({self.unique_bigrams} unique bigrams, {self.total_bigrams} total):"]
        for key, count in self.most_common(10):
            lines.append(f"  {key} x{count}")
        if self.unique_bigrams > 10:
            lines.append(f"  ... and {self.unique_bigrams - 10} more")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(unique={self.unique_bigrams}, total={self.total_bigrams})"


class SharedBigramMap(BigramMap):
    """
    BigramMap that any number of threads may update at once.

    Every read-modify-write runs under one lock, so concurrent increments are
    never lost and a key is never inserted twice.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()

    def increment(self, first: str, second: str, count: int = 1) -> int:
        with self._lock:
            return super().increment(first, second, count)

    def merge(self, other: BigramMap) -> None:
        # Snapshot first: other may be shared too, and must not be locked
        # while we hold our own lock.
        incoming = other.items()
        with self._lock:
            for key, count in incoming:
                BigramMap.increment(self, key.first, key.second, count)

    def items(self) -> list[tuple[Bigram, int]]:
        with self._lock:
            return super().items()

    def _lookup(self, key: object) -> int | None:
        with self._lock:
            return super()._lookup(key)

    def get_count(self, first: str, second: str) -> int:
        with self._lock:
            return super().get_count(first, second)
