"""Shared fixtures and markers for bigram counter tests."""

import io

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "concurrency: exercises several threads at once")


class ChunkedReader(io.RawIOBase):
    """Binary stream that hands out data in fixed-size (or scripted) reads."""

    def __init__(self, data, sizes=(1,), fail_after=None, name=None):
        self._data = data
        self._pos = 0
        self._sizes = list(sizes)
        self._calls = 0
        self._fail_after = fail_after
        if name is not None:
            self.name = name
        self.reads = 0

    def readable(self):
        return True

    def readinto(self, b):
        if self._fail_after is not None and self._pos >= self._fail_after:
            raise OSError("simulated read failure")
        size = self._sizes[min(self._calls, len(self._sizes) - 1)]
        self._calls += 1
        end = min(self._pos + size, len(self._data), len(b) + self._pos)
        if self._fail_after is not None:
            end = min(end, self._fail_after)
        chunk = self._data[self._pos:end]
        b[:len(chunk)] = chunk
        self._pos = end
        self.reads += 1
        return len(chunk)


@pytest.fixture
def chunked():
    """Factory for ChunkedReader streams."""
    return ChunkedReader
