"""Tests for Bigram and the histogram maps."""

import threading

import pytest

from bigram_histogram.core.bigram_map import Bigram, BigramMap, SharedBigramMap


class TestBigram:
    def test_str(self):
        assert str(Bigram("the", "quick")) == "the quick"

    def test_from_string_roundtrip(self):
        assert Bigram.from_string("the quick") == Bigram("the", "quick")

    def test_from_string_rejects_single_word(self):
        with pytest.raises(ValueError):
            Bigram.from_string("lonely")
        with pytest.raises(ValueError):
            Bigram.from_string("one two three")

    def test_as_tuple(self):
        assert Bigram("a", "b").as_tuple() == ("a", "b")

    def test_ordered(self):
        assert Bigram("a", "b") != Bigram("b", "a")

    def test_hashable(self):
        assert len({Bigram("a", "b"), Bigram("a", "b")}) == 1


class TestBigramMap:
    def test_empty(self):
        m = BigramMap()
        assert len(m) == 0
        assert m.total_bigrams == 0
        assert m == {}

    def test_increment_inserts_then_adds(self):
        m = BigramMap()
        assert m.increment("a", "b") == 1
        assert m.increment("a", "b") == 2
        assert m.get_count("a", "b") == 2
        assert m.get_count("b", "a") == 0
        assert m.unique_bigrams == 1
        assert m.total_bigrams == 2

    def test_increment_rejects_non_positive(self):
        with pytest.raises(ValueError):
            BigramMap().increment("a", "b", 0)

    def test_contains(self):
        m = BigramMap()
        m.increment("a", "b")
        assert ("a", "b") in m
        assert Bigram("a", "b") in m
        assert ("b", "a") not in m

    def test_merge(self):
        left, right = BigramMap(), BigramMap()
        left.increment("a", "b")
        right.increment("a", "b")
        right.increment("b", "c")
        left.merge(right)
        assert left == {("a", "b"): 2, ("b", "c"): 1}
        assert left.total_bigrams == 3

    def test_most_common(self):
        m = BigramMap()
        for _ in range(3):
            m.increment("x", "y")
        m.increment("b", "c")
        m.increment("a", "b")
        ranked = [(str(k), c) for k, c in m.most_common()]
        assert ranked == [("x y", 3), ("a b", 1), ("b c", 1)]
        assert len(m.most_common(1)) == 1

    def test_dict_roundtrip(self):
        m = BigramMap()
        m.increment("the", "quick", 2)
        m.increment("quick", "fox")
        assert m.to_dict() == {"the quick": 2, "quick fox": 1}
        assert BigramMap.from_dict(m.to_dict()) == m

    def test_equality_with_other_map(self):
        a, b = BigramMap(), SharedBigramMap()
        a.increment("a", "b")
        b.increment("a", "b")
        assert a == b

    def test_iter_yields_bigrams(self):
        m = BigramMap()
        m.increment("a", "b")
        assert list(m) == [Bigram("a", "b")]

    def test_str_summary(self):
        m = BigramMap()
        m.increment("a", "b")
        assert "1 unique bigrams" in str(m)
        assert "a b x1" in str(m)


@pytest.mark.concurrency
class TestSharedBigramMap:
    def test_no_lost_updates(self):
        m = SharedBigramMap()
        threads_n, per_thread = 8, 2000
        barrier = threading.Barrier(threads_n)

        def hammer():
            barrier.wait()
            for i in range(per_thread):
                m.increment("hot", "key")
                m.increment("w", str(i % 10))

        threads = [threading.Thread(target=hammer) for _ in range(threads_n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert m.get_count("hot", "key") == threads_n * per_thread
        assert m.unique_bigrams == 11
        assert m.total_bigrams == 2 * threads_n * per_thread

    def test_concurrent_merges(self):
        m = SharedBigramMap()
        locals_ = []
        for i in range(6):
            local = BigramMap()
            local.increment("same", "pair")
            local.increment("own", f"pair{i}")
            locals_.append(local)

        threads = [threading.Thread(target=m.merge, args=(local,)) for local in locals_]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert m.get_count("same", "pair") == 6
        assert m.unique_bigrams == 7
