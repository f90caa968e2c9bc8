"""Tests for LRUCache: eviction order, updates, slot reuse."""

import pytest

from activity_detector.errors import ConfigurationError
from activity_detector.lru_cache import MISS, LRUCache


class TestEviction:
    def test_get_refreshes_recency(self):
        """put a,b,c; get a; put d -> b is evicted, order [c, a, d]."""
        cache = LRUCache(3)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        assert cache.get("a") == 1
        cache.put("d", 4)
        assert cache.keys() == ["c", "a", "d"]
        assert cache.get("b") is MISS

    def test_repeated_gets(self):
        cache = LRUCache(3)
        for k, v in (("a", 1), ("b", 2), ("c", 3)):
            cache.put(k, v)
        cache.get("a")
        cache.get("a")
        cache.get("b")
        assert cache.keys() == ["c", "a", "b"]
        cache.put("d", 4)
        assert cache.keys() == ["a", "b", "d"]

    def test_capacity_one(self):
        cache = LRUCache(1)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") is MISS
        assert cache.get("b") == 2
        assert len(cache) == 1

    def test_many_inserts_keep_last_n(self):
        cache = LRUCache(5)
        for i in range(1, 11):
            cache.put(f"key{i}", i * 10)
        assert cache.keys() == [f"key{i}" for i in range(6, 11)]
        assert len(cache) == 5

    def test_evicted_slots_are_reused(self):
        cache = LRUCache(5)
        for i in range(100):
            cache.put(i, i)
        # two sentinels plus one slot per entry
        assert len(cache._keys) == 7


class TestUpdate:
    def test_put_existing_updates_and_refreshes(self):
        cache = LRUCache(2)
        cache.put("x", 10)
        cache.put("y", 20)
        cache.put("x", 100)
        assert cache.keys() == ["y", "x"]
        cache.put("z", 30)
        assert cache.keys() == ["x", "z"]
        assert cache.get("x") == 100

    def test_falsy_values_are_hits(self):
        cache = LRUCache(2)
        cache.put("zero", 0)
        cache.put("none", None)
        assert cache.get("zero") == 0
        assert cache.get("none") is None

    def test_contains_does_not_touch_recency(self):
        cache = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert "a" in cache
        cache.put("c", 3)
        assert "a" not in cache
        assert cache.keys() == ["b", "c"]


class TestCapacity:
    @pytest.mark.parametrize("capacity", [0, -1, True, 2.5, "3"])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ConfigurationError):
            LRUCache(capacity)

    def test_empty_cache(self):
        cache = LRUCache(3)
        assert cache.keys() == []
        assert cache.get("anything") is MISS
        assert repr(MISS) == "MISS"
