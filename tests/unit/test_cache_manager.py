"""
Unit Tests for CacheManager.

Tests for:
    - Basic get/put/forget operations
    - remember() get-or-compute semantics
    - TTL-based expiration
    - Thread safety
    - Statistics tracking
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from cachable_repository.caching import cache_manager as cache_manager_module
from cachable_repository.caching.cache_manager import CacheEntry, CacheManager


@pytest.fixture
def clock(monkeypatch):
    """Controllable replacement for time.time() inside the cache manager."""
    now = [1_000_000.0]
    monkeypatch.setattr(cache_manager_module.time, "time", lambda: now[0])
    return now


class TestCacheEntry:
    """Tests for CacheEntry dataclass."""

    def test_entry_not_expired_when_no_expires_at(self) -> None:
        """Entry without expiration time is never expired."""
        entry = CacheEntry(value="test", expires_at=None)
        assert not entry.is_expired

    def test_entry_not_expired_when_future(self) -> None:
        """Entry with future expiration is not expired."""
        entry = CacheEntry(value="test", expires_at=time.time() + 3600)
        assert not entry.is_expired

    def test_entry_expired_when_past(self) -> None:
        """Entry with past expiration is expired."""
        entry = CacheEntry(value="test", expires_at=time.time() - 1)
        assert entry.is_expired


class TestCacheManagerBasic:
    """Basic functionality tests."""

    def test_get_returns_default_for_missing_key(self) -> None:
        """Get returns the default for keys not in cache."""
        cache = CacheManager()
        assert cache.get("nonexistent") is None
        assert cache.get("nonexistent", "fallback") == "fallback"

    def test_put_and_get(self) -> None:
        """Put followed by get returns the value."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)
        assert cache.get("key1") == "value1"
        assert cache.has("key1")

    def test_put_overwrites_existing(self) -> None:
        """Putting same key overwrites previous value."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)
        cache.put("key1", "value2", minutes=5)
        assert cache.get("key1") == "value2"

    def test_put_with_zero_minutes_stores_nothing(self) -> None:
        """Non-positive TTL does not store the value."""
        cache = CacheManager()

        stored = cache.put("key1", "value1", minutes=0)

        assert stored is False
        assert not cache.has("key1")

    def test_forget_removes_entry(self) -> None:
        """Forget removes entry from cache."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)

        result = cache.forget("key1")

        assert result is True
        assert cache.get("key1") is None

    def test_forget_returns_false_for_missing(self) -> None:
        """Forget returns False for non-existent key."""
        cache = CacheManager()
        assert cache.forget("nonexistent") is False

    def test_flush_removes_all_entries(self) -> None:
        """Flush removes all entries."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)
        cache.put("key2", "value2", minutes=5)

        cache.flush()

        assert cache.get_stats().current_entries == 0


class TestCacheManagerRemember:
    """Tests for remember()."""

    def test_remember_computes_on_miss(self) -> None:
        """First call computes and stores the value."""
        cache = CacheManager()
        calls = []

        value = cache.remember("key", 5, lambda: calls.append(1) or "computed")

        assert value == "computed"
        assert len(calls) == 1
        assert cache.get("key") == "computed"

    def test_remember_returns_cached_on_hit(self) -> None:
        """Second call does not compute again."""
        cache = CacheManager()
        calls = []

        def compute() -> str:
            calls.append(1)
            return "computed"

        cache.remember("key", 5, compute)
        value = cache.remember("key", 5, compute)

        assert value == "computed"
        assert len(calls) == 1

    def test_remember_caches_none(self) -> None:
        """None is a cacheable result."""
        cache = CacheManager()
        calls = []

        def compute() -> None:
            calls.append(1)
            return None

        assert cache.remember("key", 5, compute) is None
        assert cache.remember("key", 5, compute) is None
        assert len(calls) == 1

    def test_remember_propagates_compute_errors(self) -> None:
        """Errors in compute are not stored or swallowed."""
        cache = CacheManager()

        def compute() -> str:
            raise RuntimeError("database down")

        with pytest.raises(RuntimeError, match="database down"):
            cache.remember("key", 5, compute)

        assert not cache.has("key")


class TestCacheManagerIsolation:
    """Cached values are not shared with callers."""

    def test_changing_computed_value_does_not_touch_cache(self) -> None:
        """
        SCENARIO: Caller mutates the value returned on a miss
        EXPECTED: The next hit returns the value as computed
        """
        cache = CacheManager()

        first = cache.remember("key", 5, lambda: {"id": 1, "age": 34})
        first["age"] = 999

        assert cache.remember("key", 5, lambda: {}) == {"id": 1, "age": 34}

    def test_changing_hit_value_does_not_touch_cache(self) -> None:
        cache = CacheManager()
        cache.put("key", [{"id": 1}], 5)

        hit = cache.get("key")
        hit.append({"id": 2})
        hit[0]["id"] = 7

        assert cache.get("key") == [{"id": 1}]

    def test_hits_are_distinct_objects(self) -> None:
        cache = CacheManager()
        cache.put("key", {"a": [1]}, 5)

        assert cache.get("key") is not cache.get("key")


class TestCacheManagerTTL:
    """TTL-based expiration tests."""

    def test_entry_expires_after_ttl(self, clock) -> None:
        """Entry is no longer returned after TTL expires."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=30)

        clock[0] += 29 * 60
        assert cache.get("key1") == "value1"

        clock[0] += 2 * 60
        assert cache.get("key1") is None
        assert cache.get_stats().expirations == 1

    def test_remember_recomputes_after_expiry(self, clock) -> None:
        """Expired entries are computed again."""
        cache = CacheManager()
        values = iter(["first", "second"])

        assert cache.remember("key", 1, lambda: next(values)) == "first"
        clock[0] += 61
        assert cache.remember("key", 1, lambda: next(values)) == "second"


class TestCacheManagerStats:
    """Statistics tracking tests."""

    def test_hit_rate_calculation(self) -> None:
        """Hit rate calculated correctly."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)

        cache.get("key1")  # hit
        cache.get("key1")  # hit
        cache.get("miss1")  # miss
        cache.get("miss2")  # miss

        stats = cache.get_stats()
        assert stats.hits == 2
        assert stats.misses == 2
        assert stats.hit_rate == 0.5

    def test_hit_rate_zero_without_lookups(self) -> None:
        """Hit rate is 0.0 before any lookup."""
        assert CacheManager().get_stats().hit_rate == 0.0

    def test_current_entries_tracked(self) -> None:
        """Current entry count tracked."""
        cache = CacheManager()
        cache.put("key1", "value1", minutes=5)
        cache.put("key2", "value2", minutes=5)

        assert cache.get_stats().current_entries == 2

        cache.forget("key1")

        assert cache.get_stats().current_entries == 1


class TestCacheManagerThreadSafety:
    """Thread safety tests."""

    def test_concurrent_reads_and_writes(self) -> None:
        """Concurrent reads and writes are safe."""
        cache = CacheManager()
        errors: list = []

        def writer() -> None:
            try:
                for i in range(100):
                    cache.put(f"key_{i}", f"value_{i}", minutes=5)
            except Exception as e:
                errors.append(e)

        def reader() -> None:
            try:
                for i in range(100):
                    cache.get(f"key_{i}")
            except Exception as e:
                errors.append(e)

        with ThreadPoolExecutor(max_workers=20) as executor:
            futures = []
            for _ in range(10):
                futures.append(executor.submit(writer))
                futures.append(executor.submit(reader))

            for f in futures:
                f.result()

        assert len(errors) == 0

    def test_concurrent_remember_returns_consistent_values(self) -> None:
        """Concurrent misses may compute more than once but agree on the value."""
        cache = CacheManager()
        compute_count = [0]
        lock = threading.Lock()

        def compute_fn() -> str:
            with lock:
                compute_count[0] += 1
            time.sleep(0.01)
            return "computed_value"

        with ThreadPoolExecutor(max_workers=10) as executor:
            results = list(
                executor.map(lambda _: cache.remember("shared", 5, compute_fn), range(10))
            )

        assert all(r == "computed_value" for r in results)
        assert compute_count[0] >= 1
