"""
Unit Tests for ObservabilityManager.

Test Aspects Covered:
    ✅ Business Logic: Counter aggregation, tag filters, hit rate
    ✅ Integration: Counters recorded by CachedRepository
"""

from __future__ import annotations

import pytest

from cachable_repository.adapters.cached_repository import CachedRepository
from cachable_repository.observability.observability_manager import (
    ObservabilityManager,
)


@pytest.fixture
def manager() -> ObservabilityManager:
    """Manager that leaves the global structlog configuration alone."""
    return ObservabilityManager(configure=False)


class TestCounters:
    """Counter aggregation."""

    def test_record_count_aggregates_by_tags(self, manager) -> None:
        """
        SCENARIO: Same counter recorded for two methods
        EXPECTED: Totals per method and overall
        """
        # Act
        manager.record_count("cache_hit", 1, tags={"method": "find"})
        manager.record_count("cache_hit", 1, tags={"method": "find"})
        manager.record_count("cache_hit", 1, tags={"method": "all"})

        # Assert
        assert manager.count("cache_hit") == 3
        assert manager.count("cache_hit", method="find") == 2
        assert manager.count("cache_hit", method="paginate") == 0

    def test_tag_filter_matches_subset(self, manager) -> None:
        manager.record_count("cache_miss", 1, tags={"repository": "Users", "method": "find"})
        manager.record_count("cache_miss", 1, tags={"repository": "Posts", "method": "find"})

        assert manager.count("cache_miss", repository="Users") == 1
        assert manager.count("cache_miss", repository="Users", method="all") == 0

    def test_hit_rate(self, manager) -> None:
        assert manager.hit_rate() == 0.0

        manager.record_count("cache_miss", 1, tags={"method": "find"})
        manager.record_count("cache_hit", 3, tags={"method": "find"})

        assert manager.hit_rate() == 0.75
        assert manager.hit_rate(method="all") == 0.0

    def test_summary_and_events(self, manager) -> None:
        manager.record_count("cache_bypass", 1, tags={"method": "paginate"})
        manager.record_count("cache_flush", 4, tags={"repository": "Users"})

        assert manager.summary() == {"cache_bypass": 1, "cache_flush": 4}
        assert manager.get_events()[1] == {
            "event": "cache_flush",
            "value": 4,
            "repository": "Users",
        }

    def test_clear(self, manager) -> None:
        manager.record_count("cache_hit", 1)

        manager.clear()

        assert manager.summary() == {}
        assert manager.get_events() == []

    def test_configures_console_renderer(self) -> None:
        manager = ObservabilityManager(use_json=False)

        manager.record_count("cache_hit", 1, tags={"method": "find"})

        assert manager.count("cache_hit") == 1


class TestCachedRepositoryCounters:
    """Counters emitted by the caching wrapper."""

    def test_hit_miss_and_flush_counters(
        self, manager, memory_repository, cache_backend, key_registry
    ) -> None:
        """
        SCENARIO: Two reads, then a write that flushes the cache
        EXPECTED: One miss, one hit, one flushed entry
        """
        # Arrange
        cached = CachedRepository(
            memory_repository,
            cache_backend=cache_backend,
            key_registry=key_registry,
            metrics_collector=manager,
        )

        # Act
        cached.find(1)
        cached.find(1)
        cached.update({"age": 35}, 1)

        # Assert
        assert manager.count("cache_miss", method="find") == 1
        assert manager.count("cache_hit", method="find") == 1
        assert manager.count("cache_flush", repository=cached.owner) == 1
        assert manager.hit_rate(repository=cached.owner) == 0.5
