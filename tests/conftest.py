"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock

import pytest

from cachable_repository.adapters.cached_repository import CachedRepository
from cachable_repository.adapters.memory_repository import InMemoryRepository
from cachable_repository.adapters.request_context import StaticRequestProvider
from cachable_repository.caching.cache_manager import CacheManager
from cachable_repository.caching.key_registry import CacheKeyRegistry
from cachable_repository.config.models import CacheSettings
from cachable_repository.domain.entities import RequestContext


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def sample_records() -> List[Dict[str, Any]]:
    """Create sample user records."""
    return [
        {"id": 1, "name": "Alice", "role": "admin", "age": 34},
        {"id": 2, "name": "Bob", "role": "editor", "age": 27},
        {"id": 3, "name": "Carol", "role": "editor", "age": 41},
        {"id": 42, "name": "Dave", "role": "viewer", "age": 19},
    ]


@pytest.fixture
def memory_repository(sample_records) -> InMemoryRepository:
    """Create in-memory repository with sample records."""
    return InMemoryRepository(sample_records, per_page=2)


@pytest.fixture
def request_provider() -> StaticRequestProvider:
    """Request provider with a fixed URL."""
    return StaticRequestProvider(
        RequestContext(full_url="https://example.test/users?page=1")
    )


@pytest.fixture
def key_registry() -> CacheKeyRegistry:
    """Fresh key registry (not the process-wide one)."""
    return CacheKeyRegistry()


@pytest.fixture
def cache_backend() -> CacheManager:
    """Fresh in-memory cache backend."""
    return CacheManager()


@pytest.fixture
def settings() -> CacheSettings:
    """Default cache settings."""
    return CacheSettings()


@pytest.fixture
def mock_repository(sample_records) -> Mock:
    """Create a mock repository with no criteria applied."""
    repository = Mock()
    repository.get_criteria.return_value = []
    repository.all.return_value = sample_records
    repository.find.return_value = sample_records[3]
    repository.find_by_field.return_value = [sample_records[1], sample_records[2]]
    repository.find_where.return_value = [sample_records[0]]
    repository.paginate.return_value = {"items": sample_records[:2], "total": 4}
    repository.get_by_criteria.return_value = [sample_records[0]]
    return repository


@pytest.fixture
def cached_repository(
    memory_repository, settings, request_provider, cache_backend, key_registry
) -> CachedRepository:
    """Cached wrapper around the in-memory repository."""
    return CachedRepository(
        memory_repository,
        settings=settings,
        request_provider=request_provider,
        cache_backend=cache_backend,
        key_registry=key_registry,
    )
