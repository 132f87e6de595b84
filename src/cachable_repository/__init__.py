"""
Cachable Repository - Caching Layer for Data Repositories.

Wraps the read operations of a repository (all, paginate, find,
find_by_field, find_where, get_by_criteria) so their results are
memoized in a cache backend, keyed by method, arguments, applied
criteria and the current request URL.

Architecture:
    - Ports & Adapters: collaborators are typing.Protocol interfaces
    - Dependency Injection for request context, backend and key registry
    - Configuration-driven behavior via YAML

Main Components:
    - caching: Key derivation, decision gate, key/backend registries
    - adapters: CachedRepository, in-memory repository, request providers
    - criteria: Built-in query criteria
    - config: Configuration models and loaders
    - observability: Structured cache events and counters

Example:
    >>> from cachable_repository import CachedRepository, InMemoryRepository
    >>> repo = CachedRepository(InMemoryRepository([{"id": 42, "name": "x"}]))
    >>> repo.find(42)
    {'id': 42, 'name': 'x'}
"""

import logging

from cachable_repository.adapters import (
    CachedRepository,
    ContextVarRequestProvider,
    InMemoryRepository,
    StaticRequestProvider,
)
from cachable_repository.caching import (
    BackendRegistry,
    CacheDecisionGate,
    CacheKeyDeriver,
    CacheKeyRegistry,
    CacheManager,
    CachePolicy,
)
from cachable_repository.config import CacheSettings, RepositoriesConfig, load_config
from cachable_repository.domain import Page, RequestContext
from cachable_repository.errors import (
    CacheBackendNotFoundError,
    KeyRegistryError,
    RepositoryCacheError,
    UnserializableCriterionError,
)

__version__ = "0.1.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for the caching layer.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import cachable_repository
        >>> cachable_repository.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("cachable_repository").setLevel(level)


__all__ = [
    "BackendRegistry",
    "CacheBackendNotFoundError",
    "CacheDecisionGate",
    "CacheKeyDeriver",
    "CacheKeyRegistry",
    "CacheManager",
    "CachePolicy",
    "CacheSettings",
    "CachedRepository",
    "ContextVarRequestProvider",
    "InMemoryRepository",
    "KeyRegistryError",
    "Page",
    "RepositoriesConfig",
    "RepositoryCacheError",
    "RequestContext",
    "StaticRequestProvider",
    "UnserializableCriterionError",
    "configure_logging",
    "load_config",
]
