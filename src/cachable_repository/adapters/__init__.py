"""
Adapters Package - Infrastructure Implementations.

Repositories:
    - CachedRepository: Caching wrapper around any repository
    - InMemoryRepository: List-backed repository for development/testing

Request Context:
    - StaticRequestProvider: Fixed request context
    - ContextVarRequestProvider: Per thread / task request context

Design Principles:
    - All adapters implement their respective protocols
    - Easily swappable via Dependency Injection
"""

from cachable_repository.adapters.cached_repository import (
    CACHED_METHODS,
    CachedRepository,
)
from cachable_repository.adapters.memory_repository import (
    InMemoryRepository,
    RecordNotFoundError,
)
from cachable_repository.adapters.request_context import (
    ContextVarRequestProvider,
    StaticRequestProvider,
)

__all__ = [
    "CACHED_METHODS",
    "CachedRepository",
    "ContextVarRequestProvider",
    "InMemoryRepository",
    "RecordNotFoundError",
    "StaticRequestProvider",
]
