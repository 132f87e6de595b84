"""
Caching Layer.

Provides the caching policy applied to repository reads:
    - CacheKeyDeriver: Deterministic keys from method, args, criteria, request
    - CacheDecisionGate / CachePolicy: Whether and how long to cache a call
    - CacheKeyRegistry: Keys indexed by repository type for invalidation
    - BackendRegistry: Cache backends resolved by selector name
    - CacheManager: Default in-memory TTL backend
"""

from cachable_repository.caching.backend_registry import (
    BackendRegistry,
    get_default_registry,
)
from cachable_repository.caching.cache_manager import (
    CacheEntry,
    CacheManager,
    CacheStats,
)
from cachable_repository.caching.decision_gate import CacheDecisionGate, CachePolicy
from cachable_repository.caching.key_deriver import CacheKeyDeriver, build_fallback
from cachable_repository.caching.key_registry import (
    CacheKeyRegistry,
    get_default_key_registry,
)
from cachable_repository.caching.serialization import canonical_dumps

__all__ = [
    "BackendRegistry",
    "CacheDecisionGate",
    "CacheEntry",
    "CacheKeyDeriver",
    "CacheKeyRegistry",
    "CacheManager",
    "CachePolicy",
    "CacheStats",
    "build_fallback",
    "canonical_dumps",
    "get_default_key_registry",
    "get_default_registry",
]
