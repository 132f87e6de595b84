"""
Cached Repository - Caching Wrapper for Repositories.

Wraps any repository implementation to memoize its read operations in a
cache backend.

Design Notes:
    - Decorator/Wrapper pattern
    - Caches all(), paginate(), find(), find_by_field(), find_where()
      and get_by_criteria()
    - Keys cover method, arguments, applied criteria and request URL
    - Writes flush every cached read of the repository type
    - Tracks cache hits via MetricsCollector
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from cachable_repository.caching.backend_registry import (
    BackendRegistry,
    get_default_registry,
)
from cachable_repository.caching.decision_gate import CacheDecisionGate, CachePolicy
from cachable_repository.caching.key_deriver import CacheKeyDeriver
from cachable_repository.caching.key_registry import get_default_key_registry
from cachable_repository.caching.serialization import qualified_name
from cachable_repository.config.models import CacheSettings
from cachable_repository.adapters.request_context import StaticRequestProvider
from cachable_repository.interfaces.cache_backend import CacheBackendProtocol
from cachable_repository.interfaces.key_registry import KeyRegistryProtocol
from cachable_repository.interfaces.metrics_collector import MetricsCollectorProtocol
from cachable_repository.interfaces.repository import (
    CriterionProtocol,
    RepositoryProtocol,
)
from cachable_repository.interfaces.request_context import (
    RequestContextProviderProtocol,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHED_METHODS = (
    "all",
    "paginate",
    "find",
    "find_by_field",
    "find_where",
    "get_by_criteria",
)


class CachedRepository:
    """
    Caching wrapper for repository implementations.

    Usage:
        repository = UserRepository(session)
        cached = CachedRepository(repository, settings, request_provider)

        # First call: cache miss, fetches from repository
        user = cached.find(42)

        # Second call in the same request context: cache hit
        user = cached.find(42)

        # Force fresh data for one repository
        cached.skip_cache().find(42)
    """

    def __init__(
        self,
        repository: RepositoryProtocol,
        settings: Optional[CacheSettings] = None,
        request_provider: Optional[RequestContextProviderProtocol] = None,
        policy: Optional[CachePolicy] = None,
        cache_backend: Optional[CacheBackendProtocol] = None,
        key_registry: Optional[KeyRegistryProtocol] = None,
        backend_registry: Optional[BackendRegistry] = None,
        metrics_collector: Optional[MetricsCollectorProtocol] = None,
    ) -> None:
        """
        Initialize cached repository.

        Args:
            repository: Underlying repository to wrap
            settings: Cache configuration (defaults apply if None)
            request_provider: Supplies the current request (empty if None)
            policy: Per-repository overrides of the configuration
            cache_backend: Backend to use; resolved from settings if None
            key_registry: Key index (shared process default if None)
            backend_registry: Registry resolving settings.repository
            metrics_collector: Optional metrics collector for tracking
        """
        self.repository = repository
        self.settings = settings or CacheSettings()
        self.request_provider = request_provider or StaticRequestProvider()
        self.metrics = metrics_collector
        self.owner = qualified_name(repository)

        self._cache_backend = cache_backend
        self._backend_registry = backend_registry or get_default_registry()
        self.key_registry = key_registry or self._default_key_registry()

        self.gate = CacheDecisionGate(self.settings, self.request_provider, policy)
        self.deriver = CacheKeyDeriver(
            owner=self.owner,
            criteria_source=self._current_criteria,
            request_provider=self.request_provider,
            key_registry=self.key_registry,
        )

        self._cache_hits: Dict[str, int] = {}
        self._cache_misses: Dict[str, int] = {}
        self._cache_bypasses: Dict[str, int] = {}

    # =========================================================================
    # Cache backend
    # =========================================================================

    def set_cache_backend(self, backend: CacheBackendProtocol) -> "CachedRepository":
        """Use a specific cache backend."""
        self._cache_backend = backend
        return self

    def get_cache_backend(self) -> CacheBackendProtocol:
        """
        Get the cache backend, resolving the configured selector on first use.

        Raises:
            CacheBackendNotFoundError: If the selector is not registered
        """
        if self._cache_backend is None:
            self._cache_backend = self._backend_registry.resolve(
                self.settings.repository
            )
        return self._cache_backend

    # =========================================================================
    # Policy
    # =========================================================================

    def skip_cache(self, status: bool = True) -> "CachedRepository":
        """Bypass (or stop bypassing) the cache for this repository."""
        self.gate.policy.skip = status
        return self

    def is_skipped_cache(self) -> bool:
        return self.gate.is_skipped_cache()

    def allowed_cache(self, method: str) -> bool:
        return self.gate.allowed_cache(method)

    def get_cache_minutes(self) -> int:
        return self.gate.cache_minutes()

    def get_cache_key(self, method: str, args: Sequence[Any] = ()) -> str:
        return self.deriver.get_cache_key(method, args)

    # =========================================================================
    # Cached reads
    # =========================================================================

    def all(self, columns: Sequence[str] = ("*",)) -> Any:
        """Retrieve all records."""
        return self._remember(
            "all",
            (columns,),
            lambda: self.repository.all(columns),
        )

    def paginate(
        self,
        limit: Optional[int] = None,
        columns: Sequence[str] = ("*",),
        page: int = 1,
    ) -> Any:
        """Retrieve one page of records."""
        return self._remember(
            "paginate",
            (limit, columns, page),
            lambda: self.repository.paginate(limit, columns, page),
        )

    def find(self, id: Any, columns: Sequence[str] = ("*",)) -> Any:
        """Find a record by primary key."""
        return self._remember(
            "find",
            (id, columns),
            lambda: self.repository.find(id, columns),
        )

    def find_by_field(
        self,
        field: str,
        value: Any = None,
        columns: Sequence[str] = ("*",),
    ) -> Any:
        """Find records where a field equals a value."""
        return self._remember(
            "find_by_field",
            (field, value, columns),
            lambda: self.repository.find_by_field(field, value, columns),
        )

    def find_where(
        self,
        where: Dict[str, Any],
        columns: Sequence[str] = ("*",),
    ) -> Any:
        """Find records matching all field conditions."""
        return self._remember(
            "find_where",
            (where, columns),
            lambda: self.repository.find_where(where, columns),
        )

    def get_by_criteria(self, criterion: CriterionProtocol) -> Any:
        """Find records matching a single criterion."""
        return self._remember(
            "get_by_criteria",
            (criterion,),
            lambda: self.repository.get_by_criteria(criterion),
        )

    # =========================================================================
    # Writes and invalidation
    # =========================================================================

    def create(self, attributes: Dict[str, Any]) -> Any:
        """Create a record, then flush cached reads if configured."""
        result = self.repository.create(attributes)
        self._clean_after("create")
        return result

    def update(self, attributes: Dict[str, Any], id: Any) -> Any:
        """Update a record, then flush cached reads if configured."""
        result = self.repository.update(attributes, id)
        self._clean_after("update")
        return result

    def delete(self, id: Any) -> Any:
        """Delete a record, then flush cached reads if configured."""
        result = self.repository.delete(id)
        self._clean_after("delete")
        return result

    def forget_cached(self) -> int:
        """
        Remove every cached read of this repository type.

        Returns:
            Number of entries removed from the backend
        """
        keys = self.key_registry.forget_keys(self.owner)
        if not keys:
            return 0

        backend = self.get_cache_backend()
        removed = sum(1 for key in keys if backend.forget(key))
        if self.metrics:
            self.metrics.record_count(
                "cache_flush", removed, tags={"repository": self.owner}
            )
        logger.info(f"Flushed {removed}/{len(keys)} cached reads of {self.owner}")
        return removed

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with per-method hit/miss/bypass counts
        """
        return {
            "owner": self.owner,
            "operations": {
                op: {
                    "hits": self._cache_hits.get(op, 0),
                    "misses": self._cache_misses.get(op, 0),
                    "bypasses": self._cache_bypasses.get(op, 0),
                }
                for op in CACHED_METHODS
            },
        }

    # =========================================================================
    # Delegation
    # =========================================================================

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not defined on the wrapper
        if name == "repository":
            raise AttributeError(name)

        attribute = getattr(self.repository, name)
        if not callable(attribute):
            return attribute

        @functools.wraps(attribute)
        def delegate(*args: Any, **kwargs: Any) -> Any:
            result = attribute(*args, **kwargs)
            # Keep fluent calls (push_criteria(...).find(...)) on the wrapper
            return self if result is self.repository else result

        return delegate

    # =========================================================================
    # Internals
    # =========================================================================

    def _remember(self, method: str, args: Sequence[Any], compute: Callable[[], T]) -> T:
        """Serve a read from the cache when the gate allows it."""
        if not self.allowed_cache(method) or self.is_skipped_cache():
            self._record(self._cache_bypasses, "cache_bypass", method)
            logger.debug(f"Cache BYPASS for {self.owner}.{method}")
            return compute()

        key = self.get_cache_key(method, args)
        minutes = self.get_cache_minutes()
        computed = False

        def compute_and_flag() -> T:
            nonlocal computed
            computed = True
            return compute()

        value = self.get_cache_backend().remember(key, minutes, compute_and_flag)

        if computed:
            self._record(self._cache_misses, "cache_miss", method)
            logger.debug(f"Cache MISS for {key}")
        else:
            self._record(self._cache_hits, "cache_hit", method)
            logger.debug(f"Cache HIT for {key}")

        return value

    def _clean_after(self, operation: str) -> None:
        clean = self.settings.clean
        if clean.enabled and getattr(clean.on, operation):
            self.forget_cached()

    def _current_criteria(self) -> List[CriterionProtocol]:
        get_criteria = getattr(self.repository, "get_criteria", None)
        return list(get_criteria()) if get_criteria is not None else []

    def _default_key_registry(self) -> KeyRegistryProtocol:
        return get_default_key_registry(self.settings.key_registry_path)

    def _record(self, counts: Dict[str, int], metric: str, method: str) -> None:
        counts[method] = counts.get(method, 0) + 1
        if self.metrics:
            self.metrics.record_count(
                metric,
                1,
                tags={"repository": self.owner, "method": method},
            )
