"""
Cache Manager - In-Memory TTL Cache Backend.

Default backend for the "cache" selector. Stores values in a dict with a
per-entry expiry time.

Design Notes:
    - TTL-based expiration, expressed in minutes
    - Non-positive TTL means "do not store"
    - Thread-safe with RLock; compute functions run outside the lock
    - None is a valid cached value
    - Values are deep-copied in and out; callers never share cached state
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    value: Any
    created_at: float = field(default_factory=time.time)
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        """Check if entry has expired."""
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    current_entries: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheManager:
    """
    In-process cache backend with TTL expiration.

    Implements the get-or-compute contract the cached repository needs
    (remember) plus the plain operations used for invalidation.
    """

    def __init__(self, log_access: bool = False) -> None:
        """
        Initialize cache manager.

        Args:
            log_access: Log every hit/miss/store at DEBUG level
        """
        self.log_access = log_access
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key
            default: Returned when the key is missing or expired

        Returns:
            Cached value or default
        """
        value = self._lookup(key)
        return default if value is _MISSING else value

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for key."""
        with self._lock:
            entry = self._cache.get(key)
            return entry is not None and not entry.is_expired

    def put(self, key: str, value: Any, minutes: int) -> bool:
        """
        Store a value for the given number of minutes.

        Args:
            key: Cache key
            value: Value to cache
            minutes: TTL in minutes; nothing is stored when not positive

        Returns:
            True if the value was stored
        """
        if minutes <= 0:
            return False

        entry = CacheEntry(
            value=copy.deepcopy(value),
            expires_at=time.time() + minutes * 60,
        )
        with self._lock:
            self._cache[key] = entry

        if self.log_access:
            logger.debug(f"Cache SET: {key} (TTL={minutes}m)")
        return True

    def remember(self, key: str, minutes: int, compute: Callable[[], T]) -> T:
        """
        Get from cache or compute and store.

        Concurrent misses on the same key may each call compute; the
        last stored value wins.

        Args:
            key: Cache key
            minutes: TTL in minutes for a freshly computed value
            compute: Function to compute value if not cached

        Returns:
            Cached or computed value
        """
        value = self._lookup(key)
        if value is not _MISSING:
            return value

        value = compute()
        self.put(key, value, minutes)
        return value

    def forget(self, key: str) -> bool:
        """
        Remove a cache entry.

        Returns:
            True if entry was removed, False if not found
        """
        with self._lock:
            if self._cache.pop(key, None) is not None:
                if self.log_access:
                    logger.debug(f"Cache FORGOT: {key}")
                return True
            return False

    def flush(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
        logger.info("Cache FLUSHED")

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                expirations=self._stats.expirations,
                current_entries=len(self._cache),
            )

    def _lookup(self, key: str) -> Any:
        """Return the live value for key or the _MISSING sentinel."""
        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats.misses += 1
                if self.log_access:
                    logger.debug(f"Cache MISS: {key}")
                return _MISSING

            if entry.is_expired:
                del self._cache[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                if self.log_access:
                    logger.debug(f"Cache EXPIRED: {key}")
                return _MISSING

            self._stats.hits += 1
            if self.log_access:
                logger.debug(f"Cache HIT: {key}")
            return copy.deepcopy(entry.value)
