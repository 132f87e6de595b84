"""
Cache Backend Protocol.

The storage the decorator memoizes results in. The backend owns
expiry, concurrency and storage; the decorator only asks it to
remember values.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar

T = TypeVar("T")


class CacheBackendProtocol(Protocol):
    """Protocol for get-or-compute cache backends."""

    def remember(self, key: str, minutes: int, compute: Callable[[], T]) -> T:
        """
        Return the value stored at key, computing and storing it on a miss.

        Args:
            key: Cache key
            minutes: Time-to-live of a freshly stored value
            compute: Called on a miss to produce the value

        Returns:
            Cached or computed value
        """
        ...

    def forget(self, key: str) -> bool:
        """Remove a key. Returns True if something was removed."""
        ...
