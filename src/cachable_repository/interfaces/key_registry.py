"""
Key Registry Protocol.

Index of every cache key generated per repository type, so that all
cached results of a repository can be invalidated together.
"""

from __future__ import annotations

from typing import List, Protocol


class KeyRegistryProtocol(Protocol):
    """Protocol for cache key registries."""

    def put_key(self, owner: str, key: str) -> None:
        """Register a key for an owning repository type."""
        ...

    def get_keys(self, owner: str) -> List[str]:
        """Get all keys registered for an owner."""
        ...

    def forget_keys(self, owner: str) -> List[str]:
        """Remove and return all keys registered for an owner."""
        ...
