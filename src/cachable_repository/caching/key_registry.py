"""
Cache Key Registry - Generated Keys Indexed by Repository Type.

Every key the deriver produces is registered against the repository
type that produced it, so all cached reads of one repository can be
flushed together after a write.

Usage:
    registry = CacheKeyRegistry()
    registry.put_key("app.repos.UserRepository", key)

    # Later, after a write
    for key in registry.forget_keys("app.repos.UserRepository"):
        backend.forget(key)

Design Notes:
    - Thread-safe with RLock
    - Keys kept in insertion order, no duplicates
    - Optional JSON file persistence shared across processes
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional, Union

from cachable_repository.errors import KeyRegistryError

logger = logging.getLogger(__name__)


class CacheKeyRegistry:
    """
    Index of cache keys per owning repository type.

    When a storage path is given the index is loaded from it on creation
    and written back after every change.
    """

    def __init__(self, storage_path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize registry.

        Args:
            storage_path: Optional JSON file to persist the index in

        Raises:
            KeyRegistryError: If an existing storage file cannot be parsed
        """
        self._storage_path = Path(storage_path) if storage_path else None
        self._keys: Dict[str, List[str]] = {}
        self._lock = RLock()

        if self._storage_path is not None and self._storage_path.exists():
            self._keys = self._load(self._storage_path)
            logger.debug(
                f"Loaded {sum(len(v) for v in self._keys.values())} cache keys "
                f"from {self._storage_path}"
            )

    def put_key(self, owner: str, key: str) -> None:
        """
        Register a key for an owner.

        Args:
            owner: Repository type identifier
            key: Cache key
        """
        with self._lock:
            keys = self._keys.setdefault(owner, [])
            if key in keys:
                return
            keys.append(key)
            self._persist()
        logger.debug(f"Registered cache key {key}")

    def get_keys(self, owner: str) -> List[str]:
        """Get all keys registered for an owner."""
        with self._lock:
            return list(self._keys.get(owner, []))

    def forget_keys(self, owner: str) -> List[str]:
        """
        Remove and return all keys registered for an owner.

        Returns:
            The removed keys (empty if the owner is unknown)
        """
        with self._lock:
            keys = self._keys.pop(owner, [])
            if keys:
                self._persist()
            return keys

    def owners(self) -> List[str]:
        """List all owners with registered keys."""
        with self._lock:
            return list(self._keys)

    def clear(self) -> None:
        """Remove every registered key."""
        with self._lock:
            self._keys.clear()
            self._persist()

    def _persist(self) -> None:
        """Write the index to storage (internal, must hold lock)."""
        if self._storage_path is None:
            return
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._storage_path.write_text(
            json.dumps(self._keys, indent=2, sort_keys=True),
            encoding="utf-8",
        )

    @staticmethod
    def _load(path: Path) -> Dict[str, List[str]]:
        """Read a persisted index."""
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise KeyRegistryError(f"Invalid key registry file {path}: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(v, list) for v in data.values()
        ):
            raise KeyRegistryError(f"Invalid key registry file {path}: expected an object of lists")

        return {str(owner): [str(k) for k in keys] for owner, keys in data.items()}


_shared_registries: Dict[Optional[str], CacheKeyRegistry] = {}
_shared_lock = RLock()


def get_default_key_registry(
    storage_path: Optional[Union[str, Path]] = None,
) -> CacheKeyRegistry:
    """
    Get the process-wide registry for a storage path.

    Repositories configured with the same path share one registry
    instance, so their writes to the file do not overwrite each other.
    """
    name = str(Path(storage_path).resolve()) if storage_path else None
    with _shared_lock:
        if name not in _shared_registries:
            _shared_registries[name] = CacheKeyRegistry(storage_path)
        return _shared_registries[name]
