"""
Backend Registry - Cache Backends Resolved by Selector Name.

Configuration names the backend to use ("cache" by default). The
registry maps selector names to factories and builds the backend the
first time it is asked for.

Usage:
    registry = BackendRegistry()
    registry.register("redis", lambda: RedisBackend(url))
    backend = registry.resolve("redis")
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Dict, List

from cachable_repository.caching.cache_manager import CacheManager
from cachable_repository.config.models import DEFAULT_BACKEND_SELECTOR
from cachable_repository.errors import CacheBackendNotFoundError

logger = logging.getLogger(__name__)


class BackendRegistry:
    """
    Thread-safe registry of cache backend factories.

    Each backend is built once and shared by every repository that
    resolves the same selector.
    """

    def __init__(self, register_defaults: bool = True) -> None:
        """
        Initialize registry.

        Args:
            register_defaults: Register the in-memory CacheManager as "cache"
        """
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._instances: Dict[str, Any] = {}
        self._lock = RLock()

        if register_defaults:
            self.register(DEFAULT_BACKEND_SELECTOR, CacheManager)

    def register(self, name: str, factory: Callable[[], Any]) -> None:
        """
        Register a backend factory.

        Args:
            name: Selector name
            factory: Zero-argument callable building the backend

        Raises:
            ValueError: If a backend with this name is already registered
        """
        with self._lock:
            if name in self._factories:
                raise ValueError(f"Cache backend '{name}' is already registered.")
            self._factories[name] = factory
            logger.debug(f"Registered cache backend: {name}")

    def register_instance(self, name: str, backend: Any) -> None:
        """Register an already built backend under a selector name."""
        self.register(name, lambda: backend)

    def unregister(self, name: str) -> bool:
        """Remove a backend. Returns True if it was registered."""
        with self._lock:
            self._instances.pop(name, None)
            return self._factories.pop(name, None) is not None

    def resolve(self, name: str) -> Any:
        """
        Get the backend for a selector, building it on first use.

        Raises:
            CacheBackendNotFoundError: If no backend is registered under name
        """
        with self._lock:
            if name in self._instances:
                return self._instances[name]

            factory = self._factories.get(name)
            if factory is None:
                raise CacheBackendNotFoundError(
                    f"Cache backend '{name}' is not registered. "
                    f"Available: {', '.join(sorted(self._factories)) or 'none'}"
                )

            backend = factory()
            self._instances[name] = backend
            logger.info(f"Resolved cache backend '{name}': {type(backend).__name__}")
            return backend

    def list_all(self) -> List[str]:
        """List registered selector names."""
        with self._lock:
            return sorted(self._factories)


_default_registry = BackendRegistry()


def get_default_registry() -> BackendRegistry:
    """Get the process-wide backend registry."""
    return _default_registry
