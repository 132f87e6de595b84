"""
Error Types - Exception Hierarchy for the Caching Layer.

All errors raised by this package derive from RepositoryCacheError.
Several also derive from the builtin exception they specialise so that
callers catching TypeError/LookupError keep working.
"""

from __future__ import annotations


class RepositoryCacheError(Exception):
    """Base class for caching layer errors."""
    pass


class UnserializableCriterionError(RepositoryCacheError, TypeError):
    """Raised when a value embeds a callable that cannot be serialized."""

    def __init__(self, obj: object) -> None:
        self.obj = obj
        name = getattr(obj, "__qualname__", type(obj).__qualname__)
        super().__init__(f"Serialization of callable '{name}' is not allowed")


class CacheBackendNotFoundError(RepositoryCacheError, LookupError):
    """Raised when a cache backend selector is not registered."""
    pass


class KeyRegistryError(RepositoryCacheError):
    """Raised when the persisted key registry cannot be read."""
    pass
