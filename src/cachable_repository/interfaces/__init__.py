"""
Interfaces Layer - Abstract Protocols for Collaborators.

The caching decorator depends only on these protocols, never on
concrete implementations.

Protocols:
    - RepositoryProtocol: The wrapped data repository
    - CriterionProtocol: Composable query modifications
    - CacheBackendProtocol: Get-or-compute cache storage
    - RequestContextProviderProtocol: Access to the current request
    - KeyRegistryProtocol: Index of generated keys per repository type
    - MetricsCollectorProtocol: Hit/miss counters

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Interface Segregation: Small, focused interfaces
"""

from cachable_repository.interfaces.cache_backend import CacheBackendProtocol
from cachable_repository.interfaces.key_registry import KeyRegistryProtocol
from cachable_repository.interfaces.metrics_collector import MetricsCollectorProtocol
from cachable_repository.interfaces.repository import (
    CriterionProtocol,
    RepositoryProtocol,
    SignedCriterionProtocol,
)
from cachable_repository.interfaces.request_context import (
    RequestContextProviderProtocol,
)

__all__ = [
    "CacheBackendProtocol",
    "CriterionProtocol",
    "KeyRegistryProtocol",
    "MetricsCollectorProtocol",
    "RepositoryProtocol",
    "RequestContextProviderProtocol",
    "SignedCriterionProtocol",
]
