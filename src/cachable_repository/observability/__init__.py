"""
Observability Package.

    - ObservabilityManager: Cache hit/miss/bypass/flush counters logged
      as structured events via structlog
"""

from cachable_repository.observability.observability_manager import (
    ObservabilityManager,
)

__all__ = [
    "ObservabilityManager",
]
