"""
Metrics Collector Protocol.

The decorator reports cache hits, misses, bypasses and flushes as counters.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class MetricsCollectorProtocol(Protocol):
    """Protocol for metrics collection."""

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Record a count metric."""
        ...
