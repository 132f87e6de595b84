"""
Observability Manager - Structured Cache Events via structlog.

Collects the counters CachedRepository emits and logs each one as a
structured event:

    cache_hit / cache_miss / cache_bypass   tags: repository, method
    cache_flush (value = entries removed)   tags: repository

Design Notes:
    - Satisfies MetricsCollectorProtocol (record_count)
    - Counters aggregated per (name, tags); queried with tag filters
    - JSON rendering by default, console rendering for development
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

import structlog

CounterKey = Tuple[str, Tuple[Tuple[str, str], ...]]


class ObservabilityManager:
    """
    Records cache counters and logs them through structlog.

    Usage:
        observer = ObservabilityManager()
        repo = CachedRepository(UserRepository(), metrics_collector=observer)
        repo.find(1)
        repo.find(1)
        observer.count("cache_hit", method="find")   # 1
        observer.hit_rate()                          # 0.5
    """

    def __init__(
        self,
        service_name: str = "cachable_repository",
        use_json: bool = True,
        log_level: int = logging.INFO,
        configure: bool = True,
    ) -> None:
        """
        Initialize observability manager.

        Args:
            service_name: Logger name bound to every event
            use_json: Render JSON instead of console output
            log_level: Minimum level of emitted events (counters log at DEBUG)
            configure: Apply the structlog configuration globally
        """
        self.service_name = service_name
        self._counts: Counter = Counter()
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

        if configure:
            _configure_structlog(use_json, log_level)
        self._logger = structlog.get_logger(service_name)

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        """Add value to the counter name/tags and log a debug event."""
        tags = dict(tags or {})
        key: CounterKey = (name, tuple(sorted(tags.items())))

        with self._lock:
            self._counts[key] += value
            self._events.append({"event": name, "value": value, **tags})

        self._logger.debug(name, value=value, **tags)

    def count(self, name: str, **tags: str) -> int:
        """
        Total of a counter over every tag set matching the given tags.

        Example:
            count("cache_miss")                       # all repositories
            count("cache_miss", method="find_where")  # one method
        """
        wanted = set(tags.items())
        with self._lock:
            return sum(
                total
                for (counter, counter_tags), total in self._counts.items()
                if counter == name and wanted <= set(counter_tags)
            )

    def hit_rate(self, **tags: str) -> float:
        """Hits / (hits + misses) for the matching tags; 0.0 without lookups."""
        hits = self.count("cache_hit", **tags)
        lookups = hits + self.count("cache_miss", **tags)
        return hits / lookups if lookups else 0.0

    def summary(self) -> Dict[str, int]:
        """Counter totals by name."""
        totals: Dict[str, int] = {}
        with self._lock:
            for (name, _), total in self._counts.items():
                totals[name] = totals.get(name, 0) + total
        return totals

    def get_events(self) -> List[Dict[str, Any]]:
        """Get all recorded events, oldest first."""
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        """Clear all counters and events."""
        with self._lock:
            self._counts.clear()
            self._events.clear()


def _configure_structlog(use_json: bool, log_level: int) -> None:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
