"""
Cache Decision Gate - Whether a Repository Call May Use the Cache.

Combines global configuration, per-repository overrides and the
current request into three decisions: is caching allowed for a method,
is the cache skipped for this call, and for how many minutes results
are kept.

Method Lists:
    - only: when set, a method must be listed to be cached
    - except: a listed method is never cached
    - both: a method must be in only and not in except
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from cachable_repository.config.models import CacheSettings
from cachable_repository.interfaces.request_context import (
    RequestContextProviderProtocol,
)

logger = logging.getLogger(__name__)


@dataclass
class CachePolicy:
    """
    Per-repository overrides of the cache configuration.

    Unset fields (None) fall back to CacheSettings.
    """

    only_methods: Optional[FrozenSet[str]] = None
    except_methods: Optional[FrozenSet[str]] = None
    minutes: Optional[int] = None
    skip: bool = False

    def __post_init__(self) -> None:
        if self.only_methods is not None:
            self.only_methods = frozenset(self.only_methods)
        if self.except_methods is not None:
            self.except_methods = frozenset(self.except_methods)
        if self.minutes is not None and self.minutes < 0:
            raise ValueError(f"Cache minutes must be >= 0, got {self.minutes}")


class CacheDecisionGate:
    """
    Decides per call whether the cache applies.

    Nothing is memoized: configuration, policy and request are read
    again on every decision.

    An except list configured without an only list caches every method
    it does not name; it does not switch caching off for the repository.
    """

    def __init__(
        self,
        settings: CacheSettings,
        request_provider: RequestContextProviderProtocol,
        policy: Optional[CachePolicy] = None,
    ) -> None:
        """
        Initialize gate.

        Args:
            settings: Global cache configuration
            request_provider: Supplies the current request context
            policy: Per-repository overrides
        """
        self.settings = settings
        self.policy = policy or CachePolicy()
        self._request_provider = request_provider

    def allowed_cache(self, method: str) -> bool:
        """
        Check whether results of a method may be cached.

        Args:
            method: Repository method name

        Returns:
            True if caching applies to the method
        """
        if not self.settings.enabled:
            return False

        only = self._effective(self.policy.only_methods, self.settings.allowed.only)
        excluded = self._effective(
            self.policy.except_methods, self.settings.allowed.except_
        )

        if only is not None:
            return method in only and method not in (excluded or ())

        # except-only: everything not excluded is cached
        if excluded is not None:
            return method not in excluded

        return True

    def is_skipped_cache(self) -> bool:
        """
        Check whether the cache is bypassed for the current call.

        Skipped when the repository's skip flag is set or the current
        request carries the skip parameter with a truthy value.
        """
        if self.policy.skip:
            return True

        param = self.settings.params.skip_cache
        if self._request_provider.current().is_truthy(param):
            logger.debug(f"Cache skipped by request parameter '{param}'")
            return True

        return False

    def cache_minutes(self) -> int:
        """Get the TTL in minutes for newly cached results."""
        if self.policy.minutes is not None:
            return self.policy.minutes
        return self.settings.minutes

    @staticmethod
    def _effective(
        override: Optional[Iterable[str]],
        configured: Optional[Iterable[str]],
    ) -> Optional[FrozenSet[str]]:
        if override is not None:
            return frozenset(override)
        if configured is not None:
            return frozenset(configured)
        return None
