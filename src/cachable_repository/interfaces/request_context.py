"""
Request Context Provider Protocol.

Supplies the request the current call is served for. Passed into the
decorator explicitly instead of being looked up from global state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cachable_repository.domain.entities import RequestContext


class RequestContextProviderProtocol(Protocol):
    """Protocol for request context providers."""

    def current(self) -> RequestContext:
        """Return the request context of the current call."""
        ...
