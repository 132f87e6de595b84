"""
Request Context Providers.

    - StaticRequestProvider: Always returns the same context (scripts, tests)
    - ContextVarRequestProvider: Per thread / task context set by the
      request handling code
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from cachable_repository.domain.entities import RequestContext


class StaticRequestProvider:
    """Provides one fixed request context."""

    def __init__(self, context: Optional[RequestContext] = None) -> None:
        self.context = context or RequestContext()

    def current(self) -> RequestContext:
        return self.context

    def set(self, full_url: str = "", params: Optional[Dict[str, Any]] = None) -> None:
        """Replace the provided context."""
        self.context = RequestContext(full_url=full_url, params=params or {})


class ContextVarRequestProvider:
    """
    Provides the request context bound to the current execution context.

    Usage:
        provider = ContextVarRequestProvider()

        with provider.activate(RequestContext(full_url=url, params=query)):
            repository.find(42)
    """

    def __init__(self, name: str = "request_context") -> None:
        self._var: ContextVar[Optional[RequestContext]] = ContextVar(name, default=None)
        self._empty = RequestContext()

    def current(self) -> RequestContext:
        """Get the active context, or an empty one outside of a request."""
        return self._var.get() or self._empty

    @contextmanager
    def activate(self, context: RequestContext) -> Iterator[RequestContext]:
        """Bind a request context for the duration of the block."""
        token = self._var.set(context)
        try:
            yield context
        finally:
            self._var.reset(token)
