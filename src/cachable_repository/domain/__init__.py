"""
Domain Layer - Value Objects Shared by All Components.

    - RequestContext: Snapshot of the inbound request (URL and parameters)
    - Page: Result of a paginated read
    - CriterionFallback: Stable stand-in for criteria holding closures
"""

from cachable_repository.domain.entities import (
    CriterionFallback,
    Page,
    PropertyDescriptor,
    RequestContext,
)

__all__ = [
    "CriterionFallback",
    "Page",
    "PropertyDescriptor",
    "RequestContext",
]
