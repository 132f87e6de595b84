"""
Repository Protocol.

Defines the data access interface the caching decorator wraps. Any
repository exposing these read operations (and a criteria stack) can
be decorated.

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - Criteria are applied by the repository, the decorator only reads them
    - Write operations are optional; the decorator only forwards them
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class CriterionProtocol(Protocol):
    """A composable query modification applied by a repository."""

    def apply(self, items: List[Any], repository: Any) -> List[Any]:
        """
        Apply the criterion to a result set.

        Args:
            items: Records matched so far
            repository: Repository applying the criterion

        Returns:
            Records remaining after the criterion
        """
        ...


@runtime_checkable
class SignedCriterionProtocol(Protocol):
    """A criterion that provides its own stable cache representation."""

    def cache_signature(self) -> Any:
        """Return a canonical, JSON-serializable representation."""
        ...


class RepositoryProtocol(Protocol):
    """Protocol for repositories that can be cached."""

    def all(self, columns: Sequence[str] = ("*",)) -> List[Any]:
        """Retrieve all records."""
        ...

    def paginate(
        self,
        limit: Optional[int] = None,
        columns: Sequence[str] = ("*",),
        page: int = 1,
    ) -> Any:
        """Retrieve one page of records."""
        ...

    def find(self, id: Any, columns: Sequence[str] = ("*",)) -> Any:
        """Find a record by primary key."""
        ...

    def find_by_field(
        self,
        field: str,
        value: Any = None,
        columns: Sequence[str] = ("*",),
    ) -> List[Any]:
        """Find records where a field equals a value."""
        ...

    def find_where(
        self,
        where: Dict[str, Any],
        columns: Sequence[str] = ("*",),
    ) -> List[Any]:
        """Find records matching all field conditions."""
        ...

    def get_by_criteria(self, criterion: CriterionProtocol) -> List[Any]:
        """Find records matching a single criterion."""
        ...

    def get_criteria(self) -> List[CriterionProtocol]:
        """Get the criteria currently applied to every query."""
        ...
