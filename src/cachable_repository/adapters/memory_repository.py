"""
In-Memory Repository.

A list-backed repository for development and testing. Implements the
read operations the cached repository wraps, a criteria stack and
basic writes.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence

from cachable_repository.criteria.builtin import WhereCriterion, field_value
from cachable_repository.domain.entities import Page
from cachable_repository.interfaces.repository import CriterionProtocol

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 15


class RecordNotFoundError(LookupError):
    """Raised when no record has the requested primary key."""
    pass


class InMemoryRepository:
    """List-backed repository of dict records."""

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        primary_key: str = "id",
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        """
        Initialize repository.

        Args:
            records: Initial records (copied)
            primary_key: Name of the identifying field
            per_page: Page size used when paginate() gets no limit
        """
        self.primary_key = primary_key
        self.per_page = per_page
        self._records: List[Dict[str, Any]] = [dict(r) for r in records or []]
        self._criteria: List[CriterionProtocol] = []
        self._skip_criteria = False

    # =========================================================================
    # Criteria
    # =========================================================================

    def push_criteria(self, criterion: CriterionProtocol) -> "InMemoryRepository":
        """Apply a criterion to every following query."""
        if not isinstance(criterion, CriterionProtocol):
            raise TypeError(f"{type(criterion).__name__} is not a criterion")
        self._criteria.append(criterion)
        return self

    def pop_criteria(self, criterion: CriterionProtocol) -> "InMemoryRepository":
        """Remove a criterion (by equality or identity)."""
        self._criteria = [
            c for c in self._criteria if not (c is criterion or c == criterion)
        ]
        return self

    def get_criteria(self) -> List[CriterionProtocol]:
        """Get the criteria applied to queries (empty while skipped)."""
        if self._skip_criteria:
            return []
        return list(self._criteria)

    def reset_criteria(self) -> "InMemoryRepository":
        self._criteria = []
        return self

    def skip_criteria(self, status: bool = True) -> "InMemoryRepository":
        self._skip_criteria = status
        return self

    # =========================================================================
    # Reads
    # =========================================================================

    def all(self, columns: Sequence[str] = ("*",)) -> List[Dict[str, Any]]:
        return self._select(self._query(), columns)

    def paginate(
        self,
        limit: Optional[int] = None,
        columns: Sequence[str] = ("*",),
        page: int = 1,
    ) -> Page:
        per_page = limit or self.per_page
        records = self._query()
        start = (page - 1) * per_page
        return Page(
            items=self._select(records[start:start + per_page], columns),
            total=len(records),
            per_page=per_page,
            current_page=page,
        )

    def find(self, id: Any, columns: Sequence[str] = ("*",)) -> Dict[str, Any]:
        """
        Find a record by primary key.

        Raises:
            RecordNotFoundError: If no record matches
        """
        for record in self._query():
            if record.get(self.primary_key) == id:
                return self._select([record], columns)[0]
        raise RecordNotFoundError(f"No record with {self.primary_key}={id!r}")

    def find_by_field(
        self,
        field: str,
        value: Any = None,
        columns: Sequence[str] = ("*",),
    ) -> List[Dict[str, Any]]:
        return self._select(
            WhereCriterion(field, value).apply(self._query(), self), columns
        )

    def find_where(
        self,
        where: Dict[str, Any],
        columns: Sequence[str] = ("*",),
    ) -> List[Dict[str, Any]]:
        """
        Find records matching every condition.

        A condition value may be an (operator, value) tuple, otherwise
        equality is used.
        """
        records = self._query()
        for field, condition in where.items():
            if isinstance(condition, tuple) and len(condition) == 2:
                criterion = WhereCriterion(field, condition[1], condition[0])
            else:
                criterion = WhereCriterion(field, condition)
            records = criterion.apply(records, self)
        return self._select(records, columns)

    def get_by_criteria(self, criterion: CriterionProtocol) -> List[Dict[str, Any]]:
        """Apply a single criterion to all records, ignoring the stack."""
        return self._select(criterion.apply(list(self._records), self), ("*",))

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(attributes)
        if self.primary_key not in record:
            record[self.primary_key] = self._next_id()
        self._records.append(record)
        logger.debug(f"Created record {record[self.primary_key]!r}")
        return dict(record)

    def update(self, attributes: Dict[str, Any], id: Any) -> Dict[str, Any]:
        for record in self._records:
            if record.get(self.primary_key) == id:
                record.update(attributes)
                return dict(record)
        raise RecordNotFoundError(f"No record with {self.primary_key}={id!r}")

    def delete(self, id: Any) -> bool:
        before = len(self._records)
        self._records = [r for r in self._records if r.get(self.primary_key) != id]
        return len(self._records) < before

    # =========================================================================
    # Helpers
    # =========================================================================

    def _query(self) -> List[Dict[str, Any]]:
        records = list(self._records)
        for criterion in self.get_criteria():
            records = criterion.apply(records, self)
        return records

    def _select(
        self,
        records: List[Dict[str, Any]],
        columns: Sequence[str],
    ) -> List[Dict[str, Any]]:
        if "*" in columns:
            return [copy.deepcopy(r) for r in records]
        return [{c: copy.deepcopy(field_value(r, c)) for c in columns} for r in records]

    def _next_id(self) -> int:
        ids = [r.get(self.primary_key) for r in self._records]
        return max((i for i in ids if isinstance(i, int)), default=0) + 1
