"""
Built-in Criteria.

Criteria operate on lists of records, where a record is either a
mapping or an object with attributes.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda left, right: left in right,
}


def field_value(record: Any, field: str) -> Any:
    """Read a field from a mapping or attribute-style record."""
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


@dataclass(frozen=True)
class WhereCriterion:
    """Keep records where `field <operator> value` holds."""

    field: str
    value: Any
    operator: str = "="

    def __post_init__(self) -> None:
        if self.operator not in _OPERATORS:
            raise ValueError(
                f"Unsupported operator '{self.operator}'. "
                f"Use one of: {', '.join(_OPERATORS)}"
            )

    def apply(self, items: List[Any], repository: Any) -> List[Any]:
        compare = _OPERATORS[self.operator]
        result = []
        for item in items:
            current = field_value(item, self.field)
            # None never matches an ordering comparison
            if current is None and self.operator not in ("=", "!=", "in"):
                continue
            if compare(current, self.value):
                result.append(item)
        return result


@dataclass(frozen=True)
class OrderByCriterion:
    """Sort records by a field; records missing the field sort last."""

    field: str
    descending: bool = False

    def apply(self, items: List[Any], repository: Any) -> List[Any]:
        present = [i for i in items if field_value(i, self.field) is not None]
        missing = [i for i in items if field_value(i, self.field) is None]
        present.sort(key=lambda i: field_value(i, self.field), reverse=self.descending)
        return present + missing


class CallbackCriterion:
    """
    Wrap a function as a criterion.

    The function receives the records and the repository and returns the
    remaining records. The cache key deriver has to describe this
    criterion structurally, since functions cannot be serialized.
    """

    def __init__(self, callback: Callable[[List[Any], Any], List[Any]]) -> None:
        self.callback = callback

    def apply(self, items: List[Any], repository: Any) -> List[Any]:
        return list(self.callback(items, repository))

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"CallbackCriterion({name})"


class SignedCallbackCriterion(CallbackCriterion):
    """
    Callback criterion with an explicit cache signature.

    The signature stands in for the callback in cache keys, so it must
    change whenever the callback's behaviour does.
    """

    def __init__(
        self,
        callback: Callable[[List[Any], Any], List[Any]],
        signature: Any,
    ) -> None:
        super().__init__(callback)
        self.signature = signature

    def cache_signature(self) -> Any:
        return {"signature": self.signature}
