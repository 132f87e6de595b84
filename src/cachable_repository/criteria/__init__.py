"""
Criteria Package - Reusable Query Modifications.

    - WhereCriterion: Keep records where a field compares to a value
    - OrderByCriterion: Sort records by a field
    - CallbackCriterion: Arbitrary function over the result set
    - SignedCallbackCriterion: Callback with an explicit cache signature
"""

from cachable_repository.criteria.builtin import (
    CallbackCriterion,
    OrderByCriterion,
    SignedCallbackCriterion,
    WhereCriterion,
    field_value,
)

__all__ = [
    "CallbackCriterion",
    "OrderByCriterion",
    "SignedCallbackCriterion",
    "WhereCriterion",
    "field_value",
]
