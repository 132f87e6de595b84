"""
Core Domain Entities.

Value objects passed between the repository, the decorator and the
cache key deriver. All of them are immutable Pydantic models.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List

from pydantic import BaseModel, Field, computed_field

# Request parameter values that do not count as "set"
FALSY_PARAM_VALUES = frozenset({"", "0", "false", "no", "off"})


class RequestContext(BaseModel):
    """The parts of the current request the caching layer looks at."""

    full_url: str = Field(default="", description="Full URL including query string")
    params: Dict[str, Any] = Field(default_factory=dict, description="Request input")

    model_config = {"frozen": True}

    def has(self, name: str) -> bool:
        """Check whether a request parameter is present."""
        return name in self.params

    def get(self, name: str, default: Any = None) -> Any:
        """Get a request parameter value."""
        return self.params.get(name, default)

    def is_truthy(self, name: str) -> bool:
        """
        Check whether a request parameter is present with a truthy value.

        Strings such as "0", "false", "no" and "off" are treated as false,
        as are empty values.
        """
        if not self.has(name):
            return False
        value = self.get(name)
        if isinstance(value, str):
            return value.strip().lower() not in FALSY_PARAM_VALUES
        return bool(value)


class Page(BaseModel):
    """One page of a paginated read."""

    items: List[Any] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    per_page: int = Field(default=15, ge=1)
    current_page: int = Field(default=1, ge=1)

    model_config = {"frozen": True}

    @computed_field
    @property
    def last_page(self) -> int:
        """Number of the last page (at least 1)."""
        return max(1, math.ceil(self.total / self.per_page))


class PropertyDescriptor(BaseModel):
    """Describes one declared attribute of a criterion."""

    name: str
    declaring_class: str
    value: Any = None

    model_config = {"frozen": True}


class CriterionFallback(BaseModel):
    """
    Serializable stand-in for a criterion that embeds a callable.

    The hash identifies the criterion's structural type; the properties
    list its attributes in declaration order.
    """

    hash: str
    properties: List[PropertyDescriptor] = Field(default_factory=list)

    model_config = {"frozen": True}
