"""
Cache Key Deriver - Deterministic Keys for Repository Reads.

Builds the cache key of a read from the repository type, the method
name, the call arguments, the criteria currently applied to the
repository and the URL of the current request.

Cache Key Format:
    f"{repository_type}@{method}-{md5}"

    Example: "app.repositories.UserRepository@find-9e107d9d372bb6826bd81d3542a419d6"

Design Notes:
    - md5 over serialized args + serialized criteria + full request URL
    - Criteria holding closures fall back to a structural descriptor
    - Every generated key is registered for bulk invalidation
"""

from __future__ import annotations

import hashlib
import inspect
import logging
from typing import Any, Callable, List, Sequence, Union

from cachable_repository.caching.serialization import (
    canonical_dumps,
    canonicalize,
    object_state,
    qualified_name,
)
from cachable_repository.domain.entities import CriterionFallback, PropertyDescriptor
from cachable_repository.errors import UnserializableCriterionError
from cachable_repository.interfaces.key_registry import KeyRegistryProtocol
from cachable_repository.interfaces.repository import CriterionProtocol
from cachable_repository.interfaces.request_context import (
    RequestContextProviderProtocol,
)

logger = logging.getLogger(__name__)


class CacheKeyDeriver:
    """
    Derives cache keys for one repository.

    Usage:
        deriver = CacheKeyDeriver(
            owner="app.repositories.UserRepository",
            criteria_source=repository.get_criteria,
            request_provider=provider,
            key_registry=registry,
        )
        key = deriver.get_cache_key("find", (42, ("*",)))
    """

    def __init__(
        self,
        owner: str,
        criteria_source: Callable[[], Sequence[Any]],
        request_provider: RequestContextProviderProtocol,
        key_registry: KeyRegistryProtocol,
    ) -> None:
        """
        Initialize key deriver.

        Args:
            owner: Identifier of the repository type keys belong to
            criteria_source: Returns the criteria currently applied
            request_provider: Supplies the current request context
            key_registry: Index keys are registered in
        """
        self.owner = owner
        self._criteria_source = criteria_source
        self._request_provider = request_provider
        self._key_registry = key_registry

    def get_cache_key(self, method: str, args: Sequence[Any] = ()) -> str:
        """
        Get the cache key for a call.

        Args:
            method: Repository method name
            args: Positional arguments of the call

        Returns:
            Cache key string
        """
        serialized_args = self.serialize_args(args)
        serialized_criteria = self.serialize_criteria()
        full_url = self._request_provider.current().full_url

        digest = hashlib.md5(
            (serialized_args + serialized_criteria + full_url).encode("utf-8")
        ).hexdigest()
        key = f"{self.owner}@{method}-{digest}"

        self._key_registry.put_key(self.owner, key)
        return key

    def serialize_args(self, args: Sequence[Any]) -> str:
        """Serialize call arguments; criterion arguments may use the fallback."""
        prepared = [
            self.serialize_criterion(arg) if _is_criterion(arg) else arg
            for arg in args
        ]
        return canonical_dumps(prepared)

    def serialize_criteria(self) -> str:
        """
        Serialize the applied criteria, taking care of closures.

        Returns:
            Canonical JSON of the criteria list
        """
        criteria = list(self._criteria_source())
        try:
            return canonical_dumps(criteria)
        except UnserializableCriterionError:
            return canonical_dumps([self.serialize_criterion(c) for c in criteria])

    def serialize_criterion(self, criterion: Any) -> Union[Any, CriterionFallback]:
        """
        Serialize a single criterion, replacing it when it embeds a callable.

        Args:
            criterion: Criterion to check

        Returns:
            The criterion itself if serializable, else a CriterionFallback

        Raises:
            TypeError, ValueError: For failures other than embedded callables
        """
        try:
            canonical_dumps(criterion)
            return criterion
        except UnserializableCriterionError as e:
            logger.debug(
                f"Criterion {type(criterion).__name__} is not serializable ({e}), "
                "using structural fallback"
            )
            return build_fallback(criterion)


def build_fallback(criterion: Any) -> CriterionFallback:
    """
    Describe a criterion by its structural type and declared properties.

    The hash covers the qualified type name and the ordered property
    names. Property values are encoded with callables replaced by
    stable markers.
    """
    cls = type(criterion)
    state = object_state(criterion) or {}

    structure = f"{qualified_name(cls)}({','.join(state)})"
    properties: List[PropertyDescriptor] = [
        PropertyDescriptor(
            name=name,
            declaring_class=qualified_name(_declaring_class(cls, name)),
            value=canonicalize(value, describe_callables=True),
        )
        for name, value in state.items()
    ]

    return CriterionFallback(
        hash=hashlib.md5(structure.encode("utf-8")).hexdigest(),
        properties=properties,
    )


def _declaring_class(cls: type, name: str) -> type:
    """Find the most basic class in the MRO that declares an attribute."""
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        annotations = inspect.get_annotations(klass)
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        if name in annotations or name in slots:
            return klass
    return cls


def _is_criterion(value: Any) -> bool:
    return not isinstance(value, type) and isinstance(value, CriterionProtocol)
