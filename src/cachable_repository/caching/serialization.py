"""
Canonical Serialization - Deterministic Encoding for Cache Keys.

Converts arbitrary argument and criteria values into a JSON string that
is identical for structurally identical input. Callables cannot be
encoded: by default they raise UnserializableCriterionError, which the
key deriver catches to switch to its fallback path. In describe mode
they are replaced by a stable textual marker instead.

Encoding Rules:
    - JSON scalars as is; tuples as lists
    - dict keys sorted; non-string keys and keys starting with "__"
      encoded as key/value pairs so they cannot pass for a type tag
    - sets sorted by their encoded form
    - datetime/date/time, Decimal, UUID, bytes, Path, Enum tagged
    - Pydantic models, dataclasses and plain objects as type + state
    - Objects with cache_signature() encoded through that method
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import types
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import partial
from pathlib import PurePath
from typing import Any, Optional, Set
from uuid import UUID

from pydantic import BaseModel

from cachable_repository.errors import UnserializableCriterionError


def qualified_name(obj: Any) -> str:
    """Return "module.QualName" for a class or the class of an instance."""
    cls = obj if isinstance(obj, type) else type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def canonical_dumps(value: Any, describe_callables: bool = False) -> str:
    """
    Serialize a value to its canonical JSON string.

    Args:
        value: Value to serialize
        describe_callables: Replace callables by a marker instead of raising

    Returns:
        Deterministic JSON text

    Raises:
        UnserializableCriterionError: If a callable is found and
            describe_callables is False
        TypeError: If a value has no known encoding
        ValueError: If the value contains a reference cycle
    """
    encoded = canonicalize(value, describe_callables=describe_callables)
    return json.dumps(encoded, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonicalize(
    value: Any,
    describe_callables: bool = False,
    _seen: Optional[Set[int]] = None,
) -> Any:
    """Convert a value into plain JSON-compatible data (see canonical_dumps)."""
    if value is None or isinstance(value, (bool, int, float, str)):
        if isinstance(value, Enum):
            return _encode_enum(value, describe_callables, _seen)
        return value

    seen = _seen if _seen is not None else set()
    marker = id(value)
    if marker in seen:
        raise ValueError(f"Circular reference detected in {type(value).__name__}")
    seen.add(marker)
    try:
        return _encode(value, describe_callables, seen)
    finally:
        seen.discard(marker)


def _encode(value: Any, describe: bool, seen: Set[int]) -> Any:
    if isinstance(value, Enum):
        return _encode_enum(value, describe, seen)

    if isinstance(value, (list, tuple)):
        return [canonicalize(v, describe, seen) for v in value]

    if isinstance(value, dict):
        if all(isinstance(k, str) and not k.startswith("__") for k in value):
            return {k: canonicalize(v, describe, seen) for k, v in value.items()}
        pairs = [
            [canonicalize(k, describe, seen), canonicalize(v, describe, seen)]
            for k, v in value.items()
        ]
        return {"__map__": sorted(pairs, key=_sort_key)}

    if isinstance(value, (set, frozenset)):
        items = [canonicalize(v, describe, seen) for v in value]
        return {"__set__": sorted(items, key=_sort_key)}

    if isinstance(value, datetime):
        return {"__datetime__": value.isoformat()}
    if isinstance(value, date):
        return {"__date__": value.isoformat()}
    if isinstance(value, time):
        return {"__time__": value.isoformat()}
    if isinstance(value, Decimal):
        return {"__decimal__": str(value)}
    if isinstance(value, UUID):
        return {"__uuid__": str(value)}
    if isinstance(value, (bytes, bytearray)):
        return {"__bytes__": bytes(value).hex()}
    if isinstance(value, PurePath):
        return {"__path__": value.as_posix()}

    if isinstance(value, type):
        return {"__class__": qualified_name(value)}

    signature = getattr(value, "cache_signature", None)
    if callable(signature) and not isinstance(value, type):
        return {
            "__type__": qualified_name(value),
            "signature": canonicalize(signature(), describe, seen),
        }

    if isinstance(value, BaseModel):
        state = {name: getattr(value, name) for name in type(value).model_fields}
        return {"__type__": qualified_name(value), "state": canonicalize(state, describe, seen)}

    if dataclasses.is_dataclass(value):
        state = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return {"__type__": qualified_name(value), "state": canonicalize(state, describe, seen)}

    if callable(value):
        if describe:
            return describe_callable(value, seen)
        raise UnserializableCriterionError(value)

    state = object_state(value)
    if state is not None:
        return {"__type__": qualified_name(value), "state": canonicalize(state, describe, seen)}

    raise TypeError(f"Object of type {type(value).__name__} is not serializable")


def _encode_enum(value: Enum, describe: bool, seen: Optional[Set[int]]) -> Any:
    return {
        "__enum__": qualified_name(value),
        "value": canonicalize(value.value, describe, seen),
    }


def _sort_key(item: Any) -> str:
    return json.dumps(item, sort_keys=True, separators=(",", ":"))


def object_state(value: Any) -> Optional[dict]:
    """
    Return the instance attributes of a plain object in declaration order.

    Returns None for objects that have neither __dict__ nor __slots__.
    """
    state = {}
    has_layout = False

    for klass in reversed(type(value).__mro__):
        slots = klass.__dict__.get("__slots__")
        if slots is None:
            continue
        has_layout = True
        for name in (slots,) if isinstance(slots, str) else slots:
            if name.startswith("__"):
                continue
            if hasattr(value, name):
                state[name] = getattr(value, name)

    if hasattr(value, "__dict__"):
        has_layout = True
        state.update(vars(value))

    return state if has_layout else None


def describe_callable(fn: Any, seen: Optional[Set[int]] = None) -> str:
    """
    Build a stable textual marker for a callable.

    The marker combines the qualified name, a digest of the compiled
    body (bytecode, names and constants, nested code included), the
    default argument values and the values captured in its closure, so
    two lambdas differing only in a literal, a default or a captured
    value get different markers.
    """
    seen = seen if seen is not None else set()

    if isinstance(fn, partial):
        inner = describe_callable(fn.func, seen)
        bound = canonicalize([list(fn.args), fn.keywords or {}], True, seen)
        return f"<partial:{inner}:{_digest(_sort_key(bound))}>"

    target = getattr(fn, "__func__", fn)
    name = getattr(target, "__qualname__", type(target).__qualname__)
    module = getattr(target, "__module__", None) or type(target).__module__
    parts = [f"{module}.{name}"]

    code = getattr(target, "__code__", None)
    if code is not None:
        parts.append(_digest(_sort_key(_code_fingerprint(code))))
        defaults = [
            list(getattr(target, "__defaults__", None) or ()),
            getattr(target, "__kwdefaults__", None) or {},
        ]
        if defaults != [[], {}]:
            parts.append(_digest(_sort_key(canonicalize(defaults, True, seen))))
        cells = [
            "<self>" if cell.cell_contents is target else cell.cell_contents
            for cell in (target.__closure__ or ())
        ]
        if cells:
            parts.append(_digest(_sort_key(canonicalize(cells, True, seen))))

    bound_self = getattr(fn, "__self__", None)
    if bound_self is not None and not isinstance(bound_self, types.ModuleType):
        parts.append(qualified_name(bound_self))

    return f"<callable:{':'.join(parts)}>"


def _digest(data: Any) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()[:12]


def _code_fingerprint(code: types.CodeType) -> list:
    return [
        code.co_code.hex(),
        list(code.co_names),
        [_constant_fingerprint(c) for c in code.co_consts],
    ]


def _constant_fingerprint(const: Any) -> Any:
    # repr keeps 1, 1.0 and True apart
    if isinstance(const, types.CodeType):
        return _code_fingerprint(const)
    if isinstance(const, tuple):
        return [_constant_fingerprint(c) for c in const]
    if isinstance(const, frozenset):
        return {"__set__": sorted(_sort_key(_constant_fingerprint(c)) for c in const)}
    return repr(const)
