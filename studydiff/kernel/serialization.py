from __future__ import annotations

import dataclasses
import json
from enum import Enum
from types import MappingProxyType
from typing import Any


def to_jsonable(value: Any) -> Any:
    """Coerce changelog values into JSON-compatible primitives.

    This is intentionally explicit (and limited). If you need to serialize
    a new type, add a branch and tests.
    """
    if value is None:
        return None

    # Enum before str: ChangeType is a str-valued enum.
    if isinstance(value, Enum):
        return to_jsonable(value.value)

    if isinstance(value, (str, int, float, bool)):
        return value

    # CompositeKey and friends expose their persistence shape explicitly.
    to_list = getattr(value, "to_list", None)
    if callable(to_list):
        return to_jsonable(to_list())

    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_jsonable(to_dict())

    if isinstance(value, MappingProxyType):
        return {str(k): to_jsonable(v) for (k, v) in dict(value).items()}

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }

    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for (k, v) in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]

    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)

    # Pydantic models (settings) expose model_dump.
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return to_jsonable(model_dump())

    raise TypeError(f"Unsupported type for JSON serialization: {type(value)!r}")


def json_dumps_canonical(value: Any) -> str:
    """Stable JSON encoding for changelog export, fixtures, and logs."""
    return json.dumps(
        to_jsonable(value),
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    )


def json_loads(value: str) -> Any:
    return json.loads(value)
