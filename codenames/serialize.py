"""Canonical JSON for game records: stable key order, enums by value, digests over the result."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from enum import Enum
from typing import Any, Mapping

_SCALARS = (bool, int, float, str, type(None))


def to_serializable(value: Any) -> Any:
    """Lower records, enums and containers to JSON primitives.

    Objects exposing `to_dict` are trusted to produce their own wire shape;
    plain dataclasses fall back to their fields.
    """
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, Enum):
        return value.value
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_serializable(to_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_serializable({field.name: getattr(value, field.name) for field in dataclasses.fields(value)})
    if isinstance(value, Mapping):
        return {str(key): to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_serializable(item) for item in value)
    raise TypeError(f"Cannot encode {type(value).__name__} as JSON.")


def json_dumps(value: Any, *, indent: int | None = None) -> str:
    """Compact, key-sorted JSON unless `indent` asks for pretty output."""
    return json.dumps(
        to_serializable(value),
        sort_keys=True,
        ensure_ascii=True,
        indent=indent,
        separators=(",", ":") if indent is None else None,
    )


def digest(value: Any) -> str:
    """SHA-256 hex digest of the canonical encoding."""
    return hashlib.sha256(json_dumps(value).encode("utf-8")).hexdigest()
