from __future__ import annotations

"""
The value model shared by every configuration source.

Loaded data is kept as plain JSON-compatible Python values:

  None, bool, int, float, str, list[StructuredValue], dict[str, StructuredValue]

Readers pass whatever their parser produced through ``normalize`` so the rest
of the library only ever sees that closed set.
"""

import datetime
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Union

StructuredValue = Union[
    None, bool, int, float, str, List["StructuredValue"], Dict[str, "StructuredValue"]
]
ConfigMap = Dict[str, StructuredValue]

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U64_MAX = 2**64 - 1


def normalize(value: Any, *, _path: str = "<root>") -> StructuredValue:
    """
    Convert parser output into a StructuredValue.

    Tuples become lists, dates become ISO-8601 strings and mapping keys are
    stringified, with bool and None keys spelled `true`, `false` and `null`.
    Anything else outside the model raises TypeError naming the offending
    location.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        result = {}
        for k, v in value.items():
            key = _key(k)
            result[key] = normalize(v, _path=f"{_path}.{key}")
        return result
    if isinstance(value, (list, tuple)):
        return [normalize(v, _path=f"{_path}[{i}]") for i, v in enumerate(value)]
    raise TypeError(
        f"Unsupported value of type {type(value).__name__!r} at {_path}"
    )


def _key(key: Any) -> str:
    # Spell scalar keys the way YAML writes them, not as Python reprs.
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (datetime.date, datetime.datetime)):
        return key.isoformat()
    return str(key)


def normalize_map(data: Any) -> ConfigMap:
    """Normalize a top-level document, which must be a mapping."""
    if not isinstance(data, Mapping):
        raise TypeError(
            f"Top-level configuration must be a mapping, got {type(data).__name__}"
        )
    return normalize(data)  # type: ignore[return-value]


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def as_i64(value: Any) -> Optional[int]:
    if _is_integer(value) and _I64_MIN <= value <= _I64_MAX:
        return value
    return None


def as_u64(value: Any) -> Optional[int]:
    if _is_integer(value) and 0 <= value <= _U64_MAX:
        return value
    return None


def as_f64(value: Any) -> Optional[float]:
    # Integers widen to float, as JSON makes no distinction on the wire.
    if is_number(value):
        return float(value)
    return None


def as_number(value: Any) -> Optional[Union[int, float]]:
    return value if is_number(value) else None
