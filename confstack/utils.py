from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict


def merge_flat(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge two mappings at the top level only.

    Every key of `override` replaces the key of the same name in `base`,
    whatever the shape of either value.
    """
    result: Dict[str, Any] = dict(base)
    result.update(override)
    return result


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two mappings.

    Values from `override` take precedence.
    Nested mappings are merged, all other values are replaced.
    """
    result: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], Mapping)
            and isinstance(value, Mapping)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
