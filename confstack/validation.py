from __future__ import annotations

from typing import Any, Mapping

import jsonschema

from .exceptions import ValidationError


def validate_config(data: Mapping[str, Any], schema: Mapping[str, Any] | None) -> None:
    """
    Validate merged configuration data against a JSON Schema.

    :param data: Merged configuration mapping to validate.
    :param schema: JSON Schema mapping. If None, validation is skipped.
    :raises ValidationError: if the data does not satisfy the schema.
    """
    if schema is None:
        return

    try:
        jsonschema.validate(instance=dict(data), schema=schema)
    except jsonschema.ValidationError as exc:
        path_str = ".".join(str(p) for p in exc.path) if exc.path else "<root>"
        raise ValidationError(f"at '{path_str}': {exc.message}") from exc
    except jsonschema.SchemaError as exc:
        raise ValidationError(f"invalid schema: {exc.message}") from exc
