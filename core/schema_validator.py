"""Schema validation utilities for config file sections."""

from __future__ import annotations

import warnings
from typing import Any, Mapping


class SchemaValidationError(ValueError):
    """Raised when a config section fails schema validation."""


def _type_name(tp: type[Any]) -> str:
    return tp.__name__


def _matches(value: Any, expected_type: type[Any]) -> bool:
    # bool is an int subclass; only accept it where bool is expected.
    if isinstance(value, bool):
        return expected_type is bool
    if expected_type is float:
        return isinstance(value, (int, float))
    return type(value) is expected_type


def validate_section(
    params: Mapping[str, Any],
    schema: Any,
    section_name: str,
    strict: bool = True,
) -> dict[str, Any]:
    """Validate one config section against its schema.

    Applies defaults, validates required fields and types (ints are accepted
    where floats are expected), and handles unknown parameters as warnings or
    errors depending on ``strict``.
    """
    required: Mapping[str, type[Any]] = getattr(schema, "REQUIRED_PARAMS", {})
    defaults: Mapping[str, Any] = getattr(schema, "DEFAULTS", {})
    optional: Mapping[str, type[Any]] = getattr(schema, "OPTIONAL_PARAMS", {})

    if not isinstance(required, Mapping) or not isinstance(defaults, Mapping) or not isinstance(optional, Mapping):
        raise SchemaValidationError(
            f"Section '{section_name}' schema must define REQUIRED_PARAMS, DEFAULTS, OPTIONAL_PARAMS mappings."
        )

    merged = dict(defaults)
    merged.update(params)

    for key, expected_type in required.items():
        if key not in merged:
            raise SchemaValidationError(f"Section '{section_name}' missing required parameter '{key}'.")
        if not _matches(merged[key], expected_type):
            raise SchemaValidationError(
                f"Parameter '{section_name}.{key}' expected {_type_name(expected_type)}, "
                f"got {type(merged[key]).__name__}."
            )

    for key, expected_type in optional.items():
        if key in merged and not _matches(merged[key], expected_type):
            raise SchemaValidationError(
                f"Parameter '{section_name}.{key}' expected {_type_name(expected_type)}, "
                f"got {type(merged[key]).__name__}."
            )

    allowed = set(required) | set(optional) | set(defaults)
    extras = sorted(key for key in merged if key not in allowed)
    if extras:
        message = f"Unknown parameter(s) {extras} in section '{section_name}'."
        if strict:
            raise SchemaValidationError(message)
        warnings.warn(message, stacklevel=2)
        for key in extras:
            merged.pop(key)

    return merged
