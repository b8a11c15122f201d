"""
Plain-data serialization for Catwalk models.

- to_plain_data: instance -> dict, recursing through nested models
- to_json: instance -> JSON text
- from_plain_data: dict or JSON text -> instance, rebuilding nested models

Invariants:
    - from_plain_data(M, x.to_plain_data()) serializes back to the same dict
    - Malformed JSON always raises ParseError; nothing is recovered
    - Keys follow attribute order
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Optional

from .errors import DataTypeError, ParseError
from .validators import pattern_literal


def to_plain_data(instance: Any) -> dict[str, Any]:
    """Default serializer installed on every root model.

    Returns a snapshot of the attribute values. Nested values that have
    their own to_plain_data are converted through it.
    """
    return {name: _plain(value) for name, value in instance._values.items()}


def _plain(value: Any) -> Any:
    serializer = getattr(value, "to_plain_data", None)
    if callable(serializer) and not isinstance(value, type):
        return serializer()
    if isinstance(value, tuple):
        return tuple(_plain(item) for item in value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant '{name}'")


def _json_default(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return pattern_literal(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(instance: Any, indent: Optional[int] = None) -> str:
    """Encode an instance's plain data as JSON text.

    Tuples become arrays and compiled patterns become "/body/flags"
    strings, so decoding yields lists and strings for them. NaN and
    infinite floats are rejected with ValueError.
    """
    return json.dumps(
        instance.to_plain_data(), indent=indent, allow_nan=False, default=_json_default
    )


def decode(document: str | bytes | bytearray) -> dict[str, Any]:
    """Decode a JSON document into a dict.

    Raises:
        ParseError: If the document is not valid JSON
        DataTypeError: If the top level is not an object
    """
    try:
        data = json.loads(document, parse_constant=_reject_constant)
    except ValueError as e:  # also UnicodeDecodeError and rejected constants
        text = document if isinstance(document, str) else None
        raise ParseError(f"Invalid JSON: {e}", document=text) from e

    if not isinstance(data, dict):
        raise DataTypeError(f"JSON document must be an object, got {type(data).__name__}")
    return data


def from_plain_data(model: type, data: Any) -> Any:
    """Rebuild an instance of model from plain data.

    Args:
        model: Defined model class
        data: Mapping, or JSON text encoding an object

    Returns:
        New model instance

    Raises:
        ParseError: If JSON text is malformed
        DataTypeError: If data has the wrong shape or a raw value does not
            fit its attribute
        ValidationError: If construction rejects the resolved values
    """
    if isinstance(data, (str, bytes, bytearray)):
        data = decode(data)
    elif not isinstance(data, Mapping):
        raise DataTypeError(
            f"{model.__name__}.from_plain_data expects a mapping or JSON text, "
            f"got {type(data).__name__}"
        )

    schema = model.__schema__
    resolved = dict(data)
    for name, attribute in schema.attributes.items():
        if name not in resolved:
            continue
        value = resolved[name]
        if attribute.is_zero_fallback(value):
            del resolved[name]
            continue

        nested = attribute.nested_model
        if nested is not None and value is not None and not isinstance(value, nested):
            if not isinstance(value, Mapping):
                raise DataTypeError(
                    f"Attribute '{name}' of '{schema.name}' expects plain data for "
                    f"{nested.__name__}, got {type(value).__name__}",
                    field_name=name,
                )
            resolved[name] = nested.from_plain_data(value)
            continue

        # JSON arrays decode as lists
        if attribute.declared_type is tuple and isinstance(value, list):
            value = resolved[name] = tuple(value)

        if not attribute.is_valid(value):
            raise DataTypeError(
                f"Invalid value {value!r} for attribute '{name}' of '{schema.name}'",
                field_name=name,
            )

    return model(resolved)
