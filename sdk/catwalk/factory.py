"""
Instance construction for Catwalk models.

Resolves the initial value of every attribute, in attribute order:

    1. value supplied in the data
    2. declared default (producers are called once per instance)
    3. readonly without default -> MissingValueError
    4. zero value of the attribute's kind (False, 0, "", None)

Values from 1 and 2 must pass the attribute's checks; zero values are
not checked. Nothing is built unless every attribute resolves.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .errors import DataTypeError, MissingValueError, UnknownAttributeError, ValidationError
from .schema import Schema
from .validators import describe_failure, suggest_names


def build_values(
    schema: Schema,
    data: Any = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Resolve and validate the value store for a new instance.

    Args:
        schema: Compiled schema of the model
        data: Mapping of attribute values, or None
        overrides: Keyword values, taking precedence over data

    Returns:
        Value store keyed by attribute name

    Raises:
        DataTypeError: If data is not a mapping
        UnknownAttributeError: If the model is strict and data has unknown keys
        MissingValueError: If a readonly attribute has no value and no default
        ValidationError: If a supplied or default value fails its checks
    """
    if data is None:
        data = {}
    elif not isinstance(data, Mapping):
        raise DataTypeError(
            f"{schema.name} expects a mapping of attribute values, got {type(data).__name__}"
        )

    supplied = {**data, **overrides} if overrides else data
    if schema.config.strict:
        _reject_unknown(schema, supplied)

    values: dict[str, Any] = {}
    for name, attribute in schema.attributes.items():
        if name in supplied:
            value = supplied[name]
        elif attribute.has_default:
            value = attribute.make_default()
        elif attribute.readonly:
            raise MissingValueError(schema.name, name)
        else:
            values[name] = attribute.kind.zero_value
            continue

        failed = attribute.check(value)
        if failed is not None:
            raise ValidationError(
                f"{schema.name}: {describe_failure(name, attribute.declared_type, failed, value)}",
                model_name=schema.name,
                field_name=name,
                value=value,
                check=failed,
            )
        values[name] = value

    return values


def _reject_unknown(schema: Schema, supplied: Mapping[str, Any]) -> None:
    known = list(schema.attributes)
    for key in supplied:
        if key not in schema.attributes:
            raise UnknownAttributeError(str(key), schema.name, suggest_names(str(key), known))
