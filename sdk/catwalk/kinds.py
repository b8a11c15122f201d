"""
Primitive kinds for attribute types.

Every declared attribute type maps to exactly one AttributeKind. The kind
drives which constraints apply and which zero value fills an attribute
that received nothing at construction.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any


class AttributeKind(Enum):
    """Primitive kind of a declared type."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    COMPLEX = "complex"

    @property
    def primitive(self) -> bool:
        """Whether values of this kind are checked by exact type."""
        return self is not AttributeKind.COMPLEX

    @property
    def zero_value(self) -> Any:
        """Fallback value used when construction supplies nothing."""
        return _ZERO_VALUES[self]

    @classmethod
    def of(cls, declared_type: type) -> AttributeKind:
        """Derive the kind of a declared type."""
        # bool first: it is a subclass of int
        if declared_type is bool:
            return cls.BOOLEAN
        if declared_type in (int, float):
            return cls.NUMBER
        if declared_type is str:
            return cls.STRING
        return cls.COMPLEX


_ZERO_VALUES = {
    AttributeKind.BOOLEAN: False,
    AttributeKind.NUMBER: 0,
    AttributeKind.STRING: "",
    AttributeKind.COMPLEX: None,
}

# Type names usable in place of a class
TYPE_NAMES: dict[str, type] = {
    "bool": bool,
    "boolean": bool,
    "str": str,
    "string": str,
    "int": int,
    "float": float,
    "number": float,
    "pattern": re.Pattern,
}


def type_name(declared_type: type) -> str:
    """Human-readable name of a declared type."""
    if declared_type is re.Pattern:
        return "pattern"
    return getattr(declared_type, "__name__", repr(declared_type))
