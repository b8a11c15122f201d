"""
Named string formats for Catwalk.

The format table is built once at import time and exposed read-only.
Each entry is a compiled pattern that must match the whole value.

Invariants:
    - The table has no mutation API
    - Patterns are applied with fullmatch
    - Only ASCII digits count as digits

Example:
    >>> lookup("date").fullmatch("2015-06-01") is not None
    True
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Pattern

from .errors import UnknownFormatError

_DATE = r"(?:19|20)[0-9]{2}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12][0-9]|3[01])"
_TIME = r"(?:[01][0-9]|2[0-3]):[0-5][0-9]"

_SOURCES = {
    "alphanumeric": r"[A-Za-z0-9]+",
    "email": r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}",
    "date": _DATE,
    # ISO-8601 in UTC, milliseconds optional
    "datetime": _DATE + r"T" + _TIME + r":[0-5][0-9](?:\.[0-9]{3})?Z",
    "numeric": r"[0-9]+",
    "phone": r"\+?(?:\([0-9]{1,4}\)|[0-9]{1,4})(?:[-. ]?[0-9]{2,8}){1,4}",
    "time": _TIME,
    "week": r"[0-9]{4}-W(?:0[1-9]|[1-4][0-9]|5[0-3])",
    "year": r"[0-9]{4}",
}

FORMATS: Mapping[str, Pattern[str]] = MappingProxyType(
    {name: re.compile(source) for name, source in _SOURCES.items()}
)


def lookup(format_name: str) -> Pattern[str]:
    """Get the compiled pattern for a named format.

    Args:
        format_name: Registered format name (e.g. "email")

    Returns:
        Compiled pattern

    Raises:
        UnknownFormatError: If the name is not registered
    """
    try:
        return FORMATS[format_name]
    except (KeyError, TypeError):
        raise UnknownFormatError(str(format_name), sorted(FORMATS)) from None


def format_names() -> list[str]:
    """List registered format names."""
    return sorted(FORMATS)
