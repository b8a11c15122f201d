"""
Check compilation for Catwalk attributes.

Turns one attribute declaration into an ordered tuple of checks. Checks
run in order and the first failing one rejects the value; errors are
never accumulated.

Order:
    1. type
    2. min, max (numbers)
    3. min_length, max_length, format, match (strings)

Invariants:
    - Checks are built once per attribute at define time
    - The type check is always first
    - Readonly attributes only carry the type check
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, Callable, Mapping, Optional, Tuple

from . import formats
from .errors import DataTypeError, DefinitionError, InvalidPatternError
from .kinds import AttributeKind, type_name

NUMBER_CONSTRAINTS = ("min", "max")
STRING_CONSTRAINTS = ("min_length", "max_length", "format", "match")

_LITERAL = re.compile(r"/(?P<body>.*)/(?P<flags>[A-Za-z]*)", re.DOTALL)

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    # global, unicode and sticky have no meaning for a single search
    "g": 0,
    "u": 0,
    "y": 0,
}

# UNICODE is implied for str patterns
_RENDERABLE_FLAGS = int(re.IGNORECASE | re.MULTILINE | re.DOTALL | re.UNICODE)


@dataclass(frozen=True)
class Check:
    """A named predicate over one attribute value."""

    name: str
    predicate: Callable[[Any], bool]

    def __call__(self, value: Any) -> bool:
        return bool(self.predicate(value))


Checks = Tuple[Check, ...]


def compile_checks(
    declared_type: type,
    kind: AttributeKind,
    constraints: Mapping[str, Any],
    *,
    nullable: bool = False,
    readonly: bool = False,
) -> Checks:
    """Compile the checks for one attribute.

    Args:
        declared_type: Resolved declared type
        kind: Primitive kind of the declared type
        constraints: Constraint options (min, max, min_length, ...)
        nullable: Accept None for complex and pattern types
        readonly: Only keep the type check

    Returns:
        Ordered tuple of checks

    Raises:
        DefinitionError: If a constraint does not fit the kind or is malformed
        UnknownFormatError: If the format name is not registered
        InvalidPatternError: If match cannot be parsed
    """
    _check_applicable(kind, constraints)

    checks = [type_check(declared_type, kind, nullable)]
    if kind is AttributeKind.NUMBER:
        checks.extend(_number_checks(constraints))
    elif kind is AttributeKind.STRING:
        checks.extend(_string_checks(constraints))

    if readonly:
        return (checks[0],)
    return tuple(checks)


def type_check(declared_type: type, kind: AttributeKind, nullable: bool = False) -> Check:
    """Build the type check for a declared type."""
    if declared_type is re.Pattern:
        accepted: tuple = (str, re.Pattern)
        return Check("type", lambda v: isinstance(v, accepted) or (nullable and v is None))

    if kind is AttributeKind.BOOLEAN:
        return Check("type", lambda v: isinstance(v, bool))
    if kind is AttributeKind.STRING:
        return Check("type", lambda v: isinstance(v, str))
    if kind is AttributeKind.NUMBER:
        numeric = (int,) if declared_type is int else (int, float)
        return Check("type", lambda v: isinstance(v, numeric) and not isinstance(v, bool))

    if nullable:
        return Check("type", lambda v: v is None or isinstance(v, declared_type))
    return Check("type", lambda v: isinstance(v, declared_type))


def _check_applicable(kind: AttributeKind, constraints: Mapping[str, Any]) -> None:
    allowed: tuple = ()
    if kind is AttributeKind.NUMBER:
        allowed = NUMBER_CONSTRAINTS
    elif kind is AttributeKind.STRING:
        allowed = STRING_CONSTRAINTS

    for key, value in constraints.items():
        if value is not None and key not in allowed:
            raise DefinitionError(f"Constraint '{key}' does not apply to {kind.value} attributes")


def _number_checks(constraints: Mapping[str, Any]) -> list[Check]:
    checks = []
    low = _bound(constraints, "min")
    high = _bound(constraints, "max")
    # zero bounds add no check
    if low:
        checks.append(Check("min", lambda v: v >= low))
    if high:
        checks.append(Check("max", lambda v: v <= high))
    return checks


def _string_checks(constraints: Mapping[str, Any]) -> list[Check]:
    checks = []
    shortest = _length(constraints, "min_length")
    longest = _length(constraints, "max_length")
    if shortest is not None:
        checks.append(Check("min_length", lambda v: len(v) >= shortest))
    if longest is not None:
        checks.append(Check("max_length", lambda v: len(v) <= longest))

    format_name = constraints.get("format")
    if format_name is not None:
        fmt = formats.lookup(format_name)
        checks.append(Check(f"format:{format_name}", lambda v: fmt.fullmatch(v) is not None))

    if constraints.get("match") is not None:
        pattern = parse_pattern(constraints["match"])
        checks.append(Check("match", lambda v: pattern.search(v) is not None))
    return checks


def _bound(constraints: Mapping[str, Any], key: str) -> Optional[float]:
    value = constraints.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DefinitionError(f"'{key}' must be a number, got {type(value).__name__}")
    return value


def _length(constraints: Mapping[str, Any], key: str) -> Optional[int]:
    value = constraints.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DefinitionError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def parse_pattern(value: Any) -> re.Pattern:
    """Turn a match constraint into a compiled pattern.

    Args:
        value: Compiled pattern, or a string of the form "/body/flags"

    Returns:
        Compiled pattern

    Raises:
        InvalidPatternError: If the value cannot be parsed or compiled

    Example:
        >>> parse_pattern("/^ab+c$/i").flags & re.IGNORECASE
        2
    """
    if isinstance(value, re.Pattern):
        return value
    if not isinstance(value, str):
        raise InvalidPatternError(
            f"Pattern must be a string or compiled pattern, got {type(value).__name__}",
            pattern=value,
        )

    literal = _LITERAL.fullmatch(value)
    if literal is None:
        raise InvalidPatternError(f"Pattern '{value}' is not of the form /body/flags", pattern=value)

    flags = 0
    for letter in literal.group("flags"):
        if letter not in _FLAGS:
            raise InvalidPatternError(f"Unsupported pattern flag '{letter}' in '{value}'", pattern=value)
        flags |= _FLAGS[letter]

    try:
        return re.compile(literal.group("body"), flags)
    except re.error as e:
        raise InvalidPatternError(f"Pattern '{value}' does not compile: {e}", pattern=value) from e


def pattern_literal(pattern: re.Pattern) -> str:
    """Render a compiled pattern in "/body/flags" form.

    Raises:
        DataTypeError: If the pattern is a bytes pattern or carries flags
            other than i, m and s
    """
    if not isinstance(pattern.pattern, str) or pattern.flags & ~_RENDERABLE_FLAGS:
        raise DataTypeError(f"Pattern {pattern.pattern!r} cannot be written as /body/flags")
    letters = "".join(
        letter for letter, flag in (("i", re.IGNORECASE), ("m", re.MULTILINE), ("s", re.DOTALL))
        if pattern.flags & flag
    )
    return f"/{pattern.pattern}/{letters}"


def first_failure(checks: Checks, value: Any) -> Optional[str]:
    """Run checks in order.

    Returns the name of the first failing check, or None if all pass.
    """
    for check in checks:
        if not check(value):
            return check.name
    return None


def describe_failure(field_name: str, declared_type: type, check: str, value: Any) -> str:
    """Build an actionable message for a failed check."""
    if check == "type":
        return (
            f"Attribute '{field_name}' must be of type {type_name(declared_type)}, "
            f"got {type(value).__name__}"
        )
    return f"Attribute '{field_name}' failed check '{check}' for value {value!r}"


def suggest_names(name: str, known: list[str], limit: int = 3) -> list[str]:
    """Suggest similar attribute names for a misspelt one."""
    matches = get_close_matches(name, known, n=limit)
    prefix_matches = [k for k in known if k.lower().startswith(name.lower()[:3])] if len(name) >= 3 else []
    return list(dict.fromkeys(matches + prefix_matches))[:limit]
