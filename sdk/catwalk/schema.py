"""
Schema compiler for Catwalk.

This module turns a declarative property map into a compiled Schema:
- AttributeDef: One attribute with its type, default and compiled checks
- Schema: All attributes (own and inherited), methods and config
- compile_schema: The compiler itself

A Schema is built once by define() and never changes afterwards. Child
schemas keep a reference to their parent and list its attribute names
first.

Invariants:
    - Every attribute has exactly one declared type
    - The kind of an attribute is derived once, at compile time
    - attribute_names is parent names followed by own names
    - Methods are never attributes

Example:
    >>> schema = compile_schema(None, "Car", {
    ...     "brand": str,
    ...     "wheels": {"type": int, "default": 4},
    ... })
    >>> schema.attribute_names
    ('brand', 'wheels')
"""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional

from .config import ConfigLike, ModelConfig, resolve_config
from .errors import DefinitionError
from .kinds import TYPE_NAMES, AttributeKind, type_name
from .registry import get_registry
from .serialize import to_plain_data
from .validators import (
    NUMBER_CONSTRAINTS,
    STRING_CONSTRAINTS,
    Checks,
    compile_checks,
    first_failure,
    suggest_names,
)

logger = logging.getLogger(__name__)

# Names taken by the model API
RESERVED_NAMES = frozenset(
    {
        "attribute_names",
        "create",
        "define",
        "extend_as",
        "from_json",
        "from_plain_data",
        "has_attribute",
        "is_readonly",
        "is_valid_for",
        "to_json",
        "to_plain_data",
    }
)

# Reserved names a property map may supply as its own methods
OVERRIDABLE_METHODS = frozenset({"to_json", "to_plain_data"})

CONSTRAINT_KEYS = NUMBER_CONSTRAINTS + STRING_CONSTRAINTS
DECLARATION_KEYS = frozenset(
    {"type", "default", "readonly", "nullable", "set", "description", *CONSTRAINT_KEYS}
)

_KEY_ALIASES = {"minLength": "min_length", "maxLength": "max_length"}
_DEPRECATED_KEYS = {"matches": "match"}


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class AttributeDef:
    """Compiled definition of a single attribute.

    Attributes:
        name: Attribute name
        declared_type: Resolved type (bool, str, int, float, re.Pattern, a model, ...)
        kind: Primitive kind derived from declared_type
        readonly: Whether assignment after construction is ignored
        nullable: Whether None is accepted (complex and pattern types)
        default: Static default, producer callable, or NO_DEFAULT
        setter: Custom setter replacing validation on assignment
        checks: Compiled checks, type check first
        constraints: Constraint options as declared
        description: Documentation
    """

    name: str
    declared_type: type
    kind: AttributeKind
    readonly: bool = False
    nullable: bool = False
    default: Any = NO_DEFAULT
    setter: Optional[Callable[[Any, Any], Any]] = None
    checks: Checks = ()
    constraints: Mapping[str, Any] = dataclass_field(default_factory=dict)
    description: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def default_is_producer(self) -> bool:
        return self.has_default and callable(self.default)

    @property
    def nested_model(self) -> Optional[type]:
        """Declared type if it is itself a defined model."""
        if isinstance(getattr(self.declared_type, "__schema__", None), Schema):
            return self.declared_type
        return None

    def make_default(self) -> Any:
        """Produce the default value; producers are called once per call."""
        if self.default_is_producer:
            return self.default()
        return self.default

    def check(self, value: Any) -> Optional[str]:
        """Return the name of the first failing check, or None."""
        return first_failure(self.checks, value)

    def is_valid(self, value: Any) -> bool:
        return self.check(value) is None

    def is_zero_fallback(self, value: Any) -> bool:
        """Whether value is the unchecked zero value construction fills in.

        from_plain_data treats such values as absent.
        """
        if self.has_default or self.readonly:
            return False
        zero = self.kind.zero_value
        return type(value) is type(zero) and value == zero and not self.is_valid(value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": type_name(self.declared_type),
            "kind": self.kind.value,
        }
        if self.readonly:
            result["readonly"] = True
        if self.nullable:
            result["nullable"] = True
        if self.default_is_producer:
            result["default_factory"] = getattr(self.default, "__qualname__", repr(self.default))
        elif self.has_default:
            result["default"] = _describe_value(self.default)
        if self.setter is not None:
            result["setter"] = getattr(self.setter, "__qualname__", repr(self.setter))
        for key, value in self.constraints.items():
            result[key] = _describe_value(value)
        if self.description:
            result["description"] = self.description
        return result


@dataclass(frozen=True, eq=False)
class Schema:
    """Compiled descriptor of one model.

    Attributes:
        name: Model name
        parent: Parent schema (shared, not owned)
        own_attributes: Attributes declared by this schema
        attributes: Effective attributes, inherited first; a redeclared
            name keeps its inherited position
        methods: Methods declared by this schema
        attribute_names: Parent names followed by own names
        config: Effective model config
    """

    name: str
    parent: Optional[Schema]
    own_attributes: Mapping[str, AttributeDef]
    attributes: Mapping[str, AttributeDef]
    methods: Mapping[str, Any]
    attribute_names: tuple[str, ...]
    config: ModelConfig

    def ancestors(self) -> Iterator[Schema]:
        """Iterate over parent schemas, nearest first."""
        schema = self.parent
        while schema is not None:
            yield schema
            schema = schema.parent

    def get_attribute(self, name: str) -> Optional[AttributeDef]:
        if not isinstance(name, str):
            return None
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None

    def is_readonly(self, name: str) -> bool:
        """Whether an attribute is readonly; False for unknown names."""
        attribute = self.get_attribute(name)
        return attribute is not None and attribute.readonly

    def check(self, name: str, value: Any) -> Optional[str]:
        """Name of the first check the value fails, or None.

        Unknown attribute names fail with the pseudo-check "attribute".
        """
        attribute = self.get_attribute(name)
        if attribute is None:
            return "attribute"
        return attribute.check(value)

    def is_valid_for(self, name: str, value: Any) -> bool:
        """Whether value passes every check of the named attribute."""
        return self.check(name, value) is None

    def extend(self, name: str, properties: Mapping[str, Any], config: ConfigLike = None) -> Schema:
        """Compile a child schema with this one as parent."""
        return compile_schema(self, name, properties, config)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "name": self.name,
            "parent": self.parent.name if self.parent else None,
            "attributes": [a.to_dict() for a in self.own_attributes.values()],
            "methods": sorted(self.methods),
            "attribute_names": list(self.attribute_names),
        }
        if self.config.strict:
            result["strict"] = True
        if self.config.description:
            result["description"] = self.config.description
        return result


def compile_schema(
    parent: Optional[Schema],
    name: str,
    properties: Mapping[str, Any],
    config: ConfigLike = None,
) -> Schema:
    """Compile a property map into a Schema.

    Args:
        parent: Parent schema, or None for a root model
        name: Model name
        properties: Mapping of attribute or method name to declaration
        config: Model config or overrides of the parent's config

    Returns:
        Compiled Schema

    Raises:
        DefinitionError: If any entry is malformed
    """
    if not isinstance(name, str) or not name:
        raise DefinitionError("Model name must be a non-empty string")
    if not isinstance(properties, Mapping):
        raise DefinitionError(
            f"Properties of '{name}' must be a mapping, got {type(properties).__name__}",
            model_name=name,
        )

    effective_config = resolve_config(config, parent.config if parent else None)
    own: dict[str, AttributeDef] = {}
    methods: dict[str, Any] = {}

    for key, entry in properties.items():
        _check_name(name, key)
        if _is_method(entry):
            if key in RESERVED_NAMES and key not in OVERRIDABLE_METHODS:
                raise DefinitionError(
                    f"'{key}' is reserved and cannot be redefined on '{name}'",
                    model_name=name,
                    field_name=key,
                )
            if parent is not None and parent.has_attribute(key):
                raise DefinitionError(
                    f"Method '{key}' of '{name}' would hide the inherited attribute '{key}'",
                    model_name=name,
                    field_name=key,
                )
            methods[key] = entry
            continue

        if key in RESERVED_NAMES:
            raise DefinitionError(
                f"'{key}' is reserved and cannot be an attribute of '{name}'",
                model_name=name,
                field_name=key,
            )
        try:
            own[key] = _compile_attribute(key, _normalize(entry))
        except DefinitionError as e:
            e.locate(name, key)
            raise

    if parent is None and "to_plain_data" not in methods:
        methods["to_plain_data"] = to_plain_data

    attributes = dict(parent.attributes) if parent else {}
    attributes.update(own)
    attribute_names = (parent.attribute_names if parent else ()) + tuple(own)

    schema = Schema(
        name=name,
        parent=parent,
        own_attributes=MappingProxyType(own),
        attributes=MappingProxyType(attributes),
        methods=MappingProxyType(methods),
        attribute_names=attribute_names,
        config=effective_config,
    )
    logger.debug(
        f"Compiled schema '{name}' with {len(own)} own attributes, {len(methods)} methods"
        + (f", parent '{parent.name}'" if parent else "")
    )
    return schema


def _check_name(model_name: str, key: Any) -> None:
    if not isinstance(key, str) or not key.isidentifier() or keyword.iskeyword(key):
        raise DefinitionError(
            f"Property name {key!r} of '{model_name}' is not a valid identifier",
            model_name=model_name,
        )
    if key.startswith("_"):
        raise DefinitionError(
            f"Property name '{key}' of '{model_name}' must not start with an underscore",
            model_name=model_name,
            field_name=key,
        )


def _is_method(entry: Any) -> bool:
    if isinstance(entry, type):
        return False
    return callable(entry) or isinstance(entry, (staticmethod, classmethod))


def _normalize(entry: Any) -> dict[str, Any]:
    """Turn a shorthand or full declaration into a declaration dict."""
    if isinstance(entry, (type, str)):
        return {"type": entry}
    if not isinstance(entry, Mapping):
        raise DefinitionError(
            f"Declaration must be a type, a mapping with 'type', or a method; "
            f"got {type(entry).__name__}"
        )

    declaration: dict[str, Any] = {}
    for key, value in entry.items():
        if key in _DEPRECATED_KEYS:
            logger.warning(f"Declaration key '{key}' is deprecated, use '{_DEPRECATED_KEYS[key]}'")
            key = _DEPRECATED_KEYS[key]
        key = _KEY_ALIASES.get(key, key)

        if key not in DECLARATION_KEYS:
            suggestions = suggest_names(str(key), sorted(DECLARATION_KEYS))
            msg = f"Unknown declaration key '{key}'"
            if suggestions:
                msg += f". Did you mean: {', '.join(suggestions)}?"
            raise DefinitionError(msg)
        if key in declaration:
            raise DefinitionError(f"Declaration key '{key}' given more than once")
        declaration[key] = value

    if "type" not in declaration:
        raise DefinitionError("Declaration is missing 'type'")
    return declaration


def _resolve_type(declared: Any) -> type:
    if isinstance(declared, str):
        if declared in TYPE_NAMES:
            return TYPE_NAMES[declared]
        model = get_registry().get_model(declared)
        if model is None:
            raise DefinitionError(f"Unknown type name '{declared}'")
        return model
    if not isinstance(declared, type):
        raise DefinitionError(f"'type' must be a class or type name, got {declared!r}")
    return declared


def _compile_attribute(name: str, declaration: Mapping[str, Any]) -> AttributeDef:
    declared_type = _resolve_type(declaration["type"])
    kind = AttributeKind.of(declared_type)
    readonly = bool(declaration.get("readonly", False))
    nullable = bool(declaration.get("nullable", False))

    setter = declaration.get("set")
    if setter is not None and not callable(setter):
        raise DefinitionError(f"'set' must be callable, got {type(setter).__name__}")

    constraints = {k: declaration[k] for k in CONSTRAINT_KEYS if declaration.get(k) is not None}
    checks = compile_checks(
        declared_type,
        kind,
        constraints,
        nullable=nullable,
        readonly=readonly,
    )

    return AttributeDef(
        name=name,
        declared_type=declared_type,
        kind=kind,
        readonly=readonly,
        nullable=nullable,
        default=declaration.get("default", NO_DEFAULT),
        setter=setter,
        checks=checks,
        constraints=MappingProxyType(constraints),
        description=str(declaration.get("description", "")),
    )


def _describe_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    pattern = getattr(value, "pattern", None)
    if isinstance(pattern, str):
        return pattern
    return repr(value)
