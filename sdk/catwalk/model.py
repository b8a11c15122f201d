"""
Model classes for Catwalk.

define() compiles a property map and synthesizes a Model subclass with
one accessor per attribute. Accessors are picked once per attribute:

- ValidatedAccessor: runs the compiled checks, then stores
- ReadonlyAccessor: ignores assignment
- CustomSetterAccessor: delegates to the declared setter

Example:
    >>> Car = define("Car", {
    ...     "brand": str,
    ...     "wheels": {"type": int, "default": 4},
    ... })
    >>> Car({"brand": "Civic"}).to_plain_data()
    {'brand': 'Civic', 'wheels': 4}
    >>> Roadster = Car.extend_as("Roadster", {"top_speed": {"type": int, "min": 0}})
    >>> Roadster.attribute_names
    ('brand', 'wheels', 'top_speed')
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from . import serialize
from .config import ConfigLike
from .errors import DataTypeError, DefinitionError, ValidationError
from .factory import build_values
from .registry import register_model
from .schema import AttributeDef, Schema, compile_schema
from .validators import describe_failure

logger = logging.getLogger(__name__)


class AttributeAccessor:
    """Descriptor reading one attribute from an instance's value store."""

    __slots__ = ("attribute", "model_name")

    def __init__(self, attribute: AttributeDef, model_name: str) -> None:
        self.attribute = attribute
        self.model_name = model_name

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance._values[self.attribute.name]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.model_name}.{self.attribute.name}>"


class ValidatedAccessor(AttributeAccessor):
    """Accessor that checks every assignment."""

    __slots__ = ()

    def __set__(self, instance: Any, value: Any) -> None:
        attribute = self.attribute
        failed = attribute.check(value)
        if failed is not None:
            model_name = type(instance).__name__
            raise ValidationError(
                f"{model_name}: "
                f"{describe_failure(attribute.name, attribute.declared_type, failed, value)}",
                model_name=model_name,
                field_name=attribute.name,
                value=value,
                check=failed,
            )
        instance._values[attribute.name] = value


class ReadonlyAccessor(AttributeAccessor):
    """Accessor whose assignments are ignored."""

    __slots__ = ()

    def __set__(self, instance: Any, value: Any) -> None:
        logger.debug(
            f"Ignored assignment to readonly attribute {type(instance).__name__}.{self.attribute.name}"
        )


class CustomSetterAccessor(AttributeAccessor):
    """Accessor that stores whatever the declared setter returns."""

    __slots__ = ()

    def __set__(self, instance: Any, value: Any) -> None:
        instance._values[self.attribute.name] = self.attribute.setter(instance, value)


def _accessor_for(attribute: AttributeDef, model_name: str) -> AttributeAccessor:
    if attribute.setter is not None:
        return CustomSetterAccessor(attribute, model_name)
    if attribute.readonly:
        return ReadonlyAccessor(attribute, model_name)
    return ValidatedAccessor(attribute, model_name)


class Model:
    """Base class of every defined model.

    Model itself has no schema and cannot be instantiated; use
    Model.define() or define() to create model classes.
    """

    __slots__ = ("_values",)
    __schema__: ClassVar[Optional[Schema]] = None
    attribute_names: ClassVar[tuple[str, ...]] = ()

    def __init__(self, data: Any = None, /, **values: Any) -> None:
        schema = type(self).__schema__
        if schema is None:
            raise DataTypeError("Model cannot be instantiated directly; create a model with define()")
        self._values = build_values(schema, data, values)

    @classmethod
    def create(cls, data: Any = None, /, **values: Any) -> Model:
        """Same as calling the model class."""
        return cls(data, **values)

    @classmethod
    def define(
        cls,
        name: str,
        properties: dict[str, Any],
        config: ConfigLike = None,
        *,
        register: bool = False,
    ) -> type[Model]:
        """Define a model; on a defined model this extends it."""
        parent = None if cls.__schema__ is None else cls
        return define(name, properties, config, parent=parent, register=register)

    @classmethod
    def extend_as(
        cls,
        name: str,
        properties: dict[str, Any],
        config: ConfigLike = None,
        *,
        register: bool = False,
    ) -> type[Model]:
        """Define a child model inheriting every attribute of this one."""
        if cls.__schema__ is None:
            raise DefinitionError("Only a defined model can be extended")
        return define(name, properties, config, parent=cls, register=register)

    @classmethod
    def has_attribute(cls, name: str) -> bool:
        return cls.__schema__ is not None and cls.__schema__.has_attribute(name)

    @classmethod
    def is_readonly(cls, name: str) -> bool:
        return cls.__schema__ is not None and cls.__schema__.is_readonly(name)

    @classmethod
    def is_valid_for(cls, name: str, value: Any) -> bool:
        return cls.__schema__ is not None and cls.__schema__.is_valid_for(name, value)

    @classmethod
    def from_plain_data(cls, data: Any) -> Model:
        """Rebuild an instance from a mapping or JSON text."""
        return serialize.from_plain_data(cls, data)

    @classmethod
    def from_json(cls, document: str | bytes) -> Model:
        """Rebuild an instance from JSON text."""
        if not isinstance(document, (str, bytes, bytearray)):
            raise DataTypeError(f"{cls.__name__}.from_json expects JSON text, got {type(document).__name__}")
        return serialize.from_plain_data(cls, document)

    def to_json(self, indent: Optional[int] = None) -> str:
        """Encode this instance as JSON text."""
        if indent is None:
            indent = self.__schema__.config.json_indent
        return serialize.to_json(self, indent=indent)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.__schema__ is None:
            return super().__repr__()
        values = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"{type(self).__name__}({values})"


def define(
    name: str,
    properties: dict[str, Any],
    config: ConfigLike = None,
    *,
    parent: Optional[type[Model]] = None,
    register: bool = False,
) -> type[Model]:
    """Define a model class from a property map.

    Args:
        name: Model name
        properties: Mapping of names to types, declarations or methods
        config: ModelConfig or mapping of config overrides
        parent: Defined model to inherit from
        register: Also register the model in the global registry

    Returns:
        New Model subclass

    Raises:
        DefinitionError: If the declaration is malformed

    Example:
        >>> Person = define("Person", {
        ...     "id": {"type": int, "readonly": True},
        ...     "age": {"type": int, "min": 18, "max": 85},
        ...     "birthday": lambda self: setattr(self, "age", self.age + 1),
        ... })
    """
    if parent is not None and not (
        isinstance(parent, type) and issubclass(parent, Model) and parent.__schema__ is not None
    ):
        raise DefinitionError(f"Parent of '{name}' must be a defined model, got {parent!r}")

    schema = compile_schema(parent.__schema__ if parent else None, name, properties, config)

    namespace: dict[str, Any] = {
        "__slots__": (),
        "__schema__": schema,
        "__doc__": schema.config.description or None,
        "attribute_names": schema.attribute_names,
    }
    for attribute_name, attribute in schema.own_attributes.items():
        namespace[attribute_name] = _accessor_for(attribute, name)
    namespace.update(schema.methods)

    model = type(name, (parent or Model,), namespace)
    if register:
        register_model(model)
    return model
