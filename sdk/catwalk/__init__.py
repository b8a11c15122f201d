"""
Catwalk - typed models defined at runtime.

Catwalk compiles a declarative property map into a model class:
- Attribute types, defaults and readonly attributes
- Checks run on construction and on every assignment
- Single inheritance with extend_as()
- Lossless round trip through plain data and JSON

Example:
    >>> from catwalk import define
    >>>
    >>> Person = define("Person", {
    ...     "name": {"type": str, "min_length": 3, "max_length": 12},
    ...     "age": {"type": int, "min": 18, "max": 85},
    ...     "email": {"type": str, "format": "email", "nullable": True},
    ... })
    >>> john = Person(name="John Doe", age=20, email="john@mail.com")
    >>> john.age = 90
    Traceback (most recent call last):
    ...
    catwalk.errors.ValidationError: Person: Attribute 'age' failed check 'max' for value 90

Invariants:
    - Schemas never change after define()
    - A stored value has passed its attribute's checks, or came from a
      custom setter
    - A failed construction never yields an instance

Version: 0.1.0
"""

__version__ = "0.1.0"

from .config import ModelConfig
from .errors import (
    CatwalkError,
    DataTypeError,
    DefinitionError,
    InvalidPatternError,
    MissingValueError,
    ParseError,
    UnknownAttributeError,
    UnknownFormatError,
    ValidationError,
)
from .formats import FORMATS, format_names
from .kinds import AttributeKind
from .model import Model, define
from .registry import (
    DuplicateRegistrationError,
    ModelRegistry,
    RegistryFrozenError,
    get_registry,
    register_model,
)
from .schema import NO_DEFAULT, AttributeDef, Schema, compile_schema

__all__ = [
    # Version
    "__version__",
    # Models
    "Model",
    "define",
    "ModelConfig",
    # Schema
    "Schema",
    "AttributeDef",
    "AttributeKind",
    "compile_schema",
    "NO_DEFAULT",
    # Formats
    "FORMATS",
    "format_names",
    # Registry
    "ModelRegistry",
    "get_registry",
    "register_model",
    "RegistryFrozenError",
    "DuplicateRegistrationError",
    # Errors
    "CatwalkError",
    "DefinitionError",
    "UnknownFormatError",
    "InvalidPatternError",
    "ValidationError",
    "MissingValueError",
    "UnknownAttributeError",
    "ParseError",
    "DataTypeError",
]
