"""
Error types for Catwalk.

This module defines all exception types raised by the library:
- CatwalkError: Base exception
- DefinitionError: Malformed model declaration
- ValidationError: A value failed an attribute's checks
- MissingValueError: A readonly attribute got no value
- UnknownAttributeError: Unknown key in strict construction data
- ParseError: Malformed encoded input
- DataTypeError: Wrong argument shape

Invariants:
    - All errors inherit from CatwalkError
    - Definition errors surface at define time, never at construction
    - Errors include context for debugging
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class CatwalkError(Exception):
    """Base exception for all Catwalk errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "CATWALK_ERROR"
        self.details = details or {}


class DefinitionError(CatwalkError, ValueError):
    """Model declaration is malformed.

    Raised when:
    - A property entry is not a type, declaration or method
    - A declaration has no type or an unknown key
    - A constraint does not apply to the attribute's kind
    """

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="DEFINITION_ERROR",
            details={"model": model_name, "field": field_name},
        )
        self.model_name = model_name
        self.field_name = field_name

    def locate(self, model_name: str, field_name: str) -> DefinitionError:
        """Attach the model and attribute the error was raised for."""
        self.model_name = model_name
        self.field_name = field_name
        self.details.update({"model": model_name, "field": field_name})
        self.message = f"{model_name}.{field_name}: {self.message}"
        self.args = (self.message,)
        return self


class UnknownFormatError(DefinitionError):
    """Format name is not in the format registry."""

    def __init__(self, format_name: str, known: Optional[List[str]] = None) -> None:
        msg = f"Unknown format '{format_name}'"
        if known:
            msg += f". Known formats: {', '.join(known)}"
        super().__init__(msg)
        self.format_name = format_name


class InvalidPatternError(DefinitionError):
    """A match constraint cannot be turned into a compiled pattern."""

    def __init__(self, message: str, pattern: Any = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class ValidationError(CatwalkError, ValueError):
    """A value failed an attribute's compiled checks.

    Raised on construction and on assignment. The instance keeps its
    previous value when an assignment fails.
    """

    code_name = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        field_name: Optional[str] = None,
        value: Any = None,
        check: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code=self.code_name,
            details={"model": model_name, "field": field_name, "check": check},
        )
        self.model_name = model_name
        self.field_name = field_name
        self.value = value
        self.check = check


class MissingValueError(ValidationError):
    """Readonly attribute has neither a supplied value nor a default."""

    code_name = "MISSING_VALUE"

    def __init__(self, model_name: str, field_name: str) -> None:
        super().__init__(
            f"Readonly attribute '{field_name}' of '{model_name}' requires a value",
            model_name=model_name,
            field_name=field_name,
            check="readonly",
        )


class UnknownAttributeError(ValidationError):
    """Unknown key in data given to a strict model.

    Attributes:
        field_name: The unknown key
        model_name: The model being constructed
        suggestions: Similar attribute names
    """

    code_name = "UNKNOWN_ATTRIBUTE"

    def __init__(
        self,
        field_name: str,
        model_name: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        suggestions = suggestions or []
        msg = f"Unknown attribute '{field_name}' in model '{model_name}'"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(msg, model_name=model_name, field_name=field_name)
        self.suggestions = suggestions
        self.details["suggestions"] = suggestions


class ParseError(CatwalkError, ValueError):
    """Encoded input could not be decoded."""

    def __init__(self, message: str, document: Optional[str] = None) -> None:
        super().__init__(message, code="PARSE_ERROR", details={"document": document})
        self.document = document


class DataTypeError(CatwalkError, TypeError):
    """Argument has the wrong shape.

    Raised when:
    - Construction data is not a mapping
    - Decoded input is not an object
    - A raw value in plain data does not fit its attribute
    """

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message, code="DATA_TYPE_ERROR", details={"field": field_name})
        self.field_name = field_name
