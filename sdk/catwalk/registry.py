"""
Model registry for Catwalk.

This module provides a registry of defined models for:
- Lookup by name (also used to resolve string type names)
- Schema fingerprinting

The registry can be frozen at startup to prevent runtime modifications.

Example:
    >>> from catwalk import define, get_registry
    >>>
    >>> Engine = define("Engine", {"power": int}, register=True)
    >>> Car = define("Car", {"engine": {"type": "Engine", "nullable": True}})
    >>> get_registry().get_model("Engine") is Engine
    True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections.abc import Iterator
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Global registry
_global_registry: Optional[ModelRegistry] = None
_registry_lock = threading.Lock()


class RegistryFrozenError(Exception):
    """Registry is frozen and cannot be modified."""

    pass


class DuplicateRegistrationError(Exception):
    """A model with this name is already registered."""

    pass


class ModelRegistry:
    """Registry of defined models.

    Example:
        >>> registry = ModelRegistry()
        >>> registry.register_model(Car)
        >>> registry.freeze()
        'sha256:...'
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._models: dict[str, type] = {}
        self._frozen = False
        self._fingerprint: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        """Whether registry is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> Optional[str]:
        """Schema fingerprint (available after freeze)."""
        return self._fingerprint

    def register_model(self, model: type) -> None:
        """Register a model.

        Args:
            model: Model class created by define()

        Raises:
            TypeError: If model has no compiled schema
            RegistryFrozenError: If registry is frozen
            DuplicateRegistrationError: If the name is already taken
        """
        schema = getattr(model, "__schema__", None)
        if schema is None:
            raise TypeError(f"Cannot register {model!r}: not a defined model")

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(f"Cannot register model '{schema.name}': registry is frozen")

            existing = self._models.get(schema.name)
            if existing is not None and existing is not model:
                raise DuplicateRegistrationError(f"Model name '{schema.name}' already registered")

            self._models[schema.name] = model
            logger.debug(f"Registered model: {schema.name}")

    def get_model(self, name: str) -> Optional[type]:
        """Get a model by name."""
        return self._models.get(name)

    def models(self) -> Iterator[type]:
        """Iterate over registered models."""
        yield from self._models.values()

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def freeze(self) -> str:
        """Freeze registry and compute fingerprint.

        Returns:
            Schema fingerprint

        Raises:
            RegistryFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            logger.info(
                f"Model registry frozen with {len(self._models)} models, "
                f"fingerprint={self._fingerprint}"
            )
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        hash_bytes = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{hash_bytes}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "models": [self._models[name].__schema__.to_dict() for name in sorted(self._models)],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)


def get_registry() -> ModelRegistry:
    """Get the global model registry."""
    global _global_registry
    with _registry_lock:
        if _global_registry is None:
            _global_registry = ModelRegistry()
        return _global_registry


def register_model(model: type) -> None:
    """Register a model in the global registry."""
    get_registry().register_model(model)


def reset_registry() -> None:
    """Reset the global registry (for testing only)."""
    global _global_registry
    with _registry_lock:
        _global_registry = None
