"""
Per-model configuration for Catwalk.

Configuration is passed explicitly to define() / extend_as(); nothing is
read from the environment.

Invariants:
    - Config objects are frozen once a model is defined
    - A child model inherits its parent's config unless it overrides keys

Example:
    >>> Point = define("Point", {"x": int}, config={"strict": True})
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import DefinitionError


class ModelConfig(BaseModel):
    """Model-level options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strict: bool = Field(
        default=False,
        description="Reject unknown keys in construction data instead of ignoring them",
    )
    json_indent: Optional[int] = Field(default=None, ge=0, description="Indentation for to_json()")
    description: str = Field(default="")


ConfigLike = Union[ModelConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike, parent: Optional[ModelConfig] = None) -> ModelConfig:
    """Build the effective config for a model.

    Args:
        config: ModelConfig, mapping of overrides, or None
        parent: Parent model's config, if any

    Returns:
        Frozen ModelConfig

    Raises:
        DefinitionError: If the config is malformed
    """
    base = parent or ModelConfig()
    if config is None:
        return base
    if isinstance(config, ModelConfig):
        return config
    if not isinstance(config, Mapping):
        raise DefinitionError(f"config must be a mapping or ModelConfig, got {type(config).__name__}")

    try:
        return ModelConfig.model_validate({**base.model_dump(), **config})
    except PydanticValidationError as e:
        raise DefinitionError(f"Invalid model config: {e}") from e
