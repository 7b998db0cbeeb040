"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, nbtmatch.toml only contains
overrides. An absent file is equivalent to an empty one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from nbtmatch.domain.identifiers import DEFAULT_NAMESPACE, NAMESPACE_PATTERN
from nbtmatch.infrastructure.registry import VANILLA_POTIONS


class RegistryConfig(BaseModel):
    """[registry] section — identifiers the ``potion`` shorthand accepts."""

    model_config = {"frozen": True}

    potions: list[str] = Field(default_factory=lambda: list(VANILLA_POTIONS))
    default_namespace: str = DEFAULT_NAMESPACE

    @field_validator("default_namespace")
    @classmethod
    def _check_namespace(cls, value: str) -> str:
        if not NAMESPACE_PATTERN.match(value):
            msg = f"Invalid namespace {value!r}"
            raise ValueError(msg)
        return value


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    indent: int = Field(default=2, ge=0, le=8)


class MatchConfig(BaseModel):
    """Root model for a whole nbtmatch.toml file."""

    model_config = {"frozen": True}

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
