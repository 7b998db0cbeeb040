"""MatchSettings: one frozen object for everything a command may consult.

Sources, strongest first:

1. keyword arguments (the CLI's global flags),
2. ``NBTMATCH_*`` environment variables (``__`` separates nested keys),
3. the ``nbtmatch.toml`` in effect (see :mod:`nbtmatch.config.discovery`),
4. defaults from :mod:`nbtmatch.config.models`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from nbtmatch.config.discovery import find_config, load_config
from nbtmatch.config.models import OutputConfig, RegistryConfig
from nbtmatch.infrastructure.registry import StaticRegistry

# pydantic-settings builds sources from a classmethod, so the file chosen by
# ``from_cli`` is handed over through thread-local state.
_pending = threading.local()


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Overrides from a validated ``nbtmatch.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._overrides: dict[str, Any] = (
            load_config(toml_path).model_dump(exclude_unset=True) if toml_path else {}
        )

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._overrides.get(field_name), field_name, field_name in self._overrides

    def __call__(self) -> dict[str, Any]:
        return dict(self._overrides)


class MatchSettings(BaseSettings):
    """Resolved configuration for one CLI invocation.

    Attributes:
        config_path: The TOML file that contributed values, if any.
        registry: Identifiers accepted by the ``potion`` shorthand.
        output: Rendering options.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "NBTMATCH_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None))
        return init_settings, env_settings, toml

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        search_root: Path | None = None,
        **flags: Any,
    ) -> MatchSettings:
        """Build settings for a command line.

        An explicit *config_path* that does not exist means "no file";
        without one, ``nbtmatch.toml`` is discovered from *search_root*.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(search_root)

        _pending.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **flags)
        finally:
            _pending.toml_path = None

    def build_registry(self) -> StaticRegistry:
        """Potion registry for the ``potion`` shorthand."""
        return StaticRegistry(self.registry.potions, self.registry.default_namespace)
