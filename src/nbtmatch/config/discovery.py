"""Locating and reading ``nbtmatch.toml``.

Lookup order: the ``NBTMATCH_CONFIG`` env var, then the nearest
``nbtmatch.toml`` in the working directory or any parent. ``--config`` on the
command line bypasses both (see ``MatchSettings.from_cli``).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from nbtmatch.config.models import MatchConfig

CONFIG_FILENAME = "nbtmatch.toml"
CONFIG_ENV_VAR = "NBTMATCH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd), if any.

    A ``NBTMATCH_CONFIG`` pointing at a missing file disables discovery.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        candidate = Path(override)
        return candidate if candidate.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for folder in (directory, *directory.parents):
        candidate = folder / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML.

    Raises:
        click.ClickException: The file is not valid TOML.
    """
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> MatchConfig:
    """Read and validate the config file, falling back to defaults.

    Only the keys present in the file are marked as set on the result, so
    ``model_dump(exclude_unset=True)`` yields exactly the overrides.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return MatchConfig()
    try:
        return MatchConfig.model_validate(read_config_file(path))
    except ValidationError as exc:
        msg = f"Invalid config in {path}: {exc}"
        raise click.ClickException(msg) from exc
