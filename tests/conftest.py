"""Shared pytest fixtures for nbtmatch tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from nbtmatch.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolate_cli_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Undo the global side effects of a CLI invocation.

    The root group configures logging handlers and may enable telemetry;
    neither may leak into the next test. Config discovery is pinned away
    from any ``nbtmatch.toml`` on the developer's machine.
    """
    monkeypatch.delenv("NBTMATCH_CONFIG", raising=False)
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    pkg_level = logging.getLogger("nbtmatch").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("nbtmatch").setLevel(pkg_level)
    disable_telemetry()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the CLI from an empty temp directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def sword_condition() -> dict[str, Any]:
    """Undamaged, uncursed sword with a bounded count."""
    return {
        "require": {"Damage": 0},
        "deny": {"Cursed": True},
        "conditions": ["$.Count == $1..16"],
    }


@pytest.fixture
def sword_stacks() -> list[dict[str, Any]]:
    return [
        {"item": "minecraft:diamond_sword", "tag": {"Damage": 0, "Count": 1}},
        {"item": "minecraft:diamond_sword", "tag": {"Damage": 0, "Count": 1, "Cursed": True}},
        {"item": "minecraft:diamond_sword", "tag": {"Damage": 4, "Count": 1}},
        {"item": "minecraft:stick"},
    ]


@pytest.fixture
def write_json() -> Callable[[Path, Any], str]:
    """Write a document as JSON and return its path as a CLI argument."""

    def _write(path: Path, data: Any) -> str:
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write
