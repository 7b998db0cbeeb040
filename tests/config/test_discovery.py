"""Tests for config discovery and loading."""

from pathlib import Path

import click
import pytest

from nbtmatch.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME, find_config, load_config
from nbtmatch.config.models import MatchConfig


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[output]\nindent = 4\n")
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[output]\nindent = 4\n")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[output]\nindent = 0\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert find_config(tmp_path / "elsewhere") == config_file

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "gone.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_loads_from_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('[registry]\npotions = ["glow"]\ndefault_namespace = "mymod"\n')
        cfg = load_config(config_file)
        assert cfg.registry.potions == ["glow"]
        assert cfg.registry.default_namespace == "mymod"
        assert cfg.output.indent == 2  # default

    def test_returns_defaults_when_no_file(self, tmp_path: Path) -> None:
        assert load_config(cwd=tmp_path) == MatchConfig()

    def test_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert load_config(config_file) == MatchConfig()

    def test_invalid_values_raise_click_exception(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[output]\nindent = 99\n")
        with pytest.raises(click.ClickException, match="Invalid config"):
            load_config(config_file)

    def test_invalid_toml_raises_click_exception(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[output\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            load_config(config_file)
