"""Tests for the --examples flag on commands and groups."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from nbtmatch.cli import cli


@pytest.mark.parametrize(
    "args",
    [
        ["match"],
        ["preview"],
        ["normalize"],
        ["expr"],
        ["expr", "parse"],
        ["expr", "eval"],
        ["wire"],
        ["wire", "encode"],
        ["wire", "decode"],
    ],
)
def test_examples_flag(cli_runner: CliRunner, args: list[str]) -> None:
    result = cli_runner.invoke(cli, [*args, "--examples"])
    assert result.exit_code == 0, result.output
    assert "Examples for 'cli " + " ".join(args) + "'" in result.output
    assert "nbtmatch" in result.output


def test_examples_listed_in_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["match", "--help"])
    assert "--examples" in result.output


def test_root_examples(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--examples"])
    assert result.exit_code == 0
    assert "Examples for 'cli'" in result.output
    assert "nbtmatch match" in result.output
