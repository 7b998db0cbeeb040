"""Tests for the wire command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from nbtmatch.cli import cli

EMPTY_HEX = "0a0000000a000000"


@pytest.mark.usefixtures("workdir")
class TestWireEncode:
    def test_empty_condition(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "wire", "encode", '{"require": {}}'])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == EMPTY_HEX

    def test_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["wire", "encode", '{"require": {}}'])
        assert "size: 8 bytes" in result.stdout

    def test_predicates_dropped_warning(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["wire", "encode", '{"conditions": ["$.a"]}'])
        assert result.exit_code == 0
        assert "not carried by the binary form" in result.stderr


@pytest.mark.usefixtures("workdir")
class TestWireDecode:
    def test_empty(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "wire", "decode", EMPTY_HEX])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["condition"] == {}

    def test_round_trip(self, cli_runner: CliRunner) -> None:
        document = {"require": {"Damage": 0, "display": {"Name": "x"}}, "deny": {"Cursed": 1}}
        encoded = cli_runner.invoke(cli, ["-q", "wire", "encode", json.dumps(document)])
        assert encoded.exit_code == 0, encoded.output
        decoded = cli_runner.invoke(cli, ["--json", "wire", "decode", encoded.stdout.strip()])
        assert decoded.exit_code == 0, decoded.output
        assert json.loads(decoded.stdout)["data"]["condition"] == document

    def test_bad_hex(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["wire", "decode", "xyz"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
        assert "decode" in result.stderr

    def test_truncated(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "wire", "decode", "0a00"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_WIRE"
