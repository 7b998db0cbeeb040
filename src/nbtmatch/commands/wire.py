"""Command group: binary wire form of conditions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nbtmatch.commands._base import MatchGroup

if TYPE_CHECKING:
    from nbtmatch.commands._context import AppContext

_WIRE_EXAMPLES = """\
  nbtmatch wire encode condition.json
  nbtmatch wire decode 0a0000000a000000"""


@click.group(cls=MatchGroup, examples=_WIRE_EXAMPLES)
@click.pass_obj
def wire(app: AppContext) -> None:
    """Encode and decode the binary form of a condition."""


@wire.command(
    examples="""\
  nbtmatch wire encode condition.json
  nbtmatch -q wire encode '{"require": {"Damage": 0}}'"""
)
@click.argument("condition")
@click.pass_obj
def encode(app: AppContext, condition: str) -> None:
    """Encode CONDITION's require/deny trees as hex."""
    app.emit(app.service.encode(app.load(condition)))


@wire.command(
    examples="""\
  nbtmatch wire decode 0a0000000a000000
  nbtmatch --json wire decode "$(nbtmatch -q wire encode condition.json)\""""
)
@click.argument("data")
@click.pass_obj
def decode(app: AppContext, data: str) -> None:
    """Decode a hex wire blob back into a condition document."""
    app.emit(app.service.decode(data))
