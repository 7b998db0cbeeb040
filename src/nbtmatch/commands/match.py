"""Commands: match instances against a condition, preview and normalize it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from nbtmatch.commands._base import MatchCommand

if TYPE_CHECKING:
    from nbtmatch.commands._context import AppContext


@click.command(
    cls=MatchCommand,
    examples="""\
  nbtmatch match condition.json stack.json
  nbtmatch match '{"require": {"Damage": "$..10"}}' '{"item": "minecraft:stick", "tag": {"Damage": 3}}'
  nbtmatch match condition.yaml stacks.yaml more_stacks.json
  nbtmatch --json match condition.json stacks.json
  nbtmatch -q match condition.json stacks.json""",
)
@click.argument("condition")
@click.argument("instances", nargs=-1, required=True)
@click.pass_obj
def match(app: AppContext, condition: str, instances: tuple[str, ...]) -> None:
    """Test item stacks against a condition.

    CONDITION and each INSTANCES argument are JSON/YAML, inline or as a
    file path. An instance document may hold one stack or a list of them.
    """
    document = app.load(condition)
    stacks: list[Any] = []
    for value in instances:
        loaded = app.load(value)
        if isinstance(loaded, list):
            stacks.extend(loaded)
        else:
            stacks.append(loaded)
    app.emit(app.service.check(document, stacks))


@click.command(
    cls=MatchCommand,
    examples="""\
  nbtmatch preview condition.json
  nbtmatch preview '{"require": {"Enchant": {"lvl": "$3..5"}}}'
  nbtmatch -q preview condition.json""",
)
@click.argument("condition")
@click.pass_obj
def preview(app: AppContext, condition: str) -> None:
    """Show an example tag that satisfies the condition's requirements."""
    app.emit(app.service.preview(app.load(condition)))


@click.command(
    cls=MatchCommand,
    examples="""\
  nbtmatch normalize condition.json
  nbtmatch normalize '{"potion": "swiftness"}'
  nbtmatch --json normalize '{"Damage": 0}'""",
)
@click.argument("condition")
@click.pass_obj
def normalize(app: AppContext, condition: str) -> None:
    """Print the canonical form of a condition document."""
    app.emit(app.service.normalize(app.load(condition)))
