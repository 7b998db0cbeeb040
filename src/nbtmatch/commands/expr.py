"""Command group: dollar expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from nbtmatch.commands._base import MatchGroup

if TYPE_CHECKING:
    from nbtmatch.commands._context import AppContext

_EXPR_EXAMPLES = """\
  nbtmatch expr parse '$.Damage < 10 && $.Unbreakable == 1'
  nbtmatch expr eval '$.display.Name == "Excalibur"' '{"display": {"Name": "Excalibur"}}'"""


@click.group(cls=MatchGroup, examples=_EXPR_EXAMPLES)
@click.pass_obj
def expr(app: AppContext) -> None:
    """Parse and evaluate dollar expressions."""


@expr.command(
    examples="""\
  nbtmatch expr parse '$1..5'
  nbtmatch expr parse '!($.a == 1 || $.b == 2)'
  nbtmatch --json expr parse '$.list[0].id == "x"'"""
)
@click.argument("expression")
@click.pass_obj
def parse(app: AppContext, expression: str) -> None:
    """Show the canonical source and syntax tree of EXPRESSION."""
    app.emit(app.service.parse_expression(expression))


@expr.command(
    name="eval",
    examples="""\
  nbtmatch expr eval '$.Damage == $0..10' '{"Damage": 4}'
  nbtmatch expr eval '$.Name' tag.json
  nbtmatch -q expr eval '$.count > 3' '{"count": 5}'""",
)
@click.argument("expression")
@click.argument("tag", default="{}")
@click.pass_obj
def evaluate(app: AppContext, expression: str, tag: str) -> None:
    """Evaluate EXPRESSION with ``$`` bound to TAG (JSON/YAML or file)."""
    app.emit(app.service.evaluate_expression(expression, app.load(tag)))
