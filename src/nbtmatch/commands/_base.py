"""Click classes that add an ``--examples`` flag.

Usage examples live outside ``--help`` so the help text stays short;
``nbtmatch <command> --examples`` prints them and exits.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(examples)
    ctx.exit(0)


class _ExamplesMixin:
    """Stores ``examples`` and registers the eager flag when there are any."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show usage examples and exit.",
                )
            )


class MatchCommand(_ExamplesMixin, click.Command):
    """``click.Command`` accepting ``examples=``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class MatchGroup(_ExamplesMixin, click.Group):
    """``click.Group`` accepting ``examples=``.

    Commands created with ``@group.command`` are ``MatchCommand``s, so they
    take ``examples=`` too.
    """

    command_class = MatchCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
