"""Subcommand modules for nbtmatch.

Command modules are imported inside :func:`register_commands`; the engine
itself is only imported once a command asks for the service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root CLI group."""
    # groups
    from nbtmatch.commands.expr import expr
    from nbtmatch.commands.wire import wire

    cli.add_command(expr)
    cli.add_command(wire)

    # top-level commands
    from nbtmatch.commands.match import match, normalize, preview

    cli.add_command(match)
    cli.add_command(preview)
    cli.add_command(normalize)
