"""Rich Console factory and theme for nbtmatch output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract. Rich drops color codes on its own when the output
is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

NBT_THEME = Theme(
    {
        "nbt.ok": "bold green",
        "nbt.error": "bold red",
        "nbt.warning": "bold yellow",
        "nbt.op": "bold cyan",
        "nbt.key": "dim",
        "nbt.match": "green",
        "nbt.miss": "red",
        "nbt.string": "yellow",
        "nbt.number": "magenta",
        "nbt.container": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing into memory, themed with ``NBT_THEME``.

    Args:
        no_color: Never emit ANSI codes, even on a terminal.
        width: Line width; 120 columns unless given.
    """
    return Console(
        file=StringIO(),
        theme=NBT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Everything printed so far on a console from :func:`create_console`."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_value(value: object) -> str:
    """Rich style for one JSON leaf in a tag tree."""
    if isinstance(value, str):
        return "nbt.string"
    if isinstance(value, (int, float)):
        return "nbt.number"
    return "nbt.container"
