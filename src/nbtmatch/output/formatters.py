"""Output-mode selection for ServiceResult.

The CLI renders a ServiceResult for humans (rich), for machines
(``--json``) or minimally (``--quiet``). This module picks the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nbtmatch.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Resolved output flags for one invocation."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    indent: int = 2


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON wins over quiet, quiet wins over the rich renderer.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=settings.indent or None)

    from nbtmatch.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
