"""``nbtmatch`` entry point: global flags, settings and subcommand wiring."""

from __future__ import annotations

import click

from nbtmatch import __version__
from nbtmatch.commands import register_commands
from nbtmatch.commands._base import MatchGroup
from nbtmatch.commands._context import AppContext
from nbtmatch.config.settings import MatchSettings

_ROOT_EXAMPLES = """\
  nbtmatch match '{"require": {"Damage": 0}}' stacks.json
  nbtmatch --json preview condition.yaml
  nbtmatch -q expr eval '$.Count == $1..16' '{"Count": 3}'
  nbtmatch -v --log-json wire encode condition.json"""


@click.group(cls=MatchGroup, examples=_ROOT_EXAMPLES, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="nbtmatch")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essential value.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and timing spans.")
@click.option("--log-json", is_flag=True, help="Emit logs on stderr as JSON lines.")
@click.option(
    "-c", "--config", "config_path", default=None, help="Use this TOML file instead of discovery."
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """nbtmatch - match item tag data against declarative conditions."""
    ctx.obj = AppContext(
        MatchSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
