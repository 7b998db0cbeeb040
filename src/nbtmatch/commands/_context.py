"""AppContext: the object every subcommand receives via ``@click.pass_obj``.

It applies logging and telemetry settings, builds the ConditionService on
demand, turns document arguments into data and writes results with the
right stream and exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import click

from nbtmatch.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from nbtmatch.config.settings import MatchSettings
    from nbtmatch.services.condition import ConditionService
    from nbtmatch.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by all commands.

    Nothing here touches the registry until a command asks for
    :attr:`service`, so ``--help`` and ``--examples`` stay cheap.
    """

    def __init__(self, settings: MatchSettings) -> None:
        from nbtmatch.config.logging import configure_logging

        self.settings = settings
        self._service: ConditionService | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            from nbtmatch.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            indent=self.settings.output.indent,
        )

    @property
    def service(self) -> ConditionService:
        if self._service is None:
            from nbtmatch.services.condition import ConditionService

            self._service = ConditionService(self.settings.build_registry())
        return self._service

    def load(self, value: str) -> Any:
        """Parse a document argument: inline JSON/YAML or a file path.

        A document that cannot be read is reported like any failed
        operation, named after the running command.
        """
        from nbtmatch.domain.errors import DocumentError
        from nbtmatch.infrastructure.documents import read_document_arg
        from nbtmatch.services.result import ServiceResult

        try:
            return read_document_arg(value)
        except DocumentError as exc:
            op = click.get_current_context().info_name or "load"
            self.fail(ServiceResult.failure(op, exc))

    def emit(self, result: ServiceResult) -> None:
        """Write *result*; a failed result exits with status 1.

        Successful output goes to stdout. Warnings go to stderr, except
        with ``--json`` where they are part of the payload already.
        """
        if not result.ok:
            self.fail(result)
        settings = self.output_settings
        click.echo(format_result(result, settings=settings))
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

    def fail(self, result: ServiceResult) -> NoReturn:
        click.echo(format_result(result, settings=self.output_settings), err=True)
        raise SystemExit(1)
