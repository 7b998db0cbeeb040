"""Logging setup for the nbtmatch CLI.

Engine modules log through plain ``logging.getLogger(__name__)`` and never
configure anything themselves. The CLI calls :func:`configure_logging` once
per invocation. It routes both stdlib records and native structlog events
through one ``ProcessorFormatter`` on stderr, so stdout stays reserved for
command results. Records render as console lines by default and as JSON
lines with ``--log-json``.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "nbtmatch"

# Libraries whose DEBUG chatter never belongs in ``-v`` output.
_QUIET_LOGGERS = ("ruamel", "markdown_it")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and set levels.

    Args:
        verbose: Let DEBUG records from ``nbtmatch.*`` through. Otherwise
            only warnings and errors are shown.
        log_json: Render JSON lines instead of console lines.

    Calling it again replaces the previous handler.
    """
    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
