"""Route stdlib logging through structlog.

The binding engine logs with plain ``logging.getLogger(__name__)``: one
warning per rejected key, one error per fatal resolution or construction
failure. Here those records get structlog's processors, including any
context the service layer bound (``requested`` type, batch ``record``), and
are written to stderr as console lines or, with ``--log-json``, JSON lines.
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "settable"


def _package_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _processors(*, log_json: bool) -> list[structlog.types.Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_json:
        chain.append(structlog.processors.format_exc_info)
    return chain


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        verbose: DEBUG for the ``settable`` logger. Wins over *quiet*.
        quiet: ERROR for the ``settable`` logger, hiding rejected keys.
        log_json: JSON lines instead of console rendering.
    """
    shared = _processors(log_json=log_json)
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger(PACKAGE_LOGGER).setLevel(_package_level(verbose=verbose, quiet=quiet))
