"""structlog configuration for ingestkit.

Two renderers share one processor chain: a coloured console renderer for
interactive runs and a JSON renderer for log shipping.  JSON is chosen when
``json_output`` is set or ``APP_ENV`` is ``production``.

Log events go to stderr by default so CLI reports on stdout stay clean.
Library loggers from the stdlib ``logging`` module (``asyncio``,
``tokenizers`` download warnings, ...) are routed through the same chain.

Every event emitted while a pipeline run is active carries the run's
``run_id`` through :func:`run_context`.
"""

import contextlib
import logging
import os
import sys
from collections.abc import Iterator
from typing import TextIO

import structlog


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Install the ingestkit structlog configuration.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines regardless of ``APP_ENV``.
        stream: Destination for rendered events; defaults to ``sys.stderr``.

    Returns:
        A logger bound to the new configuration.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    target = stream if stream is not None else sys.stderr
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=target.isatty())
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger named *name*.

    Never configures anything: library code must leave the host's logging
    setup alone, and only the CLI calls :func:`configure_logging`.
    """
    return structlog.get_logger(logger_name=name)


@contextlib.contextmanager
def run_context(run_id: str, **values: object) -> Iterator[None]:
    """Bind *run_id* (and any extra *values*) to every event in the block.

    Bindings live in context variables, so concurrent runs in separate
    tasks keep separate identifiers.
    """
    with structlog.contextvars.bound_contextvars(run_id=run_id, **values):
        yield
