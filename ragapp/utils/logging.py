"""structlog setup shared by the HTTP service and the ingest CLI.

Both entry points call :func:`configure_logging` once, after settings are
loaded, with ``json_output`` derived from ``APP_ENV=production``.  Log lines
go to *stream*: stdout for the server (container log collectors read it) and
stderr for the CLI, whose stdout carries the ingestion summary.

Colours are used only when the console renderer writes to a terminal, so
redirected CLI output stays plain text.

Records from the standard library (uvicorn, httpx, chromadb) pass through
the same processors via ``ProcessorFormatter``.  The per-request and
per-batch chatter from httpx, httpcore, chromadb and ``uvicorn.access`` is
held at WARNING unless DEBUG is requested; request logging is done by
:class:`~ragapp.api.middleware.RequestLoggingMiddleware` instead.
"""

import logging
import sys
from typing import TextIO

import structlog

NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "chromadb", "uvicorn.access")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging to *stream* at *log_level*.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: One JSON object per line instead of console rendering.
        stream: Destination, ``sys.stdout`` when omitted.
    """
    stream = stream or sys.stdout
    level = log_level.upper()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    library_level = logging.NOTSET if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger; falls back to INFO console logging if nothing configured it."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
