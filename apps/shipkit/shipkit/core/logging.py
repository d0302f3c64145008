"""Structured logging via structlog.

Configures structlog once at process startup. All subsequent calls to
`structlog.get_logger()` (or `logging.getLogger()` via the stdlib bridge)
will use this configuration.

Renderer selection:
  debug=True: `ConsoleRenderer` with colours for local runs.
  debug=False: `JSONRenderer` for machine-parseable CI logs.

Context injection:
  `bind_module()` stores the active module and step in structlog's
  contextvars so every log line emitted while a module runs carries them
  without the caller passing them around.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog


@contextmanager
def bind_module(module: str, **extra: str) -> Iterator[None]:
    """Bind module (and optional step/destination) to every log line in scope."""
    with structlog.contextvars.bound_contextvars(module=module, **extra):
        yield


def configure_structlog(debug: bool = True, level: str = "INFO") -> None:
    """Configure structlog for the process lifetime.

    Safe to call more than once.
    """
    log_level = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging so module loggers (logging.getLogger(__name__))
    # and third-party libraries (httpx) go through the same renderer.
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
