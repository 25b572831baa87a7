"""
Log setup for the voice service.

Application modules log through ``logging.getLogger(__name__)``. A single
named handler on the root logger renders every record with structlog:
console lines in development, one JSON object per line when
``CITRO_LOG_FORMAT=json``. Values bound with ``bind_request`` (request id,
path) appear on every record logged while that request is handled.

Usage:
    from citro.logging_config import setup_logging
    setup_logging()
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

import structlog

LEVEL_ENV = "CITRO_LOG_LEVEL"
FORMAT_ENV = "CITRO_LOG_FORMAT"

# Name of the root handler this module owns
HANDLER_NAME = "citro"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("uvicorn.access", "httpx", "asyncio")


def _enrich() -> list[structlog.types.Processor]:
    """Fields added to every record, whether it came from structlog or stdlib."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    final: list[structlog.types.Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_output:
        final += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        final.append(structlog.dev.ConsoleRenderer())
    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=_enrich(), processors=final)


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install the citro handler on the root logger and configure structlog.

    Calling it again swaps the previous citro handler for a new one. Other
    root handlers, such as a test runner's capture, are left in place.
    """
    if level is None:
        level = os.environ.get(LEVEL_ENV, "INFO")
    if json_output is None:
        json_output = os.environ.get(FORMAT_ENV, "").lower() == "json"
    numeric_level = _level(level)

    structlog.configure(
        processors=[*_enrich(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(build_formatter(json_output))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return handler


def bind_request(**values) -> None:
    """Attach values (request id, path) to every log line of this request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["HANDLER_NAME", "bind_request", "build_formatter", "get_logger", "setup_logging"]
