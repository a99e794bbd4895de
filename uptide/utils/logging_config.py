"""
Logging configuration using structlog for structured logging.

This module provides centralized logging setup for the whole orchestrator.
Logs are written to stderr so they never interleave with the output of the
tools being updated, which goes to stdout.
"""

import sys
from typing import Any, Literal

import structlog


def configure_logging(
    log_level: str = "WARNING",
    log_format: Literal["console", "json"] = "console",
) -> None:
    """Configure structured logging.

    Sets up structlog with a pipeline of processors for structured logs that
    include timestamps, log levels, stack traces, and contextual information.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "console" for human-readable lines, "json" for one JSON
            object per line
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
