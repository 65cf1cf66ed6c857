"""Structured logging utilities for openapi-security.

Evaluation outcomes are logged through structlog. Importing the package does
not touch the structlog configuration; the host application owns it, or calls
``configure_logging()`` (or ``config.apply_logging_config()``) once at startup.
"""

import logging
import sys
import time
from contextlib import AbstractContextManager
from typing import Any, Mapping

import structlog
from structlog.types import EventDict, Processor


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "openapi_security") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def request_context(**values: object) -> AbstractContextManager[Mapping[str, Any]]:
    """Bind key/value pairs to every log line emitted inside the ``with`` block."""
    return structlog.contextvars.bound_contextvars(**values)

