# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Logging for the admissions notification engine.

The service, the admissions triggers and the API log through structlog.
Channels and stores use plain stdlib loggers, which setup_logging routes
to the same stream. Output is colored console text in development and
JSON lines otherwise.

Example:
    >>> setup_logging(get_settings())
    >>> logger = get_logger(__name__)
    >>> with log_context(event_type="admissions.decision.accepted"):
    ...     logger.info("Fan-out completed", sent=3, failed=1)
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Delivery and storage libraries that log every request at INFO
QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "aiosmtplib",
    "sqlalchemy.engine",
    "aiosqlite",
    "uvicorn.access",
)


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        settings: Application settings (log_level, debug, environment).
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.is_development or settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger named after the calling module."""
    return structlog.get_logger(name)


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Tag every log line inside the block with the given values.

    Values bound outside the block are restored on exit, so nested and
    concurrent admissions events keep their own event id.

    Args:
        **values: Key-value pairs to add to each log line.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
