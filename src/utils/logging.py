# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Logging configuration.

structlog loggers and plain ``logging.getLogger(__name__)`` loggers write
through one stdlib handler, so event-style lines from access checks and
%-style lines from the domain services share a format: colored console
output in development, one JSON object per line otherwise.

Example:
    >>> from src.utils.logging import get_logger, log_context, setup_logging
    >>> setup_logging(get_settings())
    >>> logger = get_logger(__name__)
    >>> with log_context(user_id=12):
    ...     logger.info("actor_resolved", role="worker")
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

HANDLER_NAME = "cdc_admin_core"

QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncpg", "asyncio")


def setup_logging(settings: "Settings") -> None:
    """Route structlog and stdlib logging through one handler.

    Safe to call more than once; the previous handler is replaced.

    Args:
        settings: Application settings. ``log_level`` sets the threshold;
            ``debug`` or a development environment selects console output.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    console = settings.is_development or settings.debug

    # Applied to stdlib records before rendering
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Processor
    if console:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        render_chain: list[Processor] = [renderer]
    else:
        renderer = structlog.processors.JSONRenderer()
        render_chain = [structlog.processors.format_exc_info, renderer]

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger backed by the stdlib logger ``name``."""
    return structlog.get_logger(name)


@contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Attach values to every log line emitted inside the block.

    Values are restored on exit, so context never outlives the operation
    that bound it.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
