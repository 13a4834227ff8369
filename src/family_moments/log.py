"""Structured logging setup.

All modules log through structlog; ``setup_logging`` is called once by the
CLI. Library use without setup falls back to structlog's defaults.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger


LOG_LEVEL = "INFO"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog and route standard library logging through it.

    Args:
        level: Minimum level name, e.g. ``"DEBUG"`` or ``"WARNING"``.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        # stderr is looked up per logger so CLI output on stdout stays clean
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=processors[:-1],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    return structlog.get_logger(name)
