"""Structlog configuration for the application.

Configures structlog with colored console output for development
and JSON output for production.
"""

import logging
import os
import sys

import structlog


def configure_logging(debug: bool = False) -> None:
    """Configure structlog with appropriate processors.

    Uses colored console output for development (when FORCE_COLOR is set
    or running in a TTY), otherwise uses JSON output for production.

    Args:
        debug: Also emit debug events (connection reuse, joined attempts).
    """
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    use_colors = force_color or sys.stdout.isatty()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_colors:
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    min_level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
