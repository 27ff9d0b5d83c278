"""Console logging setup for applications embedding sqlitehelper."""

import logging
import sys

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog to render key/value events to stderr.

    Args:
        level: Minimum level to emit, as a logging constant or its name.
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=lambda *args: structlog.PrintLogger(file=sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=False,
    )
