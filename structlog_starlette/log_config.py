"""
Logging Setup
=============
structlog configuration for services using the request logging middleware.

Usage:
    from structlog_starlette.log_config import setup_logging

    setup_logging(level="INFO", json_output=True)
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog

from .config import parse_level


def setup_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure structlog for the process. Call once at startup.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the LOG_LEVEL environment variable, then INFO.
        json_output: Render JSON lines instead of console output.
            Defaults to LOG_FORMAT != "console".
    """
    level_no = parse_level(level or os.getenv("LOG_LEVEL", "INFO"))
    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "json").lower() != "console"

    # Standard library logging integration
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
