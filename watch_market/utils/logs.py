"""
Watch Market - Structlog Configuration

Configured once per cold start; every module then uses
structlog.get_logger(__name__).
"""

from __future__ import annotations

import logging
import sys

import structlog

from watch_market.config import settings

_configured = False


def configure_logging(log_level: str | None = None, json_output: bool | None = None) -> None:
    """
    Set up structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        json_output: JSON lines when True, human-readable console output otherwise.
    """
    global _configured
    if _configured:
        return

    level_name = (log_level or settings.LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    use_json = settings.LOG_JSON if json_output is None else json_output

    # Configure stdlib logging first (for httpx, anthropic, uvicorn)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
