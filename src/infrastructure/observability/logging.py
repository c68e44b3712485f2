"""Structured logging configuration with structlog.

The engine logs with structlog event names (``voting_started``,
``transition_rejected``) plus key/value context. This module configures
the processor chain once at startup.

Output modes:
    production: one JSON object per line, for log aggregation
    development: coloured key/value console output

Log Entry Format (production):
    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "voting_started",
        "correlation_id": "uuid",
        "item_id": "uuid",
        ...additional context
    }

Environment Variables:
- LOG_LEVEL: Minimum level (default: INFO)
- DELIBERATION_ENV: "production" (default) or "development"

Usage:
    from src.infrastructure.observability import configure_structlog

    configure_structlog()  # mode from DELIBERATION_ENV
    configure_structlog(environment="development")
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
ENVIRONMENT_ENV = "DELIBERATION_ENV"
DEFAULT_ENVIRONMENT = "production"


def _get_log_level() -> int:
    """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog for the engine.

    Should be called once at application startup.

    Args:
        environment: "production" for JSON output, anything else for
            console output. Defaults to DELIBERATION_ENV.
    """
    environment = environment or os.getenv(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
