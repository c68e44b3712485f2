"""Correlation ID propagation for request-scoped logging.

A correlation id identifies one command from the HTTP request that carried
it down to every log line the engine writes while handling it. The id is
kept in a contextvar so it survives awaits within the same request task.

Usage:
    # In middleware (request start)
    set_correlation_id(request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id())

    # In structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from contextvars import ContextVar
from typing import Any

from uuid6 import uuid7

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Empty string means "no request context"
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new, time-ordered correlation ID (UUIDv7)."""
    return str(uuid7())


def get_correlation_id() -> str:
    """Return the correlation ID of the current context, or "" if unset."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current context.

    Args:
        correlation_id: The correlation ID to set.
    """
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding the current correlation_id to an entry.

    An id already present in the event (bound explicitly) wins.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary.
    """
    correlation_id = get_correlation_id()
    if correlation_id and not event_dict.get("correlation_id"):
        event_dict["correlation_id"] = correlation_id
    return event_dict
