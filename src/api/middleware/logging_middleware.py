"""Request logging middleware with correlation ID propagation.

For every HTTP request this middleware:
- Takes the correlation ID from the X-Correlation-ID header, or mints one
- Stores it in the request context so service logs carry it
- Logs request start and completion with timing and the calling actor
- Echoes the correlation ID in the response headers

Usage:
    from fastapi import FastAPI
    from src.api.middleware.logging_middleware import LoggingMiddleware

    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
"""

import time
from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.api.dependencies.deliberation import ACTOR_ID_HEADER
from src.infrastructure.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    set_correlation_id,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and log its outcome.

    Downstream code reads the ID through get_correlation_id(); the
    correlation_id_processor adds it to every structlog event.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        set_correlation_id(correlation_id)

        log = structlog.get_logger().bind(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
            actor_id=request.headers.get(ACTOR_ID_HEADER),
        )
        log.debug("request_started")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error_type=type(exc).__name__,
            )
            raise

        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
