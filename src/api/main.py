"""FastAPI application entry point for the deliberation engine."""

from fastapi import FastAPI

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.routes.deliberation import router as deliberation_router
from src.api.routes.health import API_VERSION, router as health_router
from src.infrastructure.observability.logging import configure_structlog


def create_app() -> FastAPI:
    """Build the API application with logging and all routers."""
    configure_structlog()

    application = FastAPI(
        title="Deliberation Engine API",
        description="Committee deliberation workflow: review, voting, minutes, execution",
        version=API_VERSION,
    )
    application.add_middleware(LoggingMiddleware)
    application.include_router(health_router)
    application.include_router(deliberation_router)
    return application


app = create_app()
