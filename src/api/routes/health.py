"""Health and readiness endpoints of the deliberation engine API."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies.deliberation import get_deliberation_query_service
from src.api.models.health import HealthResponse, ReadinessResponse
from src.application.services.deliberation_query_service import (
    DeliberationQueryService,
)
from src.bootstrap.deliberation import get_deliberation_config

logger = structlog.get_logger()

SERVICE_NAME = "deliberation-engine"
API_VERSION = "0.1.0"

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; always 200 while the process runs."""
    return HealthResponse(status="healthy", service=SERVICE_NAME, version=API_VERSION)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(
    queries: DeliberationQueryService = Depends(get_deliberation_query_service),
):
    """Readiness probe; 503 when the deliberation store cannot be read."""
    strict = get_deliberation_config().strict_transitions
    try:
        counts = await queries.queue_counts()
    except Exception as exc:
        logger.error("readiness_check_failed", error=str(exc))
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(
                status="not_ready", strict_transitions=strict
            ).model_dump(),
        )
    return ReadinessResponse(
        status="ready",
        strict_transitions=strict,
        stored_items=sum(counts.values()),
    )
