"""
API models (Pydantic DTOs) for the deliberation engine.

This module contains the Pydantic request/response models
used by API endpoints.
"""

from src.api.models.deliberation import (
    DeliberationErrorResponse,
    DeliberationListResponse,
    DeliberationResponse,
)
from src.api.models.health import HealthResponse, ReadinessResponse

__all__: list[str] = [
    "DeliberationErrorResponse",
    "DeliberationListResponse",
    "DeliberationResponse",
    "HealthResponse",
    "ReadinessResponse",
]
