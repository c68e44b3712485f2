"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness response.

    Attributes:
        status: "healthy" when the process serves requests.
        service: Service name.
        version: API version.
    """

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness response.

    Attributes:
        status: "ready" when storage answers, "not_ready" otherwise.
        strict_transitions: Whether invalid transitions raise.
        stored_items: Number of stored deliberations.
    """

    status: str
    strict_transitions: bool
    stored_items: int | None = None
