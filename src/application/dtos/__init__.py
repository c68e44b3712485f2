"""Application DTOs (Data Transfer Objects).

These DTOs are used for data transfer within the application layer
and across layer boundaries. They are distinct from:
- Domain models (immutable business objects)
- API models (Pydantic models for serialization)

Architecture Note:
The application layer defines its own DTOs to maintain independence
from the API layer. API routes map their request models onto these,
ensuring dependencies flow inward (API -> Application), not outward.
"""

from src.application.dtos.deliberation import (
    BoardHealthKpisDTO,
    DeliberationFilterDTO,
    KpiBucket,
    SubmitDeliberationDTO,
)

__all__: list[str] = [
    "BoardHealthKpisDTO",
    "DeliberationFilterDTO",
    "KpiBucket",
    "SubmitDeliberationDTO",
]
