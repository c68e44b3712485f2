"""API dependencies for dependency injection."""

from src.api.dependencies.deliberation import (
    get_current_actor,
    get_deliberation_query_service,
    get_deliberation_service,
)

__all__: list[str] = [
    "get_current_actor",
    "get_deliberation_query_service",
    "get_deliberation_service",
]
