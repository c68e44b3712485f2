"""Deliberation API dependencies.

FastAPI dependency injection for the deliberation services and the
current actor. Services come from the bootstrap composition root; tests
override them through the bootstrap set_* functions or
app.dependency_overrides.

Authentication is the host's concern: the actor is read from the
X-Actor-Id / X-Actor-Name headers without verification.
"""

from fastapi import Header

from src.application.services.deliberation_query_service import (
    DeliberationQueryService,
)
from src.application.services.deliberation_service import DeliberationService
from src.bootstrap.deliberation import (
    get_deliberation_query_service as _bootstrap_query_service,
)
from src.bootstrap.deliberation import (
    get_deliberation_service as _bootstrap_service,
)
from src.domain.models.actor import Actor

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_NAME_HEADER = "X-Actor-Name"


def get_deliberation_service() -> DeliberationService:
    """Get the deliberation command service."""
    return _bootstrap_service()


def get_deliberation_query_service() -> DeliberationQueryService:
    """Get the deliberation query service."""
    return _bootstrap_query_service()


async def get_current_actor(
    x_actor_id: str | None = Header(default=None, alias=ACTOR_ID_HEADER),
    x_actor_name: str | None = Header(default=None, alias=ACTOR_NAME_HEADER),
) -> Actor | None:
    """Build the acting user from request headers.

    Returns:
        The actor, or None when no X-Actor-Id header is present (the
        service then falls back to its actor provider).
    """
    if not x_actor_id:
        return None
    return Actor(actor_id=x_actor_id, display_name=x_actor_name or x_actor_id)


__all__ = [
    "ACTOR_ID_HEADER",
    "ACTOR_NAME_HEADER",
    "get_current_actor",
    "get_deliberation_query_service",
    "get_deliberation_service",
]
