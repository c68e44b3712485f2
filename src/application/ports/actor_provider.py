"""Actor provider port - supplies the identity of the current user."""

from __future__ import annotations

from typing import Protocol

from src.domain.models.actor import Actor


class ActorProviderProtocol(Protocol):
    """Protocol for resolving the current actor.

    Authentication is the host's concern; the engine only records who
    did what.
    """

    def current_actor(self) -> Actor:
        """Return the actor issuing the current command."""
        ...
