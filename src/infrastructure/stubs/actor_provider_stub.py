"""Actor Provider Stub - a fixed, switchable current actor."""

from __future__ import annotations

from src.application.ports.actor_provider import ActorProviderProtocol
from src.domain.models.actor import SYSTEM_ACTOR, Actor


class ActorProviderStub(ActorProviderProtocol):
    """Returns a configurable actor.

    Tests switch the actor between commands to simulate several voters.
    """

    def __init__(self, actor: Actor = SYSTEM_ACTOR) -> None:
        self._actor = actor

    def set_actor(self, actor: Actor) -> None:
        """Change the current actor (test helper)."""
        self._actor = actor

    def current_actor(self) -> Actor:
        return self._actor
