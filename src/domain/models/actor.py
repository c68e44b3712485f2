"""Actor value object - the identity performing a command."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class Actor:
    """The current actor as supplied by the host's identity provider.

    Attributes:
        actor_id: Stable identifier of the user.
        display_name: Name shown in audit entries and vote records.
    """

    actor_id: str
    display_name: str

    def __post_init__(self) -> None:
        if not self.actor_id:
            raise ValueError("actor_id must not be empty")


# Actor used for commands issued by the engine's host without a user context
SYSTEM_ACTOR = Actor(actor_id="system", display_name="System")
