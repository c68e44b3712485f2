"""Application ports - Abstract interfaces for host collaborators.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- TimeAuthorityProtocol: Source of "now"
- DeliberationRepositoryProtocol: Aggregate load/save
- CommitteeDirectoryProtocol: Committee names and voter populations
- ActorProviderProtocol: Current user identity
- EntityReferenceValidatorProtocol: Optional linked entity checks
- DeliberationEventPublisherProtocol: Emitted audit entries and tasks
"""

from src.application.ports.actor_provider import ActorProviderProtocol
from src.application.ports.committee_directory import CommitteeDirectoryProtocol
from src.application.ports.deliberation_event_publisher import (
    DeliberationEventPublisherProtocol,
)
from src.application.ports.deliberation_repository import (
    DeliberationRepositoryProtocol,
)
from src.application.ports.entity_reference_validator import (
    EntityReferenceValidatorProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "ActorProviderProtocol",
    "CommitteeDirectoryProtocol",
    "DeliberationEventPublisherProtocol",
    "DeliberationRepositoryProtocol",
    "EntityReferenceValidatorProtocol",
    "TimeAuthorityProtocol",
]
