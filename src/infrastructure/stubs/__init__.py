"""Infrastructure stubs for development and testing.

This module provides stub implementations of the application ports
for use in development and testing environments.

Available stubs:
- DeliberationRepositoryStub: In-memory aggregate storage
- CommitteeDirectoryStub: Standard committee catalogue with overridable populations
- ActorProviderStub: Fixed, switchable current actor
- DeliberationEventPublisherStub: Records published audit entries and tasks
- EntityReferenceValidatorStub: Accepts registered entity references only

WARNING: These stubs are NOT for production use.
Production implementations are supplied by the host application.
"""

from src.infrastructure.stubs.actor_provider_stub import ActorProviderStub
from src.infrastructure.stubs.committee_directory_stub import CommitteeDirectoryStub
from src.infrastructure.stubs.deliberation_event_publisher_stub import (
    DeliberationEventPublisherStub,
)
from src.infrastructure.stubs.deliberation_repository_stub import (
    DeliberationRepositoryStub,
)
from src.infrastructure.stubs.entity_reference_validator_stub import (
    EntityReferenceValidatorStub,
)

__all__: list[str] = [
    "ActorProviderStub",
    "CommitteeDirectoryStub",
    "DeliberationEventPublisherStub",
    "DeliberationRepositoryStub",
    "EntityReferenceValidatorStub",
]
