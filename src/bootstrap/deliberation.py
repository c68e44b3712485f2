"""Bootstrap wiring for deliberation engine dependencies.

Each collaborator is a lazily created module-level singleton defaulting to
the in-memory stubs. Hosts (and tests) swap in their own implementations
with the set_* functions before the first request.
"""

from __future__ import annotations

from src.application.ports.committee_directory import CommitteeDirectoryProtocol
from src.application.ports.deliberation_event_publisher import (
    DeliberationEventPublisherProtocol,
)
from src.application.ports.deliberation_repository import (
    DeliberationRepositoryProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.deliberation_query_service import (
    DeliberationQueryService,
)
from src.application.services.deliberation_service import DeliberationService
from src.config.deliberation_config import DeliberationConfig
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from src.infrastructure.stubs.actor_provider_stub import ActorProviderStub
from src.infrastructure.stubs.committee_directory_stub import CommitteeDirectoryStub
from src.infrastructure.stubs.deliberation_event_publisher_stub import (
    DeliberationEventPublisherStub,
)
from src.infrastructure.stubs.deliberation_repository_stub import (
    DeliberationRepositoryStub,
)

_config: DeliberationConfig | None = None
_repository: DeliberationRepositoryProtocol | None = None
_committee_directory: CommitteeDirectoryProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_event_publisher: DeliberationEventPublisherProtocol | None = None
_deliberation_service: DeliberationService | None = None
_query_service: DeliberationQueryService | None = None


def get_deliberation_config() -> DeliberationConfig:
    """Get engine configuration (read from the environment once)."""
    global _config
    if _config is None:
        _config = DeliberationConfig.from_environment()
    return _config


def get_deliberation_repository() -> DeliberationRepositoryProtocol:
    """Get deliberation repository instance."""
    global _repository
    if _repository is None:
        _repository = DeliberationRepositoryStub()
    return _repository


def get_committee_directory() -> CommitteeDirectoryProtocol:
    """Get committee directory instance."""
    global _committee_directory
    if _committee_directory is None:
        _committee_directory = CommitteeDirectoryStub()
    return _committee_directory


def get_time_authority() -> TimeAuthorityProtocol:
    """Get time authority instance."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_event_publisher() -> DeliberationEventPublisherProtocol:
    """Get deliberation event publisher instance."""
    global _event_publisher
    if _event_publisher is None:
        _event_publisher = DeliberationEventPublisherStub()
    return _event_publisher


def get_deliberation_service() -> DeliberationService:
    """Get the deliberation command service.

    The actor provider is only a fallback; API requests pass the actor
    taken from their headers.
    """
    global _deliberation_service
    if _deliberation_service is None:
        _deliberation_service = DeliberationService(
            repository=get_deliberation_repository(),
            committee_directory=get_committee_directory(),
            time_authority=get_time_authority(),
            actor_provider=ActorProviderStub(),
            event_publisher=get_event_publisher(),
            config=get_deliberation_config(),
        )
    return _deliberation_service


def get_deliberation_query_service() -> DeliberationQueryService:
    """Get the deliberation query service."""
    global _query_service
    if _query_service is None:
        _query_service = DeliberationQueryService(
            repository=get_deliberation_repository(),
            time_authority=get_time_authority(),
            config=get_deliberation_config(),
        )
    return _query_service


def set_deliberation_config(config: DeliberationConfig) -> None:
    """Set custom configuration (testing override)."""
    global _config
    _config = config


def set_deliberation_repository(repo: DeliberationRepositoryProtocol) -> None:
    """Set custom deliberation repository (testing override)."""
    global _repository
    _repository = repo


def set_committee_directory(directory: CommitteeDirectoryProtocol) -> None:
    """Set custom committee directory (testing override)."""
    global _committee_directory
    _committee_directory = directory


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority (testing override)."""
    global _time_authority
    _time_authority = time_authority


def set_event_publisher(publisher: DeliberationEventPublisherProtocol) -> None:
    """Set custom event publisher (testing override)."""
    global _event_publisher
    _event_publisher = publisher


def reset_deliberation_dependencies() -> None:
    """Reset every deliberation singleton."""
    global _config, _repository, _committee_directory, _time_authority
    global _event_publisher, _deliberation_service, _query_service
    _config = None
    _repository = None
    _committee_directory = None
    _time_authority = None
    _event_publisher = None
    _deliberation_service = None
    _query_service = None
