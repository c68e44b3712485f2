"""
Pytest configuration and shared fixtures for deliberation engine tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Time-dependent tests use FakeTimeAuthority, never the wall clock
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from datetime import datetime, timezone

import pytest

from src.domain.models.actor import Actor
from tests.helpers.fake_time_authority import FakeTimeAuthority

FROZEN_AT = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Provide a time authority frozen at a fixed Monday morning."""
    return FakeTimeAuthority(frozen_at=FROZEN_AT)


@pytest.fixture
def requester() -> Actor:
    return Actor(actor_id="user-requester", display_name="Rita Requester")


@pytest.fixture
def voters() -> list[Actor]:
    """Five committee members."""
    return [Actor(actor_id=f"member-{n}", display_name=f"Member {n}") for n in range(1, 6)]
