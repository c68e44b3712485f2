"""Time authority port.

Voting due dates, stage open/close stamps, audit timestamps and the
overdue and look-back KPIs all read "now" through this port, so a test
can freeze or advance the engine's clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimeAuthorityProtocol(Protocol):
    """Protocol for the engine clock.

    Production wiring uses SystemTimeAuthority
    (src/infrastructure/adapters/system_time_authority.py); tests use
    FakeTimeAuthority (tests/helpers/fake_time_authority.py).
    """

    def now(self) -> datetime:
        """Current timezone-aware UTC time."""
        ...
