"""System clock implementation of TimeAuthorityProtocol."""

from datetime import datetime, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority backed by the host's wall clock (UTC)."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(timezone.utc)
