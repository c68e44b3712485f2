"""Committee directory port.

The host's organisation directory resolves committee ids to names and
reports how many voting members each committee has. The engine turns a
stage's quorum percentage into a head count with that population.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.committee import Committee


class CommitteeDirectoryProtocol(Protocol):
    """Protocol for committee lookups."""

    async def get_committee(self, committee_id: str) -> Committee | None:
        """Look up a committee.

        Args:
            committee_id: Committee identifier.

        Returns:
            The committee, or None if unknown.
        """
        ...

    async def get_voter_population(self, committee_id: str) -> int | None:
        """Expected number of voters for a committee.

        Args:
            committee_id: Committee identifier.

        Returns:
            Voter count, or None if the directory has no figure.
        """
        ...
