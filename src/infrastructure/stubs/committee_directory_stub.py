"""Committee Directory Stub.

In-memory stub implementation of CommitteeDirectoryProtocol seeded with
the standard committee catalogue.
"""

from __future__ import annotations

from typing import Iterable

from src.application.ports.committee_directory import CommitteeDirectoryProtocol
from src.domain.models.committee import Committee
from src.domain.models.routing_policy import COMMITTEES


class CommitteeDirectoryStub(CommitteeDirectoryProtocol):
    """In-memory committee directory for development and testing.

    Voter populations come from each Committee's voter_population and can
    be overridden per committee with set_voter_population().
    """

    def __init__(self, committees: Iterable[Committee] = COMMITTEES) -> None:
        """Initialize the directory.

        Args:
            committees: Committees to serve. Defaults to the standard catalogue.
        """
        self._committees: dict[str, Committee] = {
            c.committee_id: c for c in committees
        }
        self._populations: dict[str, int] = {}

    def add_committee(self, committee: Committee) -> None:
        """Add or replace a committee (test helper)."""
        self._committees[committee.committee_id] = committee

    def set_voter_population(self, committee_id: str, population: int) -> None:
        """Override a committee's voter population (test helper)."""
        self._populations[committee_id] = population

    async def get_committee(self, committee_id: str) -> Committee | None:
        return self._committees.get(committee_id)

    async def get_voter_population(self, committee_id: str) -> int | None:
        if committee_id in self._populations:
            return self._populations[committee_id]
        committee = self._committees.get(committee_id)
        return committee.voter_population if committee else None
