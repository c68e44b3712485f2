"""Committee domain model.

Committees own and review deliberations. The engine only needs their
identity, display name and expected voter population (used to turn a
quorum percentage into a head count).
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Expected voters per committee when the directory has no better figure
DEFAULT_VOTER_POPULATION = 5


@dataclass(frozen=True, eq=True)
class Committee:
    """A governance committee.

    Attributes:
        committee_id: Stable identifier (e.g. "hr").
        name: Display name.
        code: Short business code (e.g. "HR").
        voter_population: Expected number of voting members.
    """

    committee_id: str
    name: str
    code: str
    voter_population: int = field(default=DEFAULT_VOTER_POPULATION)

    def __post_init__(self) -> None:
        if self.voter_population < 1:
            raise ValueError(
                f"voter_population must be >= 1, got {self.voter_population}"
            )
