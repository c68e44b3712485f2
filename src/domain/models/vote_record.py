"""Vote record domain model.

A VoteRecord is one voter's decision within the active stage's voting
window. The aggregate keeps at most one record per voter; a new vote from
the same voter replaces the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class VoteOption(Enum):
    """A voter's choice. Abstentions count toward quorum only."""

    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"


@dataclass(frozen=True, eq=True)
class VoteRecord:
    """One voter's decision on the current stage.

    Attributes:
        vote_id: Unique identifier of the record.
        item_id: Deliberation the vote belongs to.
        voter_id: Identifier of the voter.
        voter_name: Display name of the voter.
        vote: The voter's choice.
        stage_id: Stage the vote was cast in.
        voted_at: When the vote was cast (UTC).
        justification: Optional free-text reasoning.
        has_conflict_of_interest: Voter declared a conflict of interest.
    """

    vote_id: str
    item_id: str
    voter_id: str
    voter_name: str
    vote: VoteOption
    stage_id: str | None
    voted_at: datetime
    justification: str | None = field(default=None)
    has_conflict_of_interest: bool = field(default=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "vote_id": self.vote_id,
            "item_id": self.item_id,
            "voter_id": self.voter_id,
            "voter_name": self.voter_name,
            "vote": self.vote.value,
            "justification": self.justification,
            "has_conflict_of_interest": self.has_conflict_of_interest,
            "stage_id": self.stage_id,
            "voted_at": self.voted_at.isoformat(),
        }


@dataclass(frozen=True, eq=True)
class VoteTally:
    """Counts of each vote option.

    Attributes:
        yes: Number of yes votes.
        no: Number of no votes.
        abstain: Number of abstentions.
    """

    yes: int = 0
    no: int = 0
    abstain: int = 0

    @property
    def counted(self) -> int:
        """Votes entering the majority ratio (abstentions excluded)."""
        return self.yes + self.no

    @property
    def total(self) -> int:
        """All votes cast, abstentions included."""
        return self.yes + self.no + self.abstain

    def to_dict(self) -> dict[str, int]:
        return {"yes": self.yes, "no": self.no, "abstain": self.abstain}
