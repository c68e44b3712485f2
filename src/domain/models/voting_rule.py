"""Voting rule domain model.

A VotingRule tells the outcome evaluator how to decide a stage: which
majority applies, how much participation counts as quorum, how long the
advisory voting window lasts and how an exact tie is resolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MajorityType(Enum):
    """Rule determining approval of a stage.

    Members are ordered by strictness; see MAJORITY_STRICTNESS.
    """

    SIMPLE = "simple"
    QUALIFIED_TWO_THIRDS = "qualified_two_thirds"
    UNANIMITY = "unanimity"

    def is_stricter_than(self, other: MajorityType) -> bool:
        """Check if this majority type is stricter than another.

        Args:
            other: Majority type to compare against.

        Returns:
            True if this type requires more agreement than `other`.
        """
        return MAJORITY_STRICTNESS[self] > MAJORITY_STRICTNESS[other]


class TieBreakRule(Enum):
    """Resolution of an exact yes/no tie under simple majority."""

    CHAIR_YES = "chair_yes"
    CHAIR_NO = "chair_no"


MAJORITY_STRICTNESS: dict[MajorityType, int] = {
    MajorityType.SIMPLE: 0,
    MajorityType.QUALIFIED_TWO_THIRDS: 1,
    MajorityType.UNANIMITY: 2,
}


@dataclass(frozen=True, eq=True)
class VotingRule:
    """Voting rule attached to a stage.

    Attributes:
        majority_type: Majority required for approval.
        quorum_percent: Share of the expected voter population (0-100]
            that must participate for the vote to count.
        voting_window_hours: Advisory window length used for the due date.
        tie_break_rule: Resolution of an exact tie under simple majority.
    """

    majority_type: MajorityType
    quorum_percent: int
    voting_window_hours: int
    tie_break_rule: TieBreakRule = TieBreakRule.CHAIR_NO

    def __post_init__(self) -> None:
        """Validate voting rule invariants."""
        if not 0 < self.quorum_percent <= 100:
            raise ValueError(
                f"quorum_percent must be in (0, 100], got {self.quorum_percent}"
            )
        if self.voting_window_hours <= 0:
            raise ValueError(
                f"voting_window_hours must be positive, got {self.voting_window_hours}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "majority_type": self.majority_type.value,
            "quorum_percent": self.quorum_percent,
            "voting_window_hours": self.voting_window_hours,
            "tie_break_rule": self.tie_break_rule.value,
        }
