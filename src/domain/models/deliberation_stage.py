"""Deliberation stage domain model.

A stage is one ordered step of a deliberation's approval path, owned by a
single committee and carrying its own voting rule. Stages are immutable;
status changes produce a new stage via the `with_*` helpers so that the
stage plan can be compared before and after every transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from src.domain.models.voting_rule import VotingRule


class StageType(Enum):
    """Kind of work performed in a stage.

    Types:
        OWNER_REVIEW: Review and vote by the owning committee
        DEPENDENT_REVIEW: Review and vote by an impacted committee
        FINAL_APPROVAL: Board approval for escalated decisions
        PUBLISH_MINUTES: Publication of the resolution minutes
        EXECUTION: Follow-up execution of the decision
    """

    OWNER_REVIEW = "owner_review"
    DEPENDENT_REVIEW = "dependent_review"
    FINAL_APPROVAL = "final_approval"
    PUBLISH_MINUTES = "publish_minutes"
    EXECUTION = "execution"

    def is_voting_stage(self) -> bool:
        """Check if members vote during this stage.

        Returns:
            True for review and approval stages.
        """
        return self in VOTING_STAGE_TYPES


VOTING_STAGE_TYPES: frozenset[StageType] = frozenset(
    {
        StageType.OWNER_REVIEW,
        StageType.DEPENDENT_REVIEW,
        StageType.FINAL_APPROVAL,
    }
)


class StageStatus(Enum):
    """Lifecycle of a single stage."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"


def make_stage_id(sequence: int, committee_id: str) -> str:
    """Build the deterministic identifier of a stage.

    Args:
        sequence: 1-based position of the stage in the plan.
        committee_id: Committee owning the stage.

    Returns:
        Stage identifier, e.g. "stage-1-hr".
    """
    return f"stage-{sequence}-{committee_id}"


@dataclass(frozen=True, eq=True)
class DeliberationStage:
    """One unit of review/voting within the workflow.

    Attributes:
        stage_id: Deterministic identifier (see make_stage_id).
        sequence: 1-based order within the plan.
        stage_type: Kind of work performed.
        committee_id: Committee owning the stage.
        committee_name: Display name of the committee.
        voting_rule: Rule applied when the stage is voted.
        status: Current stage status.
        required: Whether the stage must complete for the item to proceed.
        opened_at: When the stage became active.
        closed_at: When the stage was completed or rejected.
    """

    stage_id: str
    sequence: int
    stage_type: StageType
    committee_id: str
    committee_name: str
    voting_rule: VotingRule
    status: StageStatus = field(default=StageStatus.PENDING)
    required: bool = field(default=True)
    opened_at: datetime | None = field(default=None)
    closed_at: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate stage invariants."""
        if self.sequence < 1:
            raise ValueError(f"sequence must be >= 1, got {self.sequence}")

    def activate(self, opened_at: datetime) -> DeliberationStage:
        """Return a copy of this stage marked active."""
        return replace(self, status=StageStatus.ACTIVE, opened_at=opened_at)

    def complete(self, closed_at: datetime) -> DeliberationStage:
        """Return a copy of this stage marked completed."""
        return replace(self, status=StageStatus.COMPLETED, closed_at=closed_at)

    def reject(self, closed_at: datetime) -> DeliberationStage:
        """Return a copy of this stage marked rejected."""
        return replace(self, status=StageStatus.REJECTED, closed_at=closed_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stage_id": self.stage_id,
            "sequence": self.sequence,
            "stage_type": self.stage_type.value,
            "committee_id": self.committee_id,
            "committee_name": self.committee_name,
            "status": self.status.value,
            "required": self.required,
            "voting_rule": self.voting_rule.to_dict(),
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
        }


def replace_stage(
    stages: tuple[DeliberationStage, ...],
    updated: DeliberationStage,
) -> tuple[DeliberationStage, ...]:
    """Return a new stage tuple with `updated` swapped in by stage_id."""
    return tuple(updated if s.stage_id == updated.stage_id else s for s in stages)
