"""Deliberation item aggregate.

A DeliberationItem is the aggregate root of one decision request. It is
created from a validated submission, mutated only through the
deliberation state machine, and becomes terminal at CLOSED or WITHDRAWN.

Invariants:
- At most one stage is ACTIVE; when one is, current_stage_id references it
- votes holds at most one record per voter for the current stage
- audit_trail is append-only and newest-first

The aggregate is a frozen dataclass; every transition produces a new
instance via dataclasses.replace so that before/after snapshots compare
by equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.domain.models.audit_trail import AuditTrailEntry
from src.domain.models.deliberation_stage import (
    DeliberationStage,
    StageStatus,
    StageType,
)
from src.domain.models.execution_item import ExecutionItem
from src.domain.models.minutes import Minutes
from src.domain.models.vote_record import VoteRecord, VoteTally


class DeliberationStatus(Enum):
    """Lifecycle status of a deliberation.

    Main path:
        DRAFT -> SUBMITTED -> IN_REVIEW -> IN_VOTING ->
        (IN_REVIEW | AWAITING_MINUTES | IN_EXECUTION) -> RESOLVED ->
        IN_EXECUTION -> CLOSED

    Side branches:
        RETURNED_FOR_REVISION: sent back to the requester
        WITHDRAWN: cancelled (terminal)
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    IN_VOTING = "in_voting"
    AWAITING_MINUTES = "awaiting_minutes"
    RESOLVED = "resolved"
    IN_EXECUTION = "in_execution"
    CLOSED = "closed"
    RETURNED_FOR_REVISION = "returned_for_revision"
    WITHDRAWN = "withdrawn"

    def is_terminal(self) -> bool:
        """Check if no further transition is permitted."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[DeliberationStatus] = frozenset(
    {DeliberationStatus.CLOSED, DeliberationStatus.WITHDRAWN}
)

# Statuses counted as "open" on the board health panel
OPEN_STATUSES: frozenset[DeliberationStatus] = frozenset(
    {
        DeliberationStatus.DRAFT,
        DeliberationStatus.SUBMITTED,
        DeliberationStatus.IN_REVIEW,
        DeliberationStatus.IN_VOTING,
        DeliberationStatus.AWAITING_MINUTES,
        DeliberationStatus.IN_EXECUTION,
    }
)


class VoteResult(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    NO_QUORUM = "no_quorum"
    RETURNED_FOR_REVISION = "returned_for_revision"


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def is_elevated(self) -> bool:
        """True for HIGH and CRITICAL."""
        return self in (RiskLevel.HIGH, RiskLevel.CRITICAL)


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_risk(cls, risk_level: RiskLevel) -> Priority:
        """Derive the queue priority from the risk level."""
        if risk_level == RiskLevel.CRITICAL:
            return cls.CRITICAL
        if risk_level == RiskLevel.HIGH:
            return cls.HIGH
        return cls.MEDIUM


class AttachmentType(Enum):
    DOCUMENT = "document"
    LINK = "link"
    OTHER = "other"


@dataclass(frozen=True, eq=True)
class Attachment:
    """A piece of evidence attached to the deliberation."""

    attachment_id: str
    name: str
    url: str
    attachment_type: AttachmentType = field(default=AttachmentType.DOCUMENT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attachment_id": self.attachment_id,
            "name": self.name,
            "url": self.url,
            "attachment_type": self.attachment_type.value,
        }


@dataclass(frozen=True, eq=True)
class StageVoteTally:
    """Closed tally of one voting round, kept after votes are cleared.

    Attributes:
        stage_id: Stage the round belonged to.
        tally: Yes/no/abstain counts at close.
        result: Outcome of the round.
        closed_at: When voting was closed.
    """

    stage_id: str | None
    tally: VoteTally
    result: VoteResult
    closed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage_id": self.stage_id,
            **self.tally.to_dict(),
            "result": self.result.value,
            "closed_at": self.closed_at.isoformat(),
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True, eq=True)
class DeliberationItem:
    """Aggregate root of one decision request.

    Attributes:
        item_id: Unique identifier (UUIDv7 string).
        title: Short title; also the minutes agenda line.
        description: Free-text description.
        requested_decision: The decision being asked for.
        owner_committee_id: Committee accountable for the decision.
        owner_committee_name: Display name of the owner committee.
        dependent_committee_ids: Committees that must also weigh in.
        dependent_committee_names: Display names of dependent committees.
        business_area: Business area label (e.g. "HR").
        priority: Queue priority.
        risk_level: Assessed risk.
        financial_impact: Monetary magnitude of the decision.
        strategic_flag: Decision is strategic (board-level).
        template_id: Deliberation template used, if any.
        template_name: Display name of the template.
        deliberation_status: Current lifecycle status.
        created_at: Creation timestamp (UTC).
        created_by: Creator's actor id.
        created_by_name: Creator's display name.
        submitted_at: When the item was submitted.
        resolved_at: When a decision was reached.
        voting_started_at: When the current voting window opened.
        voting_closed_at: When the last voting window closed.
        due_date: Advisory voting deadline.
        stages: Ordered stage plan.
        current_stage_id: The active stage (None before submission).
        votes: Votes of the current stage.
        vote_result: Outcome of the last closed vote.
        quorum_required: Head count required for quorum.
        quorum_present: Votes cast in the current window.
        vote_history: Closed tallies, oldest first.
        attachments: Evidence pack.
        minutes_summary: Rendered minutes text.
        minutes: Structured minutes.
        execution_items: Follow-up tasks.
        audit_trail: Audit entries, newest first.
    """

    item_id: str
    title: str
    description: str
    requested_decision: str
    owner_committee_id: str
    owner_committee_name: str
    created_at: datetime
    created_by: str
    created_by_name: str
    dependent_committee_ids: tuple[str, ...] = field(default_factory=tuple)
    dependent_committee_names: tuple[str, ...] = field(default_factory=tuple)
    business_area: str = field(default="")
    priority: Priority = field(default=Priority.MEDIUM)
    risk_level: RiskLevel = field(default=RiskLevel.MEDIUM)
    financial_impact: float = field(default=0.0)
    strategic_flag: bool = field(default=False)
    template_id: str | None = field(default=None)
    template_name: str | None = field(default=None)
    deliberation_status: DeliberationStatus = field(default=DeliberationStatus.DRAFT)
    submitted_at: datetime | None = field(default=None)
    resolved_at: datetime | None = field(default=None)
    voting_started_at: datetime | None = field(default=None)
    voting_closed_at: datetime | None = field(default=None)
    due_date: datetime | None = field(default=None)
    stages: tuple[DeliberationStage, ...] = field(default_factory=tuple)
    current_stage_id: str | None = field(default=None)
    votes: tuple[VoteRecord, ...] = field(default_factory=tuple)
    vote_result: VoteResult | None = field(default=None)
    quorum_required: int | None = field(default=None)
    quorum_present: int | None = field(default=None)
    vote_history: tuple[StageVoteTally, ...] = field(default_factory=tuple)
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)
    minutes_summary: str | None = field(default=None)
    minutes: Minutes | None = field(default=None)
    execution_items: tuple[ExecutionItem, ...] = field(default_factory=tuple)
    audit_trail: tuple[AuditTrailEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate aggregate invariants."""
        self._validate_stages()
        self._validate_votes()

    def _validate_stages(self) -> None:
        active = [s for s in self.stages if s.status == StageStatus.ACTIVE]
        if len(active) > 1:
            raise ValueError(
                f"At most one stage may be active, got {[s.stage_id for s in active]}"
            )
        if active and self.current_stage_id != active[0].stage_id:
            raise ValueError(
                f"current_stage_id {self.current_stage_id} must reference "
                f"the active stage {active[0].stage_id}"
            )
        sequences = [s.sequence for s in self.stages]
        if sequences != sorted(sequences) or len(set(sequences)) != len(sequences):
            raise ValueError(f"Stages must be strictly ordered by sequence, got {sequences}")

    def _validate_votes(self) -> None:
        voter_ids = [v.voter_id for v in self.votes]
        if len(set(voter_ids)) != len(voter_ids):
            raise ValueError("votes must contain at most one record per voter")

    @property
    def is_terminal(self) -> bool:
        return self.deliberation_status.is_terminal()

    @property
    def current_stage(self) -> DeliberationStage | None:
        """The stage referenced by current_stage_id, if any."""
        if self.current_stage_id is None:
            return None
        return next(
            (s for s in self.stages if s.stage_id == self.current_stage_id), None
        )

    @property
    def active_stage(self) -> DeliberationStage | None:
        return next((s for s in self.stages if s.status == StageStatus.ACTIVE), None)

    def next_pending_stage(self) -> DeliberationStage | None:
        """First PENDING stage in sequence order, or None."""
        return next((s for s in self.stages if s.status == StageStatus.PENDING), None)

    def stage_of_type(self, stage_type: StageType) -> DeliberationStage | None:
        """First stage of the given type, or None."""
        return next((s for s in self.stages if s.stage_type == stage_type), None)

    def execution_item(self, task_id: str) -> ExecutionItem | None:
        return next((t for t in self.execution_items if t.task_id == task_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "item_id": self.item_id,
            "title": self.title,
            "description": self.description,
            "requested_decision": self.requested_decision,
            "owner_committee_id": self.owner_committee_id,
            "owner_committee_name": self.owner_committee_name,
            "dependent_committee_ids": list(self.dependent_committee_ids),
            "dependent_committee_names": list(self.dependent_committee_names),
            "business_area": self.business_area,
            "priority": self.priority.value,
            "risk_level": self.risk_level.value,
            "financial_impact": self.financial_impact,
            "strategic_flag": self.strategic_flag,
            "template_id": self.template_id,
            "template_name": self.template_name,
            "deliberation_status": self.deliberation_status.value,
            "created_at": self.created_at.isoformat(),
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "submitted_at": _iso(self.submitted_at),
            "resolved_at": _iso(self.resolved_at),
            "voting_started_at": _iso(self.voting_started_at),
            "voting_closed_at": _iso(self.voting_closed_at),
            "due_date": _iso(self.due_date),
            "stages": [s.to_dict() for s in self.stages],
            "current_stage_id": self.current_stage_id,
            "votes": [v.to_dict() for v in self.votes],
            "vote_result": self.vote_result.value if self.vote_result else None,
            "quorum_required": self.quorum_required,
            "quorum_present": self.quorum_present,
            "vote_history": [h.to_dict() for h in self.vote_history],
            "attachments": [a.to_dict() for a in self.attachments],
            "minutes_summary": self.minutes_summary,
            "minutes": self.minutes.to_dict() if self.minutes else None,
            "execution_items": [t.to_dict() for t in self.execution_items],
            "audit_trail": [e.to_dict() for e in self.audit_trail],
        }
