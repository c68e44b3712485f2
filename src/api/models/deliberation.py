"""Deliberation API request/response models.

Pydantic models for the deliberation workflow endpoints. Responses are
validated from the aggregate's to_dict() output so the JSON shape always
matches the domain record.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation
2. FAIL LOUD - Invalid requests return 422 with RFC 7807
3. TYPE SAFETY - All fields typed
"""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, model_validator

# Custom datetime serializer for ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class RiskLevelEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VoteOptionEnum(str, Enum):
    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"


class ExecutionItemStatusEnum(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LinkedEntityTypeEnum(str, Enum):
    PROJECT = "project"
    CONTRACT = "contract"
    RISK = "risk"


class AttachmentTypeEnum(str, Enum):
    DOCUMENT = "document"
    LINK = "link"
    OTHER = "other"


# =============================================================================
# Requests
# =============================================================================


class SubmitDeliberationRequest(BaseModel):
    """Request to open a new deliberation.

    Either owner_committee_id or template_id must be provided. The
    boolean flags feed the routing policy that builds the stage plan.
    """

    title: str = Field(..., min_length=1, max_length=300, description="Short title")
    description: str = Field(default="", max_length=10_000)
    requested_decision: str | None = Field(default=None, max_length=2_000)
    owner_committee_id: str | None = Field(default=None, description="Owning committee")
    template_id: str | None = Field(default=None, description="Deliberation template")
    business_area: str = Field(default="", max_length=100)
    risk_level: RiskLevelEnum = Field(default=RiskLevelEnum.MEDIUM)
    financial_impact: float = Field(default=0.0, ge=0)
    margin_percent: float | None = Field(default=None)
    strategic_flag: bool = False
    outside_budget: bool = False
    role_strategic: bool = False
    policy_exception: bool = False
    atypical_contract: bool = False
    technical_investment: bool = False
    security_criticality: bool = False
    ip_license_criticality: bool = False
    aggressive_payment_terms: bool = False
    special_clauses: bool = False
    penalty_exposure: bool = False
    strategic_client: bool = False
    high_ticket: bool = False
    regulatory_exposure: bool = False
    material_financial_impact: bool = False
    material_legal_sensitivity: bool = False
    submit: bool = Field(default=True, description="Submit now or keep as draft")

    @model_validator(mode="after")
    def validate_owner(self) -> "SubmitDeliberationRequest":
        """Require an owner committee or a template."""
        if not self.owner_committee_id and not self.template_id:
            raise ValueError("owner_committee_id or template_id is required")
        return self


class CastVoteRequest(BaseModel):
    vote: VoteOptionEnum
    justification: str | None = Field(default=None, max_length=2_000)
    has_conflict_of_interest: bool = False


class CreateExecutionTaskRequest(BaseModel):
    """Follow-up task to attach to a deliberation."""

    title: str = Field(..., min_length=1, max_length=300)
    owner_name: str = Field(..., min_length=1, max_length=200)
    due_date: datetime | None = None
    linked_entity_type: LinkedEntityTypeEnum | None = None
    linked_entity_id: str | None = Field(default=None, max_length=200)

    @model_validator(mode="after")
    def validate_link(self) -> "CreateExecutionTaskRequest":
        """Linked entity type and id come together or not at all."""
        if (self.linked_entity_type is None) != (self.linked_entity_id is None):
            raise ValueError(
                "linked_entity_type and linked_entity_id must be provided together"
            )
        return self


class UpdateExecutionTaskRequest(BaseModel):
    status: ExecutionItemStatusEnum


class AddEvidenceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    url: str = Field(..., min_length=1, max_length=2_048)
    attachment_type: AttachmentTypeEnum = AttachmentTypeEnum.DOCUMENT


class ReasonRequest(BaseModel):
    """Optional free-text reason for return/withdraw."""

    reason: str | None = Field(default=None, max_length=2_000)


# =============================================================================
# Responses
# =============================================================================


class VotingRuleModel(BaseModel):
    majority_type: str
    quorum_percent: int
    voting_window_hours: int
    tie_break_rule: str


class StageModel(BaseModel):
    stage_id: str
    sequence: int
    stage_type: str
    committee_id: str
    committee_name: str
    status: str
    required: bool
    voting_rule: VotingRuleModel
    opened_at: DateTimeWithZ | None = None
    closed_at: DateTimeWithZ | None = None


class VoteRecordModel(BaseModel):
    vote_id: str
    voter_id: str
    voter_name: str
    vote: str
    justification: str | None = None
    has_conflict_of_interest: bool
    stage_id: str | None = None
    voted_at: DateTimeWithZ


class StageVoteTallyModel(BaseModel):
    stage_id: str | None = None
    yes: int
    no: int
    abstain: int
    result: str
    closed_at: DateTimeWithZ


class AttachmentModel(BaseModel):
    attachment_id: str
    name: str
    url: str
    attachment_type: str


class MinutesModel(BaseModel):
    status: str
    agenda_summary: str
    evidence_list: list[str]
    voting_result: str
    decision_text: str
    action_items: list[str]
    published_at: DateTimeWithZ | None = None


class ExecutionItemModel(BaseModel):
    task_id: str
    title: str
    owner_name: str
    due_date: DateTimeWithZ
    status: str
    linked_entity_type: str | None = None
    linked_entity_id: str | None = None


class AuditTrailEntryModel(BaseModel):
    entry_id: str
    action: str
    description: str
    user_id: str
    user_name: str
    previous_value: str | None = None
    new_value: str | None = None
    timestamp: DateTimeWithZ


class DeliberationResponse(BaseModel):
    """Full deliberation record."""

    item_id: str
    title: str
    description: str
    requested_decision: str
    owner_committee_id: str
    owner_committee_name: str
    dependent_committee_ids: list[str]
    dependent_committee_names: list[str]
    business_area: str
    priority: str
    risk_level: str
    financial_impact: float
    strategic_flag: bool
    template_id: str | None = None
    template_name: str | None = None
    deliberation_status: str
    created_at: DateTimeWithZ
    created_by: str
    created_by_name: str
    submitted_at: DateTimeWithZ | None = None
    resolved_at: DateTimeWithZ | None = None
    voting_started_at: DateTimeWithZ | None = None
    voting_closed_at: DateTimeWithZ | None = None
    due_date: DateTimeWithZ | None = None
    stages: list[StageModel]
    current_stage_id: str | None = None
    votes: list[VoteRecordModel]
    vote_result: str | None = None
    quorum_required: int | None = None
    quorum_present: int | None = None
    vote_history: list[StageVoteTallyModel]
    attachments: list[AttachmentModel]
    minutes_summary: str | None = None
    minutes: MinutesModel | None = None
    execution_items: list[ExecutionItemModel]
    audit_trail: list[AuditTrailEntryModel]


class DeliberationSummaryModel(BaseModel):
    """List row of the deliberation queue."""

    item_id: str
    title: str
    owner_committee_id: str
    owner_committee_name: str
    deliberation_status: str
    priority: str
    risk_level: str
    current_stage_id: str | None = None
    due_date: DateTimeWithZ | None = None
    resolved_at: DateTimeWithZ | None = None


class DeliberationListResponse(BaseModel):
    items: list[DeliberationSummaryModel]
    total: int


class QueueCountsResponse(BaseModel):
    """Item count per status; every status is present."""

    counts: dict[str, int]


class BoardHealthKpisResponse(BaseModel):
    open_count: int
    in_voting_count: int
    overdue_count: int
    resolved_recently_count: int
    average_resolution_days: float | None = None


class DeliberationErrorResponse(BaseModel):
    """RFC 7807 problem details."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
