"""Domain models for the deliberation engine.

Contains value objects and the DeliberationItem aggregate. These models
are immutable and contain no infrastructure dependencies.
"""

from src.domain.models.actor import SYSTEM_ACTOR, Actor
from src.domain.models.audit_trail import AuditAction, AuditTrailEntry
from src.domain.models.committee import Committee
from src.domain.models.deliberation_item import (
    Attachment,
    AttachmentType,
    DeliberationItem,
    DeliberationStatus,
    Priority,
    RiskLevel,
    StageVoteTally,
    VoteResult,
)
from src.domain.models.deliberation_stage import (
    DeliberationStage,
    StageStatus,
    StageType,
)
from src.domain.models.execution_item import (
    ExecutionItem,
    ExecutionItemStatus,
    ExecutionTaskSpec,
    LinkedEntityType,
)
from src.domain.models.minutes import Minutes, MinutesStatus
from src.domain.models.vote_record import VoteOption, VoteRecord, VoteTally
from src.domain.models.voting_rule import MajorityType, TieBreakRule, VotingRule

__all__: list[str] = [
    "Actor",
    "Attachment",
    "AttachmentType",
    "AuditAction",
    "AuditTrailEntry",
    "Committee",
    "DeliberationItem",
    "DeliberationStage",
    "DeliberationStatus",
    "ExecutionItem",
    "ExecutionItemStatus",
    "ExecutionTaskSpec",
    "LinkedEntityType",
    "MajorityType",
    "Minutes",
    "MinutesStatus",
    "Priority",
    "RiskLevel",
    "SYSTEM_ACTOR",
    "StageStatus",
    "StageType",
    "StageVoteTally",
    "TieBreakRule",
    "VoteOption",
    "VoteRecord",
    "VoteResult",
    "VoteTally",
    "VotingRule",
]
