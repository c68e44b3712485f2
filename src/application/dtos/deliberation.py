"""Deliberation DTOs for the application layer.

Dataclass-based DTOs for the deliberation command and query services.
The API layer maps its pydantic request models onto these so that the
dependency flows inward: API -> Application.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.domain.models.deliberation_item import DeliberationStatus, RiskLevel


@dataclass(frozen=True)
class SubmitDeliberationDTO:
    """Payload of a new deliberation request.

    Either owner_committee_id or a template_id (whose template names the
    owner) must be given. The boolean flags feed the routing policy.

    Attributes:
        title: Short title (required, non-blank).
        description: Free-text description.
        requested_decision: Decision asked for; defaults to description.
        owner_committee_id: Committee accountable for the decision.
        template_id: Deliberation template identifier.
        business_area: Business area label.
        risk_level: Assessed risk.
        financial_impact: Monetary magnitude.
        margin_percent: Sales margin, when applicable.
        strategic_flag: Strategic decision.
        submit: Submit immediately (True) or keep as draft (False).
    """

    title: str
    description: str = ""
    requested_decision: str | None = None
    owner_committee_id: str | None = None
    template_id: str | None = None
    business_area: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM
    financial_impact: float = 0.0
    margin_percent: float | None = None
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
    submit: bool = True


class KpiBucket(str, Enum):
    """Board health KPI buckets usable as list filters.

    Values:
        OPEN: Any non-final working status.
        IN_VOTING: Voting window open.
        OVERDUE: Due date in the past.
        RESOLVED_30D: Resolved within the configured look-back.
        AVG_RESOLUTION: Every item with a resolution time.
    """

    OPEN = "open"
    IN_VOTING = "in_voting"
    OVERDUE = "overdue"
    RESOLVED_30D = "resolved_30d"
    AVG_RESOLUTION = "avg_resolution"


@dataclass(frozen=True)
class DeliberationFilterDTO:
    """Filter of the deliberation list.

    A KPI bucket, when given, replaces the status filter.

    Attributes:
        status: Queue (status) to show.
        committee_id: Only items owned by this committee.
        search: Case-insensitive match on title or description.
        kpi: KPI bucket.
    """

    status: DeliberationStatus | None = None
    committee_id: str | None = None
    search: str | None = None
    kpi: KpiBucket | None = None


@dataclass(frozen=True)
class BoardHealthKpisDTO:
    """Board health panel figures.

    Attributes:
        open_count: Items in an open status.
        in_voting_count: Items with an open voting window.
        overdue_count: Items past their due date.
        resolved_recently_count: Items resolved within the look-back.
        average_resolution_days: Mean submit-to-resolution time, or None.
    """

    open_count: int
    in_voting_count: int
    overdue_count: int
    resolved_recently_count: int
    average_resolution_days: float | None = field(default=None)
