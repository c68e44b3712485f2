"""Stage plan builder (voting rule resolver).

Builds the ordered stage plan for a new deliberation from business-policy
inputs. The policy is table-driven: each table is an ordered list of
rules, and the builder only walks the tables. Adding a routing rule means
adding a row, never another nested conditional.

Plan shape:
    owner_review (owner)
    dependent_review (one per triggered dependent committee)
    final_approval (board, when an escalation rule fires)
    publish_minutes (owner)
    execution (owner)

The builder is pure and deterministic: identical inputs always produce an
identical plan, including stage ids.

Usage:
    from src.domain.services.stage_plan_builder import RoutingInput, build_stage_plan

    stages = build_stage_plan(RoutingInput(owner_committee_id="hr", financial_impact=750_000))
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable

from src.domain.models.committee import Committee
from src.domain.models.deliberation_item import RiskLevel
from src.domain.models.deliberation_stage import (
    DeliberationStage,
    StageType,
    make_stage_id,
)
from src.domain.models.routing_policy import (
    BOARD_COMMITTEE_ID,
    COMMITTEES_BY_ID,
    DEFAULT_POLICY_THRESHOLDS,
    MAX_VOTING_WINDOW_HOURS,
    VOTING_RULES_BY_COMMITTEE,
    PolicyThresholds,
)
from src.domain.models.voting_rule import MajorityType, VotingRule


@dataclass(frozen=True)
class RoutingInput:
    """Business-policy inputs that determine the stage plan.

    Attributes:
        owner_committee_id: Committee accountable for the decision.
        financial_impact: Monetary magnitude of the decision.
        risk_level: Assessed risk level.
        margin_percent: Sales margin; None means not applicable.
        Remaining attributes are boolean business flags.
    """

    owner_committee_id: str
    financial_impact: float = 0.0
    risk_level: RiskLevel = RiskLevel.MEDIUM
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


Predicate = Callable[[RoutingInput, PolicyThresholds], bool]


@dataclass(frozen=True)
class DependentCommitteeRule:
    """Adds a dependent review when `applies` holds for the owner committee."""

    owner_committee_id: str
    dependent_committee_id: str
    reason: str
    applies: Predicate


@dataclass(frozen=True)
class BoardEscalationRule:
    """Adds a final board approval when `applies` holds.

    owner_committee_id None means the rule applies to every owner.
    """

    reason: str
    applies: Predicate
    owner_committee_id: str | None = field(default=None)


@dataclass(frozen=True)
class VotingRuleEscalation:
    """Raises a voting stage's rule when `applies` holds.

    Escalations never lower the majority type; window extensions add up
    and are capped at MAX_VOTING_WINDOW_HOURS.
    """

    reason: str
    applies: Callable[[RoutingInput, PolicyThresholds, StageType], bool]
    minimum_majority: MajorityType
    extra_window_hours: int = 0


def _elevated_risk(i: RoutingInput, _t: PolicyThresholds) -> bool:
    return i.risk_level.is_elevated()


DEPENDENT_COMMITTEE_RULES: tuple[DependentCommitteeRule, ...] = (
    # HR
    DependentCommitteeRule(
        "hr", "finance", "impact above HR threshold or outside budget",
        lambda i, t: i.financial_impact > t.hr_finance or i.outside_budget,
    ),
    DependentCommitteeRule("hr", "legal", "elevated risk", _elevated_risk),
    # Finance
    DependentCommitteeRule(
        "finance", "legal", "atypical contract", lambda i, t: i.atypical_contract
    ),
    DependentCommitteeRule("finance", "risk", "elevated risk", _elevated_risk),
    DependentCommitteeRule(
        "finance", "rnd", "technical investment", lambda i, t: i.technical_investment
    ),
    # R&D
    DependentCommitteeRule(
        "rnd", "finance", "impact above R&D threshold",
        lambda i, t: i.financial_impact > t.rnd_finance,
    ),
    DependentCommitteeRule(
        "rnd", "risk", "security criticality or elevated risk",
        lambda i, t: i.security_criticality or i.risk_level.is_elevated(),
    ),
    DependentCommitteeRule(
        "rnd", "legal", "IP/license criticality", lambda i, t: i.ip_license_criticality
    ),
    # Sales
    DependentCommitteeRule(
        "sales", "finance", "low margin or aggressive payment terms",
        lambda i, t: (
            (i.margin_percent if i.margin_percent is not None else 100)
            < t.sales_margin_percent
            or i.aggressive_payment_terms
        ),
    ),
    DependentCommitteeRule(
        "sales", "legal", "special clauses or penalty exposure",
        lambda i, t: i.special_clauses or i.penalty_exposure,
    ),
    DependentCommitteeRule("sales", "risk", "elevated risk", _elevated_risk),
    # Risk
    DependentCommitteeRule(
        "risk", "legal", "regulatory exposure", lambda i, t: i.regulatory_exposure
    ),
    # Legal
    DependentCommitteeRule(
        "legal", "finance", "material financial impact",
        lambda i, t: i.material_financial_impact,
    ),
)

BOARD_ESCALATION_RULES: tuple[BoardEscalationRule, ...] = (
    BoardEscalationRule(
        "strategic decision, strategic role, policy exception or legal sensitivity",
        lambda i, t: (
            i.strategic_flag
            or i.role_strategic
            or i.policy_exception
            or i.material_legal_sensitivity
        ),
    ),
    BoardEscalationRule(
        "CAPEX above board threshold",
        lambda i, t: i.financial_impact > t.finance_board_capex,
        owner_committee_id="finance",
    ),
    BoardEscalationRule(
        "high ticket, strategic client or ticket above board threshold",
        lambda i, t: (
            i.high_ticket
            or i.strategic_client
            or i.financial_impact > t.sales_board_ticket
        ),
        owner_committee_id="sales",
    ),
    BoardEscalationRule(
        "critical risk exception",
        lambda i, t: i.risk_level == RiskLevel.CRITICAL,
        owner_committee_id="risk",
    ),
)

VOTING_RULE_ESCALATIONS: tuple[VotingRuleEscalation, ...] = (
    VotingRuleEscalation(
        "elevated risk",
        lambda i, t, _s: i.risk_level.is_elevated(),
        minimum_majority=MajorityType.QUALIFIED_TWO_THIRDS,
        extra_window_hours=24,
    ),
    VotingRuleEscalation(
        "material financial impact",
        lambda i, t, _s: i.financial_impact > t.material_impact,
        minimum_majority=MajorityType.QUALIFIED_TWO_THIRDS,
        extra_window_hours=24,
    ),
    VotingRuleEscalation(
        "critical risk at final approval",
        lambda i, t, s: (
            i.risk_level == RiskLevel.CRITICAL and s == StageType.FINAL_APPROVAL
        ),
        minimum_majority=MajorityType.UNANIMITY,
    ),
)


def committee_by_id(committee_id: str) -> Committee:
    """Look up a committee, falling back to the board for unknown ids."""
    return COMMITTEES_BY_ID.get(committee_id, COMMITTEES_BY_ID[BOARD_COMMITTEE_ID])


def compute_dependent_committees(
    routing_input: RoutingInput,
    thresholds: PolicyThresholds = DEFAULT_POLICY_THRESHOLDS,
) -> tuple[str, ...]:
    """Return dependent committee ids in rule order, without duplicates.

    Args:
        routing_input: Policy inputs.
        thresholds: Routing thresholds.

    Returns:
        Ordered tuple of dependent committee ids.
    """
    dependents: list[str] = []
    for rule in DEPENDENT_COMMITTEE_RULES:
        if rule.owner_committee_id != routing_input.owner_committee_id:
            continue
        if rule.dependent_committee_id in dependents:
            continue
        if rule.applies(routing_input, thresholds):
            dependents.append(rule.dependent_committee_id)
    return tuple(dependents)


def board_required(
    routing_input: RoutingInput,
    thresholds: PolicyThresholds = DEFAULT_POLICY_THRESHOLDS,
) -> bool:
    """Check whether any board escalation rule fires."""
    return any(
        rule.applies(routing_input, thresholds)
        for rule in BOARD_ESCALATION_RULES
        if rule.owner_committee_id in (None, routing_input.owner_committee_id)
    )


def resolve_voting_rule(
    committee_id: str,
    stage_type: StageType,
    routing_input: RoutingInput,
    thresholds: PolicyThresholds = DEFAULT_POLICY_THRESHOLDS,
) -> VotingRule:
    """Derive a stage's voting rule from the committee base rule and escalations.

    Args:
        committee_id: Committee owning the stage.
        stage_type: Kind of stage.
        routing_input: Policy inputs.
        thresholds: Routing thresholds.

    Returns:
        The escalated voting rule. Non-voting stages keep the base rule.
    """
    rule = VOTING_RULES_BY_COMMITTEE.get(
        committee_id, VOTING_RULES_BY_COMMITTEE[BOARD_COMMITTEE_ID]
    )
    if not stage_type.is_voting_stage():
        return rule

    majority = rule.majority_type
    window = rule.voting_window_hours
    for escalation in VOTING_RULE_ESCALATIONS:
        if not escalation.applies(routing_input, thresholds, stage_type):
            continue
        if escalation.minimum_majority.is_stricter_than(majority):
            majority = escalation.minimum_majority
        window += escalation.extra_window_hours

    return replace(
        rule,
        majority_type=majority,
        voting_window_hours=min(window, MAX_VOTING_WINDOW_HOURS),
    )


def _make_stage(
    sequence: int,
    stage_type: StageType,
    committee_id: str,
    routing_input: RoutingInput,
    thresholds: PolicyThresholds,
) -> DeliberationStage:
    committee = committee_by_id(committee_id)
    return DeliberationStage(
        stage_id=make_stage_id(sequence, committee.committee_id),
        sequence=sequence,
        stage_type=stage_type,
        committee_id=committee.committee_id,
        committee_name=committee.name,
        voting_rule=resolve_voting_rule(
            committee.committee_id, stage_type, routing_input, thresholds
        ),
    )


def build_stage_plan(
    routing_input: RoutingInput,
    thresholds: PolicyThresholds = DEFAULT_POLICY_THRESHOLDS,
) -> tuple[DeliberationStage, ...]:
    """Build the ordered stage plan for a new deliberation.

    All stages are returned PENDING; submission activates the first one.

    Args:
        routing_input: Policy inputs.
        thresholds: Routing thresholds.

    Returns:
        Ordered tuple of stages with sequences 1..n.
    """
    owner = routing_input.owner_committee_id
    plan: list[tuple[StageType, str]] = [(StageType.OWNER_REVIEW, owner)]
    plan.extend(
        (StageType.DEPENDENT_REVIEW, committee_id)
        for committee_id in compute_dependent_committees(routing_input, thresholds)
    )
    if board_required(routing_input, thresholds):
        plan.append((StageType.FINAL_APPROVAL, BOARD_COMMITTEE_ID))
    plan.append((StageType.PUBLISH_MINUTES, owner))
    plan.append((StageType.EXECUTION, owner))

    return tuple(
        _make_stage(sequence, stage_type, committee_id, routing_input, thresholds)
        for sequence, (stage_type, committee_id) in enumerate(plan, start=1)
    )
