"""Routing policy reference data.

This module holds the static policy tables consumed by the stage plan
builder: the committee catalogue, each committee's base voting rule, the
monetary thresholds that trigger extra reviews, and the deliberation
templates offered to requesters.

The tables are plain data so the routing decision stays auditable; the
rules that interpret them live in src.domain.services.stage_plan_builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from src.domain.models.committee import Committee
from src.domain.models.voting_rule import MajorityType, TieBreakRule, VotingRule

BOARD_COMMITTEE_ID = "board"

COMMITTEES: tuple[Committee, ...] = (
    Committee(committee_id="board", name="Executive Board", code="BOARD"),
    Committee(committee_id="hr", name="HR Committee", code="HR"),
    Committee(committee_id="finance", name="Finance Committee", code="FINANCE"),
    Committee(committee_id="rnd", name="R&D Committee", code="RND"),
    Committee(committee_id="sales", name="Sales Committee", code="SALES"),
    Committee(committee_id="risk", name="Risk Committee", code="RISK"),
    Committee(committee_id="legal", name="Legal Committee", code="LEGAL"),
)

COMMITTEES_BY_ID: Mapping[str, Committee] = MappingProxyType(
    {c.committee_id: c for c in COMMITTEES}
)

# Base voting rule per committee, before risk/impact escalation
VOTING_RULES_BY_COMMITTEE: Mapping[str, VotingRule] = MappingProxyType(
    {
        "board": VotingRule(
            majority_type=MajorityType.QUALIFIED_TWO_THIRDS,
            quorum_percent=75,
            voting_window_hours=72,
            tie_break_rule=TieBreakRule.CHAIR_YES,
        ),
        "hr": VotingRule(
            majority_type=MajorityType.SIMPLE,
            quorum_percent=60,
            voting_window_hours=48,
            tie_break_rule=TieBreakRule.CHAIR_YES,
        ),
        "finance": VotingRule(
            majority_type=MajorityType.QUALIFIED_TWO_THIRDS,
            quorum_percent=66,
            voting_window_hours=72,
            tie_break_rule=TieBreakRule.CHAIR_NO,
        ),
        "rnd": VotingRule(
            majority_type=MajorityType.SIMPLE,
            quorum_percent=60,
            voting_window_hours=72,
            tie_break_rule=TieBreakRule.CHAIR_YES,
        ),
        "sales": VotingRule(
            majority_type=MajorityType.SIMPLE,
            quorum_percent=60,
            voting_window_hours=48,
            tie_break_rule=TieBreakRule.CHAIR_YES,
        ),
        "risk": VotingRule(
            majority_type=MajorityType.QUALIFIED_TWO_THIRDS,
            quorum_percent=66,
            voting_window_hours=48,
            tie_break_rule=TieBreakRule.CHAIR_NO,
        ),
        "legal": VotingRule(
            majority_type=MajorityType.QUALIFIED_TWO_THIRDS,
            quorum_percent=66,
            voting_window_hours=48,
            tie_break_rule=TieBreakRule.CHAIR_NO,
        ),
    }
)

# Longest advisory voting window after escalation (one week)
MAX_VOTING_WINDOW_HOURS = 168


@dataclass(frozen=True)
class PolicyThresholds:
    """Monetary and percentage cut-offs used by the routing rules.

    Attributes:
        hr_finance: HR impact above which Finance must review.
        finance_board_capex: Finance CAPEX above which the Board must approve.
        rnd_finance: R&D impact above which Finance must review.
        sales_margin_percent: Sales margin below which Finance must review.
        sales_board_ticket: Sales ticket above which the Board must approve.
        material_impact: Impact above which voting rules are escalated.
    """

    hr_finance: float = 500_000
    finance_board_capex: float = 5_000_000
    rnd_finance: float = 1_000_000
    sales_margin_percent: float = 20
    sales_board_ticket: float = 4_000_000
    material_impact: float = 1_000_000


DEFAULT_POLICY_THRESHOLDS = PolicyThresholds()


@dataclass(frozen=True)
class DeliberationTemplate:
    """A named deliberation type with its owning committee."""

    template_id: str
    name: str
    owner_committee_id: str


DELIBERATION_TEMPLATES: tuple[DeliberationTemplate, ...] = (
    DeliberationTemplate("HR_HIRING_APPROVAL", "Hiring Approval (HR)", "hr"),
    DeliberationTemplate("HR_TERMINATION_APPROVAL", "Termination Approval (HR)", "hr"),
    DeliberationTemplate("FINANCE_CAPEX_APPROVAL", "CAPEX Approval (Finance)", "finance"),
    DeliberationTemplate("RND_INVESTMENT_APPROVAL", "Investment Approval (R&D)", "rnd"),
    DeliberationTemplate("SALES_PROJECT_APPROVAL", "Project Approval (Sales)", "sales"),
    DeliberationTemplate("RISK_EXCEPTION_APPROVAL", "Risk Exception Approval", "risk"),
    DeliberationTemplate("LEGAL_MATERIAL_DECISION", "Material Legal Decision", "legal"),
)


def resolve_template(template_id: str | None) -> DeliberationTemplate | None:
    """Look up a deliberation template by id.

    Args:
        template_id: Template identifier, or None.

    Returns:
        The matching template, or None if unknown.
    """
    if template_id is None:
        return None
    return next((t for t in DELIBERATION_TEMPLATES if t.template_id == template_id), None)
