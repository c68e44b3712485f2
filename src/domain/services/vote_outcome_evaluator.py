"""Vote tally and outcome evaluator.

This module is the single source of truth for deciding a stage's vote.
It is pure: given the same item it always returns the same outcome, and
it never raises. An undecidable vote still yields a safe, auditable
result by falling back to a plain yes > no comparison.

Algorithm:
    1. Count yes/no/abstain among cast votes
    2. quorum_present < quorum_required -> NO_QUORUM (takes precedence)
    3. Dispatch on the current stage's majority type:
       - QUALIFIED_TWO_THIRDS: counted > 0 and yes / (yes + no) >= 2/3
       - UNANIMITY: no == 0 and yes > 0
       - SIMPLE: yes > no; exact tie resolved by the tie-break rule
    4. No current stage -> yes > no
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable

from src.domain.models.deliberation_item import DeliberationItem, VoteResult
from src.domain.models.voting_rule import MajorityType, TieBreakRule, VotingRule
from src.domain.models.vote_record import VoteOption, VoteRecord, VoteTally

# Quorum assumed when an item has never had quorum computed
FALLBACK_QUORUM_REQUIRED = 3

TWO_THIRDS = Fraction(2, 3)


@dataclass(frozen=True, eq=True)
class VoteOutcome:
    """Outcome of evaluating a stage's votes.

    Attributes:
        approved: True only for an APPROVED result.
        result: APPROVED, REJECTED or NO_QUORUM.
        tally: Counts the decision was based on.
    """

    approved: bool
    result: VoteResult
    tally: VoteTally

    @classmethod
    def decided(cls, approved: bool, tally: VoteTally) -> VoteOutcome:
        return cls(
            approved=approved,
            result=VoteResult.APPROVED if approved else VoteResult.REJECTED,
            tally=tally,
        )

    @classmethod
    def no_quorum(cls, tally: VoteTally) -> VoteOutcome:
        return cls(approved=False, result=VoteResult.NO_QUORUM, tally=tally)


def tally_votes(votes: Iterable[VoteRecord]) -> VoteTally:
    """Count yes/no/abstain votes.

    Args:
        votes: Cast vote records.

    Returns:
        VoteTally with one count per option.
    """
    yes = no = abstain = 0
    for record in votes:
        if record.vote == VoteOption.YES:
            yes += 1
        elif record.vote == VoteOption.NO:
            no += 1
        else:
            abstain += 1
    return VoteTally(yes=yes, no=no, abstain=abstain)


def compute_quorum_required(quorum_percent: float, population: int) -> int:
    """Turn a quorum percentage into a head count.

    Args:
        quorum_percent: Percentage of the population that must vote.
        population: Expected number of voters.

    Returns:
        max(1, ceil(quorum_percent / 100 * population)).
    """
    # Fraction keeps 60% of 5 at exactly 3 instead of 3.0000000000000004
    required = math.ceil(Fraction(str(quorum_percent)) * population / 100)
    return max(1, required)


def is_quorum_reached(item: DeliberationItem) -> bool:
    """Check participation against the item's quorum requirement."""
    present = item.quorum_present if item.quorum_present is not None else len(item.votes)
    required = (
        item.quorum_required
        if item.quorum_required is not None
        else FALLBACK_QUORUM_REQUIRED
    )
    return present >= required


def apply_majority_rule(tally: VoteTally, rule: VotingRule) -> bool:
    """Decide approval of a quorate vote under a voting rule.

    Args:
        tally: Vote counts.
        rule: Voting rule of the stage.

    Returns:
        True if the rule approves the tally.
    """
    if rule.majority_type == MajorityType.QUALIFIED_TWO_THIRDS:
        if tally.counted == 0:
            return False
        # Exact rational comparison so 4/6 sits on the boundary, not below it
        return Fraction(tally.yes, tally.counted) >= TWO_THIRDS

    if rule.majority_type == MajorityType.UNANIMITY:
        return tally.no == 0 and tally.yes > 0

    if tally.yes == tally.no:
        return rule.tie_break_rule == TieBreakRule.CHAIR_YES
    return tally.yes > tally.no


def evaluate_vote_result(item: DeliberationItem) -> VoteOutcome:
    """Compute approve/reject/no-quorum for the item's current stage.

    Args:
        item: Deliberation whose current votes are evaluated.

    Returns:
        VoteOutcome; never raises.
    """
    tally = tally_votes(item.votes)

    if not is_quorum_reached(item):
        return VoteOutcome.no_quorum(tally)

    stage = item.current_stage
    if stage is None:
        return VoteOutcome.decided(tally.yes > tally.no, tally)

    return VoteOutcome.decided(apply_majority_rule(tally, stage.voting_rule), tally)
