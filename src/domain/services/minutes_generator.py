"""Minutes generator.

Renders the resolution minutes of a deliberation as a pure projection of
its current state: agenda, evidence, vote tally, decision and action
items. No I/O, no clock; publication is a separate state-machine step.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.models.deliberation_item import DeliberationItem, VoteResult
from src.domain.models.minutes import Minutes, MinutesStatus
from src.domain.models.vote_record import VoteTally
from src.domain.services.vote_outcome_evaluator import tally_votes

DECISION_APPROVED = "Resolved Approved"
DECISION_REJECTED = "Resolved Rejected"
NO_EVIDENCE = "Not provided"
NO_ACTIONS = "No actions at this time"


@dataclass(frozen=True, eq=True)
class MinutesDraft:
    """Rendered minutes.

    Attributes:
        summary: Multi-line text summary.
        minutes: Structured draft minutes.
    """

    summary: str
    minutes: Minutes


def format_tally(tally: VoteTally) -> str:
    """Render a tally as "Yes X | No Y | Abstain Z"."""
    return f"Yes {tally.yes} | No {tally.no} | Abstain {tally.abstain}"


def resolve_minutes_tally(item: DeliberationItem) -> VoteTally:
    """Pick the tally the minutes report.

    Current votes win; once the stage has advanced and votes were
    cleared, the most recent closed tally is used.
    """
    if item.votes:
        return tally_votes(item.votes)
    if item.vote_history:
        return item.vote_history[-1].tally
    return VoteTally()


def has_votes_for_minutes(item: DeliberationItem) -> bool:
    """Minutes are computable once any vote exists, current or closed."""
    return bool(item.votes) or bool(item.vote_history)


def generate_minutes(item: DeliberationItem) -> MinutesDraft:
    """Build draft minutes for a deliberation.

    Args:
        item: The deliberation to summarise.

    Returns:
        MinutesDraft with the text summary and structured minutes.
    """
    evidence = tuple(a.name for a in item.attachments)
    actions = tuple(task.summary() for task in item.execution_items)
    voting_result = format_tally(resolve_minutes_tally(item))
    decision = (
        DECISION_APPROVED if item.vote_result == VoteResult.APPROVED else DECISION_REJECTED
    )

    summary = "\n".join(
        [
            f"Agenda summary: {item.title}",
            f"Evidence list: {', '.join(evidence) or NO_EVIDENCE}",
            f"Voting result: {voting_result}",
            f"Decision text: {decision}",
            f"Actions: {'; '.join(actions) if actions else NO_ACTIONS}",
        ]
    )

    return MinutesDraft(
        summary=summary,
        minutes=Minutes(
            status=MinutesStatus.DRAFT,
            agenda_summary=item.title,
            evidence_list=evidence,
            voting_result=voting_result,
            decision_text=decision,
            action_items=actions,
        ),
    )
