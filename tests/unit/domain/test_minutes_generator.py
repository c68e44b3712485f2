"""Unit tests for the minutes generator."""

from __future__ import annotations

from dataclasses import replace

from src.domain.models.deliberation_item import Attachment, StageVoteTally, VoteResult
from src.domain.models.execution_item import ExecutionItem
from src.domain.models.minutes import MinutesStatus
from src.domain.models.vote_record import VoteOption, VoteTally
from src.domain.services.minutes_generator import (
    DECISION_APPROVED,
    DECISION_REJECTED,
    NO_ACTIONS,
    NO_EVIDENCE,
    format_tally,
    generate_minutes,
    has_votes_for_minutes,
    resolve_minutes_tally,
)
from tests.helpers.deliberation_factory import T0, make_item, make_voting_item

Y, N, A = VoteOption.YES, VoteOption.NO, VoteOption.ABSTAIN


def test_format_tally() -> None:
    assert format_tally(VoteTally(yes=3, no=1, abstain=2)) == "Yes 3 | No 1 | Abstain 2"


class TestGenerateMinutes:
    def test_summary_lines(self) -> None:
        item = replace(
            make_voting_item(votes=(Y, Y, Y, N), title="Adopt hybrid work policy"),
            vote_result=VoteResult.APPROVED,
            attachments=(
                Attachment("a-1", "Policy draft", "https://files/policy.pdf"),
                Attachment("a-2", "Survey", "https://files/survey.pdf"),
            ),
            execution_items=(
                ExecutionItem("t-1", "Announce policy", "People Ops", T0),
                ExecutionItem("t-2", "Update handbook", "Legal", T0),
            ),
        )

        draft = generate_minutes(item)

        assert draft.summary.split("\n") == [
            "Agenda summary: Adopt hybrid work policy",
            "Evidence list: Policy draft, Survey",
            "Voting result: Yes 3 | No 1 | Abstain 0",
            "Decision text: Resolved Approved",
            "Actions: Announce policy (People Ops); Update handbook (Legal)",
        ]
        assert draft.minutes.status == MinutesStatus.DRAFT
        assert draft.minutes.evidence_list == ("Policy draft", "Survey")
        assert draft.minutes.action_items == (
            "Announce policy (People Ops)",
            "Update handbook (Legal)",
        )
        assert draft.minutes.published_at is None

    def test_placeholders_when_empty(self) -> None:
        item = replace(make_voting_item(votes=(N, N, Y)), vote_result=VoteResult.REJECTED)

        draft = generate_minutes(item)

        assert f"Evidence list: {NO_EVIDENCE}" in draft.summary
        assert f"Actions: {NO_ACTIONS}" in draft.summary
        assert draft.minutes.decision_text == DECISION_REJECTED

    def test_anything_but_approved_reads_rejected(self) -> None:
        item = replace(make_voting_item(votes=(Y,)), vote_result=VoteResult.NO_QUORUM)

        assert generate_minutes(item).minutes.decision_text == DECISION_REJECTED

    def test_pure(self) -> None:
        item = replace(make_voting_item(votes=(Y, Y, A)), vote_result=VoteResult.APPROVED)

        assert generate_minutes(item) == generate_minutes(item)
        assert generate_minutes(item).minutes.decision_text == DECISION_APPROVED


class TestMinutesTally:
    def test_current_votes_win(self) -> None:
        item = make_voting_item(votes=(Y, A))

        assert resolve_minutes_tally(item) == VoteTally(yes=1, abstain=1)

    def test_latest_history_when_votes_cleared(self) -> None:
        item = make_item(
            vote_history=(
                StageVoteTally("stage-1-hr", VoteTally(yes=1), VoteResult.NO_QUORUM, T0),
                StageVoteTally("stage-1-hr", VoteTally(yes=4, no=1), VoteResult.APPROVED, T0),
            )
        )

        assert resolve_minutes_tally(item) == VoteTally(yes=4, no=1)
        assert has_votes_for_minutes(item)

    def test_no_votes_at_all(self) -> None:
        item = make_item()

        assert not has_votes_for_minutes(item)
        assert resolve_minutes_tally(item) == VoteTally()
