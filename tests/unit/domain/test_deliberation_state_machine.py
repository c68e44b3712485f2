"""Unit tests for the deliberation state machine."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from src.domain.errors.deliberation import (
    ExecutionTaskNotFoundError,
    InvalidTransitionError,
    StageNotFoundError,
)
from src.domain.models.actor import Actor
from src.domain.models.audit_trail import AuditAction
from src.domain.models.committee import Committee
from src.domain.models.deliberation_item import (
    DeliberationItem,
    DeliberationStatus,
    Priority,
    RiskLevel,
    VoteResult,
)
from src.domain.models.deliberation_stage import StageStatus, StageType
from src.domain.models.execution_item import ExecutionItemStatus, ExecutionTaskSpec
from src.domain.models.minutes import MinutesStatus
from src.domain.models.vote_record import VoteOption
from src.domain.services.deliberation_state_machine import (
    DeliberationStateMachine,
    status_for_stage,
)
from tests.helpers.deliberation_factory import (
    T0,
    make_item,
    make_stage,
    sequential_ids,
    two_stage_plan,
)

HR = Committee(committee_id="hr", name="HR Committee", code="HR")
Y, N, A = VoteOption.YES, VoteOption.NO, VoteOption.ABSTAIN


@pytest.fixture
def machine() -> DeliberationStateMachine:
    return DeliberationStateMachine(id_factory=sequential_ids())


@pytest.fixture
def strict_machine() -> DeliberationStateMachine:
    return DeliberationStateMachine(strict=True, id_factory=sequential_ids())


def draft(machine: DeliberationStateMachine, actor: Actor, stages=None) -> DeliberationItem:
    return machine.create_draft(
        actor,
        now=T0,
        title="Hire a staff engineer",
        description="Open a senior position",
        owner_committee=HR,
        stages=stages or two_stage_plan(),
    )


def in_voting(
    machine: DeliberationStateMachine, actor: Actor, stages=None
) -> DeliberationItem:
    item = machine.submit(draft(machine, actor, stages), actor, now=T0, voter_population=5)
    return machine.start_voting(item, actor, now=T0, voter_population=5)


def vote_all(
    machine: DeliberationStateMachine,
    item: DeliberationItem,
    voters: list[Actor],
    options: tuple[VoteOption, ...],
) -> DeliberationItem:
    for voter, option in zip(voters, options):
        item = machine.cast_vote(item, voter, now=T0 + timedelta(hours=1), vote=option)
    return item


def active_stages(item: DeliberationItem) -> list[str]:
    return [s.stage_id for s in item.stages if s.status == StageStatus.ACTIVE]


class TestCreateDraft:
    def test_draft_fields(self, machine: DeliberationStateMachine, requester: Actor) -> None:
        item = machine.create_draft(
            requester,
            now=T0,
            title="Capex",
            description="New line",
            owner_committee=HR,
            stages=two_stage_plan(),
            risk_level=RiskLevel.CRITICAL,
        )

        assert item.deliberation_status == DeliberationStatus.DRAFT
        assert item.priority == Priority.CRITICAL
        assert item.requested_decision == "New line"
        assert item.business_area == "HR"
        assert item.created_by == requester.actor_id
        assert item.audit_trail == ()
        assert item.current_stage_id is None


class TestSubmit:
    def test_activates_first_stage_and_writes_two_entries(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0, voter_population=5)

        assert item.deliberation_status == DeliberationStatus.SUBMITTED
        assert item.submitted_at == T0
        assert item.current_stage_id == "stage-1-hr"
        assert active_stages(item) == ["stage-1-hr"]
        assert item.quorum_required == 3
        assert len(item.audit_trail) == 2
        # newest first
        assert item.audit_trail[0].action == AuditAction.STAGE_TRANSITIONED
        assert item.audit_trail[0].description == "Owning committee assigned: HR Committee"
        assert item.audit_trail[1].action == AuditAction.STATUS_CHANGED
        assert item.audit_trail[1].new_value == "submitted"

    def test_unknown_population_uses_default(self, requester: Actor) -> None:
        machine = DeliberationStateMachine(default_voter_population=10)

        item = machine.submit(draft(machine, requester), requester, now=T0)

        assert item.quorum_required == 6

    def test_submit_twice_is_rejected(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)

        assert machine.submit(item, requester, now=T0) is item

    def test_no_stage_to_activate(
        self, strict_machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = make_item(stages=())

        with pytest.raises(InvalidTransitionError, match="no stage to activate"):
            strict_machine.submit(item, requester, now=T0)


class TestRequestReview:
    def test_submitted_to_in_review(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)

        reviewed = machine.request_review(item, requester, now=T0)

        assert reviewed.deliberation_status == DeliberationStatus.IN_REVIEW
        assert len(reviewed.audit_trail) == len(item.audit_trail) + 1
        assert reviewed.audit_trail[0].action == AuditAction.REVIEW_REQUESTED


class TestStartVoting:
    def test_opens_window(self, machine: DeliberationStateMachine, requester: Actor) -> None:
        item = in_voting(machine, requester)

        assert item.deliberation_status == DeliberationStatus.IN_VOTING
        assert item.voting_started_at == T0
        assert item.due_date == T0 + timedelta(hours=48)
        assert item.quorum_required == 3
        assert item.quorum_present == 0
        assert item.audit_trail[0].action == AuditAction.VOTING_STARTED

    def test_population_changes_quorum(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)

        item = machine.start_voting(item, requester, now=T0, voter_population=10)

        assert item.quorum_required == 6

    def test_dangling_current_stage_raises(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = make_item(deliberation_status=DeliberationStatus.SUBMITTED, current_stage_id="ghost")

        with pytest.raises(StageNotFoundError):
            machine.start_voting(item, requester, now=T0)

    def test_non_voting_stage_is_rejected(
        self, strict_machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        stages = (
            make_stage(1, StageType.OWNER_REVIEW, status=StageStatus.COMPLETED),
            make_stage(2, StageType.EXECUTION, status=StageStatus.ACTIVE),
        )
        item = make_item(
            stages=stages,
            current_stage_id="stage-2-hr",
            deliberation_status=DeliberationStatus.IN_REVIEW,
        )

        with pytest.raises(InvalidTransitionError, match="not a voting stage"):
            strict_machine.start_voting(item, requester, now=T0)

    def test_from_draft_is_rejected(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = draft(machine, requester)

        assert machine.start_voting(item, requester, now=T0) is item


class TestCastVote:
    def test_records_vote(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = in_voting(machine, requester)

        voted = machine.cast_vote(
            item, voters[0], now=T0, vote=Y, justification="Needed", has_conflict_of_interest=True
        )

        assert len(voted.votes) == 1
        record = voted.votes[0]
        assert record.voter_id == voters[0].actor_id
        assert record.stage_id == "stage-1-hr"
        assert record.justification == "Needed"
        assert record.has_conflict_of_interest is True
        assert voted.quorum_present == 1
        assert voted.audit_trail[0].action == AuditAction.VOTE_CAST
        assert voted.audit_trail[0].previous_value is None

    def test_revote_replaces_previous(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = in_voting(machine, requester)

        item = machine.cast_vote(item, voters[0], now=T0, vote=Y)
        item = machine.cast_vote(item, voters[0], now=T0, vote=N)

        assert [v.vote for v in item.votes] == [N]
        assert item.quorum_present == 1
        assert item.audit_trail[0].previous_value == "yes"
        assert item.audit_trail[0].new_value == "no"

    def test_late_vote_is_accepted(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = in_voting(machine, requester)

        late = machine.cast_vote(item, voters[0], now=T0 + timedelta(days=10), vote=Y)

        assert len(late.votes) == 1

    def test_outside_voting_lenient_returns_same_item(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = draft(machine, requester)

        assert machine.cast_vote(item, requester, now=T0, vote=Y) is item

    def test_outside_voting_strict_raises(
        self, strict_machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = draft(strict_machine, requester)

        with pytest.raises(InvalidTransitionError) as exc_info:
            strict_machine.cast_vote(item, requester, now=T0, vote=Y)

        assert exc_info.value.operation == "cast_vote"
        assert exc_info.value.current_status == DeliberationStatus.DRAFT
        assert exc_info.value.allowed_statuses == (DeliberationStatus.IN_VOTING,)


class TestStatusForStage:
    @pytest.mark.parametrize(
        ("stage_type", "expected"),
        [
            (StageType.DEPENDENT_REVIEW, DeliberationStatus.IN_REVIEW),
            (StageType.FINAL_APPROVAL, DeliberationStatus.IN_REVIEW),
            (StageType.PUBLISH_MINUTES, DeliberationStatus.AWAITING_MINUTES),
            (StageType.EXECUTION, DeliberationStatus.AWAITING_MINUTES),
        ],
    )
    def test_status_implied_by_activated_stage(
        self, stage_type: StageType, expected: DeliberationStatus
    ) -> None:
        assert status_for_stage(make_stage(2, stage_type)) == expected


class TestCloseVoting:
    def test_approved_waits_for_minutes(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        """owner_review + execution plan, 3 yes / 1 no."""
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, Y, Y, N))

        closed = machine.close_voting(item, requester, now=T0 + timedelta(hours=2))

        assert closed.deliberation_status == DeliberationStatus.AWAITING_MINUTES
        assert closed.stages[0].status == StageStatus.COMPLETED
        assert closed.stages[1].status == StageStatus.ACTIVE
        assert closed.current_stage_id == "stage-2-hr"
        assert closed.vote_result == VoteResult.APPROVED
        assert closed.votes == ()
        assert closed.quorum_present == 0
        assert closed.voting_started_at is None
        assert closed.due_date is None
        assert closed.voting_closed_at == T0 + timedelta(hours=2)
        assert len(closed.vote_history) == 1
        assert closed.vote_history[0].tally.yes == 3
        assert len(closed.audit_trail) == len(item.audit_trail) + 1

    def test_no_quorum_reverts_to_review(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, Y))

        closed = machine.close_voting(item, requester, now=T0)

        assert closed.deliberation_status == DeliberationStatus.IN_REVIEW
        assert closed.vote_result == VoteResult.NO_QUORUM
        assert closed.stages[0].status == StageStatus.ACTIVE
        assert closed.resolved_at is None
        assert len(closed.votes) == 2
        assert closed.audit_trail[0].action == AuditAction.VOTING_CLOSED

    def test_no_quorum_then_second_window_approves(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, Y))
        item = machine.close_voting(item, requester, now=T0)

        item = machine.start_voting(item, requester, now=T0, voter_population=5)
        assert item.quorum_present == 2
        item = machine.cast_vote(item, voters[2], now=T0, vote=Y)
        item = machine.close_voting(item, requester, now=T0)

        assert item.deliberation_status == DeliberationStatus.AWAITING_MINUTES
        assert len(item.vote_history) == 2

    def test_rejected_resolves_without_next_stage(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, N, N))

        closed = machine.close_voting(item, requester, now=T0)

        assert closed.deliberation_status == DeliberationStatus.RESOLVED
        assert closed.vote_result == VoteResult.REJECTED
        assert closed.resolved_at == T0
        assert closed.stages[0].status == StageStatus.REJECTED
        assert closed.stages[1].status == StageStatus.PENDING
        assert active_stages(closed) == []
        # a rejected item never reopens voting
        assert machine.start_voting(closed, requester, now=T0) is closed
        assert machine.cast_vote(closed, voters[0], now=T0, vote=Y) is closed

    def test_multi_stage_advances_to_next_review(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        stages = (
            make_stage(1, StageType.OWNER_REVIEW),
            make_stage(2, StageType.DEPENDENT_REVIEW, committee_id="finance"),
            make_stage(3, StageType.PUBLISH_MINUTES),
            make_stage(4, StageType.EXECUTION),
        )
        item = vote_all(machine, in_voting(machine, requester, stages), voters, (Y, Y, Y))

        item = machine.close_voting(item, requester, now=T0)

        assert item.deliberation_status == DeliberationStatus.IN_REVIEW
        assert item.current_stage_id == "stage-2-finance"
        assert item.audit_trail[0].action == AuditAction.STAGE_TRANSITIONED
        assert item.audit_trail[0].previous_value == "stage-1-hr"
        # the finance stage has no window yet, so nothing is overdue
        assert item.due_date is None

        item = machine.start_voting(item, requester, now=T0, voter_population=5)
        item = vote_all(machine, item, voters, (Y, Y, Y))
        item = machine.close_voting(item, requester, now=T0)

        assert item.deliberation_status == DeliberationStatus.AWAITING_MINUTES
        assert item.current_stage_id == "stage-3-hr"
        assert active_stages(item) == ["stage-3-hr"]

    def test_only_stage_approved_waits_for_minutes(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = in_voting(machine, requester, (make_stage(1, StageType.OWNER_REVIEW),))
        item = vote_all(machine, item, voters, (Y, Y, Y))

        closed = machine.close_voting(item, requester, now=T0)

        assert closed.deliberation_status == DeliberationStatus.AWAITING_MINUTES
        assert active_stages(closed) == []


class TestMinutesAndExecution:
    @pytest.fixture
    def approved(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> DeliberationItem:
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, Y, Y, N))
        return machine.close_voting(item, requester, now=T0)

    def test_generate_minutes_uses_closed_tally(
        self, machine: DeliberationStateMachine, approved: DeliberationItem, requester: Actor
    ) -> None:
        item = machine.generate_minutes(approved, requester, now=T0)

        assert item.deliberation_status == DeliberationStatus.AWAITING_MINUTES
        assert item.minutes is not None
        assert item.minutes.status == MinutesStatus.DRAFT
        assert "Voting result: Yes 3 | No 1 | Abstain 0" in item.minutes_summary
        assert "Decision text: Resolved Approved" in item.minutes_summary
        assert item.audit_trail[0].action == AuditAction.MINUTES_GENERATED

    def test_generate_minutes_without_votes_rejected(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)

        assert machine.generate_minutes(item, requester, now=T0) is item

    def test_publish_requires_draft(
        self, machine: DeliberationStateMachine, approved: DeliberationItem, requester: Actor
    ) -> None:
        assert machine.publish_minutes(approved, requester, now=T0) is approved

    def test_full_execution_path(
        self, machine: DeliberationStateMachine, approved: DeliberationItem, requester: Actor
    ) -> None:
        later = T0 + timedelta(days=1)
        item = machine.generate_minutes(approved, requester, now=later)
        item = machine.publish_minutes(item, requester, now=later)

        assert item.deliberation_status == DeliberationStatus.IN_EXECUTION
        assert item.minutes.status == MinutesStatus.PUBLISHED
        assert item.minutes.published_at == later
        assert item.resolved_at == later
        assert item.current_stage_id == "stage-2-hr"
        assert machine.generate_minutes(item, requester, now=later) is item

        item = machine.create_execution_task(
            item, requester, now=later, spec=ExecutionTaskSpec(title="Post job", owner_name="HR Ops")
        )
        task = item.execution_items[0]
        assert task.status == ExecutionItemStatus.PENDING
        assert task.due_date == later + timedelta(days=7)

        # open task blocks closing
        assert machine.close(item, requester, now=later) is item

        item = machine.update_execution_task_status(
            item, requester, now=later, task_id=task.task_id, status=ExecutionItemStatus.COMPLETED
        )
        assert item.audit_trail[0].action == AuditAction.FIELD_EDITED
        assert item.audit_trail[0].previous_value == "pending"

        closed = machine.close(item, requester, now=later)
        assert closed.deliberation_status == DeliberationStatus.CLOSED
        assert closed.stages[1].status == StageStatus.COMPLETED
        assert active_stages(closed) == []

    def test_task_on_rejected_item_starts_execution(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = vote_all(machine, in_voting(machine, requester), voters, (N, N, N))
        item = machine.close_voting(item, requester, now=T0)

        item = machine.create_execution_task(
            item, requester, now=T0, spec=ExecutionTaskSpec(title="Notify", owner_name="HR")
        )

        assert item.deliberation_status == DeliberationStatus.IN_EXECUTION

    def test_update_unknown_task_raises(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = make_item(deliberation_status=DeliberationStatus.IN_EXECUTION)

        with pytest.raises(ExecutionTaskNotFoundError):
            machine.update_execution_task_status(
                item, requester, now=T0, task_id="nope", status=ExecutionItemStatus.COMPLETED
            )

    def test_task_before_resolution_rejected(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)
        spec = ExecutionTaskSpec(title="Too early", owner_name="HR")

        assert machine.create_execution_task(item, requester, now=T0, spec=spec) is item


class TestSideBranches:
    def test_return_for_revision_clears_votes_and_resubmits(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = vote_all(machine, in_voting(machine, requester), voters, (Y, N))

        returned = machine.return_for_revision(item, requester, now=T0, reason="Missing budget")

        assert returned.deliberation_status == DeliberationStatus.RETURNED_FOR_REVISION
        assert returned.vote_result == VoteResult.RETURNED_FOR_REVISION
        assert returned.votes == ()
        assert returned.quorum_present == 0
        assert returned.due_date is None
        assert returned.audit_trail[0].description == "Returned for revision: Missing budget"

        resubmitted = machine.submit(returned, requester, now=T0)
        assert resubmitted.deliberation_status == DeliberationStatus.SUBMITTED
        assert active_stages(resubmitted) == ["stage-1-hr"]
        assert len(resubmitted.audit_trail) == len(returned.audit_trail) + 2

    def test_withdraw_is_terminal(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = machine.submit(draft(machine, requester), requester, now=T0)

        withdrawn = machine.withdraw(item, requester, now=T0, reason="Budget frozen")

        assert withdrawn.deliberation_status == DeliberationStatus.WITHDRAWN
        assert withdrawn.is_terminal
        assert machine.withdraw(withdrawn, requester, now=T0) is withdrawn
        assert machine.add_evidence(withdrawn, requester, now=T0, name="x", url="y") is withdrawn
        assert machine.submit(withdrawn, requester, now=T0) is withdrawn

    def test_add_evidence(self, machine: DeliberationStateMachine, requester: Actor) -> None:
        item = draft(machine, requester)

        item = machine.add_evidence(
            item, requester, now=T0, name="Budget sheet", url="https://files/budget.xlsx"
        )

        assert [a.name for a in item.attachments] == ["Budget sheet"]
        assert item.audit_trail[0].action == AuditAction.EVIDENCE_ADDED


class TestInvariants:
    def test_every_snapshot_has_at_most_one_active_stage(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        snapshots = [draft(machine, requester)]
        snapshots.append(machine.submit(snapshots[-1], requester, now=T0))
        snapshots.append(machine.start_voting(snapshots[-1], requester, now=T0))
        snapshots.append(vote_all(machine, snapshots[-1], voters, (Y, Y, Y)))
        snapshots.append(machine.close_voting(snapshots[-1], requester, now=T0))
        snapshots.append(machine.generate_minutes(snapshots[-1], requester, now=T0))
        snapshots.append(machine.publish_minutes(snapshots[-1], requester, now=T0))
        snapshots.append(machine.close(snapshots[-1], requester, now=T0))

        for item in snapshots:
            assert len(active_stages(item)) <= 1
        assert snapshots[-1].deliberation_status == DeliberationStatus.CLOSED

    def test_audit_trail_only_grows(
        self, machine: DeliberationStateMachine, requester: Actor, voters: list[Actor]
    ) -> None:
        item = in_voting(machine, requester)
        before = item.audit_trail

        item = vote_all(machine, item, voters, (Y, Y, Y))

        assert item.audit_trail[len(item.audit_trail) - len(before):] == before
        assert len(item.audit_trail) == len(before) + 3

    def test_input_item_is_never_modified(
        self, machine: DeliberationStateMachine, requester: Actor
    ) -> None:
        item = draft(machine, requester)
        snapshot = replace(item)

        machine.submit(item, requester, now=T0)

        assert item == snapshot
