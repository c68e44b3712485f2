"""Deliberation state machine.

Owns every lifecycle transition of the DeliberationItem aggregate. Each
operation validates its preconditions first and then produces a new item
in one step, so a command is either fully applied or not applied at all.

Lifecycle:
    DRAFT -> SUBMITTED -> IN_REVIEW -> IN_VOTING ->
    (IN_REVIEW | AWAITING_MINUTES | IN_EXECUTION) -> RESOLVED ->
    IN_EXECUTION -> CLOSED
    Side branches: RETURNED_FOR_REVISION, WITHDRAWN (terminal)

Failure semantics:
    An operation invoked outside its source state logs
    ``transition_rejected`` and returns the item unchanged. With
    ``strict`` enabled it raises InvalidTransitionError instead.

Every applied transition appends exactly one audit entry (submit appends
two: the status change and the owner committee assignment). The trail is
kept newest-first.

The machine never reads a clock: callers pass ``now`` explicitly.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable

import structlog
from uuid6 import uuid7

from src.domain.errors.deliberation import InvalidTransitionError, StageNotFoundError
from src.domain.models.actor import Actor
from src.domain.models.audit_trail import AuditAction, AuditTrailEntry
from src.domain.models.committee import DEFAULT_VOTER_POPULATION, Committee
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
    replace_stage,
)
from src.domain.models.execution_item import (
    DEFAULT_EXECUTION_DUE_DAYS,
    ExecutionItemStatus,
    ExecutionTaskSpec,
)
from src.domain.models.minutes import MinutesStatus
from src.domain.models.routing_policy import DeliberationTemplate
from src.domain.models.vote_record import VoteOption, VoteRecord
from src.domain.services.execution_task_tracker import (
    all_tasks_completed,
    append_task,
    create_execution_task,
    update_task_status,
)
from src.domain.services.minutes_generator import (
    generate_minutes,
    has_votes_for_minutes,
)
from src.domain.services.vote_outcome_evaluator import (
    compute_quorum_required,
    evaluate_vote_result,
)

logger = structlog.get_logger()

IdFactory = Callable[[], str]

_S = DeliberationStatus

SUBMIT_FROM = (_S.DRAFT, _S.RETURNED_FOR_REVISION)
REQUEST_REVIEW_FROM = (_S.SUBMITTED,)
START_VOTING_FROM = (_S.SUBMITTED, _S.IN_REVIEW)
CAST_VOTE_FROM = (_S.IN_VOTING,)
CLOSE_VOTING_FROM = (_S.IN_VOTING,)
PUBLISH_MINUTES_FROM = (_S.AWAITING_MINUTES,)
CREATE_TASK_FROM = (_S.AWAITING_MINUTES, _S.RESOLVED, _S.IN_EXECUTION)
UPDATE_TASK_FROM = (_S.IN_EXECUTION,)
RETURN_FROM = (_S.SUBMITTED, _S.IN_REVIEW, _S.IN_VOTING)
CLOSE_FROM = (_S.IN_EXECUTION,)
NON_TERMINAL = tuple(s for s in DeliberationStatus if not s.is_terminal())


def _new_id() -> str:
    return str(uuid7())


def status_for_stage(stage: DeliberationStage) -> DeliberationStatus:
    """Deliberation status implied by a stage a vote has just activated.

    An execution stage reached by a vote still waits for minutes:
    IN_EXECUTION is entered only through publish_minutes.
    """
    if stage.stage_type in (StageType.PUBLISH_MINUTES, StageType.EXECUTION):
        return DeliberationStatus.AWAITING_MINUTES
    return DeliberationStatus.IN_REVIEW


class DeliberationStateMachine:
    """Transition operations for deliberation items.

    All operations are pure with respect to their inputs: the item passed
    in is never modified and the returned item is a new instance (or the
    same instance when the transition is rejected).

    Example:
        >>> machine = DeliberationStateMachine()
        >>> item = machine.submit(draft, actor, now=now)
        >>> item = machine.start_voting(item, actor, now=now, voter_population=5)
    """

    def __init__(
        self,
        strict: bool = False,
        default_voter_population: int = DEFAULT_VOTER_POPULATION,
        execution_due_days: int = DEFAULT_EXECUTION_DUE_DAYS,
        id_factory: IdFactory | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            strict: Raise InvalidTransitionError instead of returning the
                item unchanged on an invalid transition.
            default_voter_population: Voters assumed when the caller does
                not know a committee's population.
            execution_due_days: Default due offset of follow-up tasks.
            id_factory: Generator for entity ids. Defaults to UUIDv7 strings.
        """
        self._strict = strict
        self._default_voter_population = default_voter_population
        self._execution_due_days = execution_due_days
        self._new_id = id_factory or _new_id

    @property
    def strict(self) -> bool:
        return self._strict

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entry(
        self,
        item: DeliberationItem,
        actor: Actor,
        now: datetime,
        action: AuditAction,
        description: str,
        previous_value: str | None = None,
        new_value: str | None = None,
    ) -> AuditTrailEntry:
        return AuditTrailEntry(
            entry_id=self._new_id(),
            item_id=item.item_id,
            action=action,
            description=description,
            user_id=actor.actor_id,
            user_name=actor.display_name,
            timestamp=now,
            previous_value=previous_value,
            new_value=new_value,
        )

    @staticmethod
    def _apply(
        item: DeliberationItem,
        entries: tuple[AuditTrailEntry, ...],
        **changes: Any,
    ) -> DeliberationItem:
        """Replace fields and prepend entries (given oldest first) to the trail."""
        return replace(
            item,
            audit_trail=(*reversed(entries), *item.audit_trail),
            **changes,
        )

    def _reject(
        self,
        item: DeliberationItem,
        operation: str,
        allowed: tuple[DeliberationStatus, ...],
        reason: str | None = None,
    ) -> DeliberationItem:
        """Refuse a transition: log and return the item, or raise when strict."""
        logger.warning(
            "transition_rejected",
            item_id=item.item_id,
            operation=operation,
            status=item.deliberation_status.value,
            reason=reason,
        )
        if self._strict:
            raise InvalidTransitionError(
                item_id=item.item_id,
                operation=operation,
                current_status=item.deliberation_status,
                allowed_statuses=allowed,
                reason=reason,
            )
        return item

    def _status_entry(
        self,
        item: DeliberationItem,
        actor: Actor,
        now: datetime,
        new_status: DeliberationStatus,
        description: str,
    ) -> AuditTrailEntry:
        return self._entry(
            item,
            actor,
            now,
            AuditAction.STATUS_CHANGED,
            description,
            previous_value=item.deliberation_status.value,
            new_value=new_status.value,
        )

    def _population(self, voter_population: int | None) -> int:
        if voter_population is None or voter_population < 1:
            return self._default_voter_population
        return voter_population

    # ------------------------------------------------------------------
    # Creation and submission
    # ------------------------------------------------------------------

    def create_draft(
        self,
        actor: Actor,
        *,
        now: datetime,
        title: str,
        description: str,
        owner_committee: Committee,
        stages: tuple[DeliberationStage, ...],
        requested_decision: str | None = None,
        dependent_committees: tuple[Committee, ...] = (),
        business_area: str = "",
        risk_level: RiskLevel = RiskLevel.MEDIUM,
        financial_impact: float = 0.0,
        strategic_flag: bool = False,
        template: DeliberationTemplate | None = None,
    ) -> DeliberationItem:
        """Build a new DRAFT item carrying its stage plan.

        No audit entry is written; the trail starts at submission.

        Args:
            actor: Creator of the item.
            now: Creation time.
            title: Short title.
            description: Free-text description.
            owner_committee: Committee accountable for the decision.
            stages: Stage plan, all PENDING.
            requested_decision: Decision asked for; defaults to the description.
            dependent_committees: Committees that must also weigh in.
            business_area: Business area label.
            risk_level: Assessed risk.
            financial_impact: Monetary magnitude.
            strategic_flag: Strategic decision marker.
            template: Template the request was raised from.

        Returns:
            The draft item.
        """
        item = DeliberationItem(
            item_id=self._new_id(),
            title=title,
            description=description,
            requested_decision=requested_decision or description,
            owner_committee_id=owner_committee.committee_id,
            owner_committee_name=owner_committee.name,
            dependent_committee_ids=tuple(c.committee_id for c in dependent_committees),
            dependent_committee_names=tuple(c.name for c in dependent_committees),
            business_area=business_area or owner_committee.code,
            priority=Priority.from_risk(risk_level),
            risk_level=risk_level,
            financial_impact=financial_impact,
            strategic_flag=strategic_flag,
            template_id=template.template_id if template else None,
            template_name=template.name if template else None,
            created_at=now,
            created_by=actor.actor_id,
            created_by_name=actor.display_name,
            stages=stages,
        )
        logger.debug(
            "deliberation_draft_created",
            item_id=item.item_id,
            owner_committee_id=item.owner_committee_id,
            stage_count=len(stages),
        )
        return item

    def submit(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        voter_population: int | None = None,
    ) -> DeliberationItem:
        """Submit a draft (or revised) item into the workflow.

        Activates the first pending stage unless a stage is already active
        (a resubmission resumes where it was returned), and computes the
        initial quorum requirement for that stage.

        Args:
            item: Item in DRAFT or RETURNED_FOR_REVISION.
            actor: Submitting actor.
            now: Submission time.
            voter_population: Expected voters of the first stage's committee.

        Returns:
            The submitted item.
        """
        if item.deliberation_status not in SUBMIT_FROM:
            return self._reject(item, "submit", SUBMIT_FROM)

        stage = item.active_stage
        stages = item.stages
        if stage is None:
            pending = item.next_pending_stage()
            if pending is None:
                return self._reject(item, "submit", SUBMIT_FROM, "no stage to activate")
            stage = pending.activate(now)
            stages = replace_stage(stages, stage)

        entries = (
            self._status_entry(
                item, actor, now, _S.SUBMITTED, "Deliberation submitted and routed by policy"
            ),
            self._entry(
                item,
                actor,
                now,
                AuditAction.STAGE_TRANSITIONED,
                f"Owning committee assigned: {item.owner_committee_name}",
                new_value=stage.stage_id,
            ),
        )
        updated = self._apply(
            item,
            entries,
            deliberation_status=_S.SUBMITTED,
            submitted_at=now,
            stages=stages,
            current_stage_id=stage.stage_id,
            quorum_required=compute_quorum_required(
                stage.voting_rule.quorum_percent, self._population(voter_population)
            ),
        )
        logger.info(
            "deliberation_submitted",
            item_id=item.item_id,
            stage_id=stage.stage_id,
            quorum_required=updated.quorum_required,
        )
        return updated

    def request_review(
        self, item: DeliberationItem, actor: Actor, *, now: datetime
    ) -> DeliberationItem:
        """Move a submitted item into committee review."""
        if item.deliberation_status not in REQUEST_REVIEW_FROM:
            return self._reject(item, "request_review", REQUEST_REVIEW_FROM)

        stage = item.current_stage
        committee = stage.committee_name if stage else item.owner_committee_name
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.REVIEW_REQUESTED,
            f"Review requested from {committee}",
            previous_value=item.deliberation_status.value,
            new_value=_S.IN_REVIEW.value,
        )
        return self._apply(item, (entry,), deliberation_status=_S.IN_REVIEW)

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------

    def start_voting(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        voter_population: int | None = None,
    ) -> DeliberationItem:
        """Open the voting window of the active stage.

        quorum_required = max(1, ceil(quorum_percent / 100 * population)).
        The due date is advisory; nothing closes the window automatically.

        Args:
            item: Item in SUBMITTED or IN_REVIEW with an active voting stage.
            actor: Actor opening the window.
            now: Window start.
            voter_population: Expected voters; falls back to the configured
                default when None.

        Returns:
            The item in IN_VOTING.

        Raises:
            StageNotFoundError: If current_stage_id references no stage.
        """
        if item.deliberation_status not in START_VOTING_FROM:
            return self._reject(item, "start_voting", START_VOTING_FROM)
        if item.current_stage_id is not None and item.current_stage is None:
            raise StageNotFoundError(item_id=item.item_id, stage_id=item.current_stage_id)

        stage = item.active_stage
        if stage is None:
            return self._reject(item, "start_voting", START_VOTING_FROM, "no active stage")
        if not stage.stage_type.is_voting_stage():
            return self._reject(
                item,
                "start_voting",
                START_VOTING_FROM,
                f"stage {stage.stage_id} ({stage.stage_type.value}) is not a voting stage",
            )

        rule = stage.voting_rule
        quorum_required = compute_quorum_required(
            rule.quorum_percent, self._population(voter_population)
        )
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.VOTING_STARTED,
            f"Voting window opened for {stage.committee_name} "
            f"({rule.voting_window_hours}h)",
            previous_value=item.deliberation_status.value,
            new_value=_S.IN_VOTING.value,
        )
        updated = self._apply(
            item,
            (entry,),
            deliberation_status=_S.IN_VOTING,
            voting_started_at=now,
            due_date=now + timedelta(hours=rule.voting_window_hours),
            quorum_required=quorum_required,
            quorum_present=len(item.votes),
        )
        logger.info(
            "voting_started",
            item_id=item.item_id,
            stage_id=stage.stage_id,
            majority_type=rule.majority_type.value,
            quorum_required=quorum_required,
            due_date=updated.due_date.isoformat() if updated.due_date else None,
        )
        return updated

    def cast_vote(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        vote: VoteOption,
        justification: str | None = None,
        has_conflict_of_interest: bool = False,
    ) -> DeliberationItem:
        """Record the actor's vote, replacing any earlier vote of theirs.

        Votes arriving after the due date are accepted; the window is
        closed only by close_voting.

        Args:
            item: Item in IN_VOTING.
            actor: The voter.
            now: Time of the vote.
            vote: The voter's choice.
            justification: Optional reasoning.
            has_conflict_of_interest: Declared conflict of interest.

        Returns:
            The item with the vote recorded.
        """
        if item.deliberation_status not in CAST_VOTE_FROM:
            return self._reject(item, "cast_vote", CAST_VOTE_FROM)

        if item.due_date is not None and now > item.due_date:
            logger.warning(
                "vote_cast_after_window",
                item_id=item.item_id,
                voter_id=actor.actor_id,
                due_date=item.due_date.isoformat(),
            )

        previous = next((v for v in item.votes if v.voter_id == actor.actor_id), None)
        record = VoteRecord(
            vote_id=self._new_id(),
            item_id=item.item_id,
            voter_id=actor.actor_id,
            voter_name=actor.display_name,
            vote=vote,
            stage_id=item.current_stage_id,
            voted_at=now,
            justification=justification,
            has_conflict_of_interest=has_conflict_of_interest,
        )
        votes = (*(v for v in item.votes if v.voter_id != actor.actor_id), record)
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.VOTE_CAST,
            f"Vote cast: {vote.value.upper()}",
            previous_value=previous.vote.value if previous else None,
            new_value=vote.value,
        )
        logger.info(
            "vote_cast",
            item_id=item.item_id,
            voter_id=actor.actor_id,
            replaced=previous is not None,
            conflict_of_interest=has_conflict_of_interest,
        )
        return self._apply(item, (entry,), votes=votes, quorum_present=len(votes))

    def close_voting(
        self, item: DeliberationItem, actor: Actor, *, now: datetime
    ) -> DeliberationItem:
        """Close the voting window and act on the evaluated outcome.

        Outcomes:
            NO_QUORUM: back to IN_REVIEW; the stage stays active and the
                votes are kept for the next window.
            REJECTED: stage rejected, item RESOLVED. No later stage opens.
            APPROVED: stage completed; the next pending stage is activated
                and votes are cleared. With no pending stage left the item
                waits for minutes.

        Until minutes are published an approved item never skips straight
        to IN_EXECUTION; it waits in AWAITING_MINUTES instead.

        Args:
            item: Item in IN_VOTING.
            actor: Actor closing the window.
            now: Close time.

        Returns:
            The item after the outcome was applied.
        """
        if item.deliberation_status not in CLOSE_VOTING_FROM:
            return self._reject(item, "close_voting", CLOSE_VOTING_FROM)

        outcome = evaluate_vote_result(item)
        stage = item.current_stage
        history = (
            *item.vote_history,
            StageVoteTally(
                stage_id=item.current_stage_id,
                tally=outcome.tally,
                result=outcome.result,
                closed_at=now,
            ),
        )
        common: dict[str, Any] = {
            "voting_closed_at": now,
            "vote_result": outcome.result,
            "vote_history": history,
        }
        log = logger.bind(
            item_id=item.item_id,
            stage_id=item.current_stage_id,
            result=outcome.result.value,
            yes=outcome.tally.yes,
            no=outcome.tally.no,
            abstain=outcome.tally.abstain,
        )

        if outcome.result == VoteResult.NO_QUORUM:
            entry = self._entry(
                item,
                actor,
                now,
                AuditAction.VOTING_CLOSED,
                f"Voting closed without quorum "
                f"({item.quorum_present or len(item.votes)}/{item.quorum_required})",
                previous_value=item.deliberation_status.value,
                new_value=_S.IN_REVIEW.value,
            )
            log.info("voting_closed_no_quorum")
            return self._apply(item, (entry,), deliberation_status=_S.IN_REVIEW, **common)

        if outcome.result == VoteResult.REJECTED:
            stages = replace_stage(item.stages, stage.reject(now)) if stage else item.stages
            entry = self._entry(
                item,
                actor,
                now,
                AuditAction.VOTING_CLOSED,
                "Voting closed with result: rejected",
                previous_value=item.deliberation_status.value,
                new_value=_S.RESOLVED.value,
            )
            log.info("voting_closed_rejected")
            return self._apply(
                item,
                (entry,),
                deliberation_status=_S.RESOLVED,
                resolved_at=now,
                stages=stages,
                **common,
            )

        stages = replace_stage(item.stages, stage.complete(now)) if stage else item.stages
        next_stage = next((s for s in stages if s.status == StageStatus.PENDING), None)

        if next_stage is None:
            entry = self._entry(
                item,
                actor,
                now,
                AuditAction.VOTING_CLOSED,
                "Voting closed: approved and ready for minutes",
                previous_value=item.deliberation_status.value,
                new_value=_S.AWAITING_MINUTES.value,
            )
            log.info("voting_closed_approved", next_stage_id=None)
            return self._apply(
                item,
                (entry,),
                deliberation_status=_S.AWAITING_MINUTES,
                stages=stages,
                **common,
            )

        activated = next_stage.activate(now)
        new_status = status_for_stage(activated)
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.STAGE_TRANSITIONED,
            f"Stage transitioned to {activated.committee_name} "
            f"({activated.stage_type.value})",
            previous_value=item.current_stage_id,
            new_value=activated.stage_id,
        )
        log.info("voting_closed_approved", next_stage_id=activated.stage_id)
        return self._apply(
            item,
            (entry,),
            deliberation_status=new_status,
            stages=replace_stage(stages, activated),
            current_stage_id=activated.stage_id,
            votes=(),
            voting_started_at=None,
            due_date=None,
            quorum_present=0,
            **common,
        )

    @staticmethod
    def _minutes_published(item: DeliberationItem) -> bool:
        return item.minutes is not None and item.minutes.status == MinutesStatus.PUBLISHED

    # ------------------------------------------------------------------
    # Minutes
    # ------------------------------------------------------------------

    def generate_minutes(
        self, item: DeliberationItem, actor: Actor, *, now: datetime
    ) -> DeliberationItem:
        """Render draft minutes from the current state.

        Valid once any vote exists (current or closed) on a non-terminal
        item. The status is not changed; regenerating replaces the draft.
        """
        if item.is_terminal:
            return self._reject(item, "generate_minutes", NON_TERMINAL)
        if not has_votes_for_minutes(item):
            return self._reject(item, "generate_minutes", NON_TERMINAL, "no votes recorded")
        if self._minutes_published(item):
            return self._reject(
                item, "generate_minutes", NON_TERMINAL, "minutes already published"
            )

        draft = generate_minutes(item)
        entry = self._entry(
            item, actor, now, AuditAction.MINUTES_GENERATED, "Draft minutes generated"
        )
        logger.info("minutes_generated", item_id=item.item_id)
        return self._apply(
            item, (entry,), minutes_summary=draft.summary, minutes=draft.minutes
        )

    def publish_minutes(
        self, item: DeliberationItem, actor: Actor, *, now: datetime
    ) -> DeliberationItem:
        """Publish the draft minutes and move the item into execution.

        Completes the publish_minutes stage, activates the execution stage
        when it is still pending, and stamps resolved_at if unset.
        """
        if item.deliberation_status not in PUBLISH_MINUTES_FROM:
            return self._reject(item, "publish_minutes", PUBLISH_MINUTES_FROM)
        if item.minutes is None or item.minutes.status != MinutesStatus.DRAFT:
            return self._reject(
                item, "publish_minutes", PUBLISH_MINUTES_FROM, "no draft minutes"
            )

        stages = item.stages
        current_stage_id = item.current_stage_id
        publish_stage = item.stage_of_type(StageType.PUBLISH_MINUTES)
        if publish_stage is not None and publish_stage.status in (
            StageStatus.PENDING,
            StageStatus.ACTIVE,
        ):
            stages = replace_stage(stages, publish_stage.complete(now))

        execution_stage = item.stage_of_type(StageType.EXECUTION)
        if execution_stage is not None:
            if execution_stage.status == StageStatus.PENDING:
                stages = replace_stage(stages, execution_stage.activate(now))
            current_stage_id = execution_stage.stage_id

        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.MINUTES_PUBLISHED,
            "Minutes published and execution stage activated",
            previous_value=item.deliberation_status.value,
            new_value=_S.IN_EXECUTION.value,
        )
        logger.info("minutes_published", item_id=item.item_id)
        return self._apply(
            item,
            (entry,),
            deliberation_status=_S.IN_EXECUTION,
            stages=stages,
            current_stage_id=current_stage_id,
            minutes=item.minutes.publish(now),
            resolved_at=item.resolved_at or now,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def create_execution_task(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        spec: ExecutionTaskSpec,
    ) -> DeliberationItem:
        """Append a follow-up task; a RESOLVED item moves to IN_EXECUTION."""
        if item.deliberation_status not in CREATE_TASK_FROM:
            return self._reject(item, "create_execution_task", CREATE_TASK_FROM)

        task = create_execution_task(
            spec,
            task_id=self._new_id(),
            now=now,
            default_due_days=self._execution_due_days,
        )
        status = (
            _S.IN_EXECUTION
            if item.deliberation_status == _S.RESOLVED
            else item.deliberation_status
        )
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.EXECUTION_TASK_CREATED,
            f"Execution task created: {task.title}",
            new_value=task.task_id,
        )
        logger.info(
            "execution_task_created",
            item_id=item.item_id,
            task_id=task.task_id,
            linked_entity_type=(
                task.linked_entity_type.value if task.linked_entity_type else None
            ),
        )
        return self._apply(
            item,
            (entry,),
            deliberation_status=status,
            execution_items=append_task(item.execution_items, task),
        )

    def update_execution_task_status(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        task_id: str,
        status: ExecutionItemStatus,
    ) -> DeliberationItem:
        """Change the status of a follow-up task.

        Raises:
            ExecutionTaskNotFoundError: If the task is not on the item.
        """
        if item.deliberation_status not in UPDATE_TASK_FROM:
            return self._reject(item, "update_execution_task_status", UPDATE_TASK_FROM)

        tasks, previous = update_task_status(item, task_id, status)
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.FIELD_EDITED,
            f"Execution task status updated: {previous.title}",
            previous_value=previous.status.value,
            new_value=status.value,
        )
        return self._apply(item, (entry,), execution_items=tasks)

    def add_evidence(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        name: str,
        url: str,
        attachment_type: AttachmentType = AttachmentType.DOCUMENT,
    ) -> DeliberationItem:
        """Attach a piece of evidence to a non-terminal item."""
        if item.is_terminal:
            return self._reject(item, "add_evidence", NON_TERMINAL)

        attachment = Attachment(
            attachment_id=self._new_id(),
            name=name,
            url=url,
            attachment_type=attachment_type,
        )
        entry = self._entry(
            item,
            actor,
            now,
            AuditAction.EVIDENCE_ADDED,
            f"Evidence added: {name}",
            new_value=attachment.attachment_id,
        )
        return self._apply(item, (entry,), attachments=(*item.attachments, attachment))

    # ------------------------------------------------------------------
    # Side branches
    # ------------------------------------------------------------------

    def return_for_revision(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        reason: str | None = None,
    ) -> DeliberationItem:
        """Send the item back to its requester.

        Votes of the current window are discarded; the active stage is
        kept so a resubmission resumes there.
        """
        if item.deliberation_status not in RETURN_FROM:
            return self._reject(item, "return_for_revision", RETURN_FROM)

        description = "Returned for revision"
        if reason:
            description = f"{description}: {reason}"
        entry = self._status_entry(item, actor, now, _S.RETURNED_FOR_REVISION, description)
        logger.info("deliberation_returned", item_id=item.item_id)
        return self._apply(
            item,
            (entry,),
            deliberation_status=_S.RETURNED_FOR_REVISION,
            vote_result=VoteResult.RETURNED_FOR_REVISION,
            votes=(),
            quorum_present=0,
            voting_started_at=None,
            due_date=None,
        )

    def withdraw(
        self,
        item: DeliberationItem,
        actor: Actor,
        *,
        now: datetime,
        reason: str | None = None,
    ) -> DeliberationItem:
        """Cancel a non-terminal item. WITHDRAWN is terminal."""
        if item.is_terminal:
            return self._reject(item, "withdraw", NON_TERMINAL)

        description = "Deliberation withdrawn"
        if reason:
            description = f"{description}: {reason}"
        entry = self._status_entry(item, actor, now, _S.WITHDRAWN, description)
        logger.info("deliberation_withdrawn", item_id=item.item_id)
        return self._apply(item, (entry,), deliberation_status=_S.WITHDRAWN)

    def close(
        self, item: DeliberationItem, actor: Actor, *, now: datetime
    ) -> DeliberationItem:
        """Close an item whose execution tasks are all completed.

        The execution stage, when active, is completed with the item.
        """
        if item.deliberation_status not in CLOSE_FROM:
            return self._reject(item, "close", CLOSE_FROM)
        if not all_tasks_completed(item):
            return self._reject(item, "close", CLOSE_FROM, "execution tasks still open")

        stages = item.stages
        active = item.active_stage
        if active is not None:
            stages = replace_stage(stages, active.complete(now))

        entry = self._status_entry(item, actor, now, _S.CLOSED, "Deliberation closed")
        logger.info("deliberation_closed", item_id=item.item_id)
        return self._apply(item, (entry,), deliberation_status=_S.CLOSED, stages=stages)
