"""Deliberation command service.

This service is the command surface of the deliberation workflow engine.
It loads the aggregate, applies one state-machine transition, stores the
result and publishes what the transition produced.

Developer Golden Rules:
1. ONE WRITER PER ITEM - Commands on the same item are serialized
2. FAIL LOUD - Unknown ids and invalid payloads raise
3. LOG EVERYTHING - All operations have structured logging
4. EVENT AFTER SAVE - Publish audit entries only after successful persistence

Usage:
    from src.application.services.deliberation_service import DeliberationService

    service = DeliberationService(
        repository=repository,
        committee_directory=directory,
        time_authority=time_authority,
        actor_provider=actor_provider,
    )
    item = await service.submit_deliberation(SubmitDeliberationDTO(...))
    item = await service.start_voting(item.item_id)
"""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Union

from src.application.dtos.deliberation import SubmitDeliberationDTO
from src.application.ports.actor_provider import ActorProviderProtocol
from src.application.ports.committee_directory import CommitteeDirectoryProtocol
from src.application.ports.deliberation_event_publisher import (
    DeliberationEventPublisherProtocol,
)
from src.application.ports.deliberation_repository import (
    DeliberationRepositoryProtocol,
)
from src.application.ports.entity_reference_validator import (
    EntityReferenceValidatorProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.config.deliberation_config import (
    DEFAULT_DELIBERATION_CONFIG,
    DeliberationConfig,
)
from src.domain.errors.deliberation import (
    DeliberationNotFoundError,
    DeliberationValidationError,
)
from src.domain.models.actor import Actor
from src.domain.models.committee import Committee
from src.domain.models.deliberation_item import AttachmentType, DeliberationItem
from src.domain.models.deliberation_stage import StageType
from src.domain.models.execution_item import ExecutionItemStatus, ExecutionTaskSpec
from src.domain.models.routing_policy import resolve_template
from src.domain.models.vote_record import VoteOption
from src.domain.services.deliberation_state_machine import DeliberationStateMachine
from src.domain.services.stage_plan_builder import RoutingInput, build_stage_plan

# Async transitions may consult the directory before applying the change
Transition = Callable[
    [DeliberationItem], Union[DeliberationItem, Awaitable[DeliberationItem]]
]


class DeliberationService(LoggingMixin):
    """Command service for deliberation items.

    Every command follows the same sequence: lock the item, load it, apply
    the transition, save if anything changed, publish the new audit
    entries. A rejected transition (non-strict mode) returns the stored
    item unchanged and publishes nothing.

    Attributes:
        _repository: Aggregate storage.
        _directory: Committee lookups and voter populations.
        _time: Source of "now".
        _actor_provider: Fallback identity when a command carries no actor.
        _publisher: Optional sink for audit entries and execution items.
        _entity_validator: Optional check of linked entity references.
    """

    def __init__(
        self,
        repository: DeliberationRepositoryProtocol,
        committee_directory: CommitteeDirectoryProtocol,
        time_authority: TimeAuthorityProtocol,
        actor_provider: ActorProviderProtocol,
        event_publisher: DeliberationEventPublisherProtocol | None = None,
        entity_validator: EntityReferenceValidatorProtocol | None = None,
        config: DeliberationConfig | None = None,
        state_machine: DeliberationStateMachine | None = None,
    ) -> None:
        """Initialize the deliberation service.

        Args:
            repository: Aggregate storage.
            committee_directory: Committee lookups.
            time_authority: Clock.
            actor_provider: Identity used when a command passes no actor.
            event_publisher: Optional publisher of produced records.
            entity_validator: Optional validator of linked entity ids.
            config: Engine configuration. Uses default if not provided.
            state_machine: Transition engine. Built from config if not provided.
        """
        self._repository = repository
        self._directory = committee_directory
        self._time = time_authority
        self._actor_provider = actor_provider
        self._publisher = event_publisher
        self._entity_validator = entity_validator
        self._config = config or DEFAULT_DELIBERATION_CONFIG
        self._machine = state_machine or DeliberationStateMachine(
            strict=self._config.strict_transitions,
            default_voter_population=self._config.voter_population,
            execution_due_days=self._config.execution_due_days,
        )
        # Per-item locks, dropped once no command holds or waits on them
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._init_logger()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _actor(self, actor: Actor | None) -> Actor:
        return actor or self._actor_provider.current_actor()

    async def _load(self, item_id: str) -> DeliberationItem:
        item = await self._repository.get(item_id)
        if item is None:
            raise DeliberationNotFoundError(item_id)
        return item

    async def _publish_changes(
        self, before: DeliberationItem | None, after: DeliberationItem
    ) -> None:
        """Publish audit entries and tasks added between two snapshots."""
        if self._publisher is None:
            return
        known = len(before.audit_trail) if before else 0
        added = len(after.audit_trail) - known
        if added > 0:
            # Trail is newest-first; publish oldest-first
            entries = tuple(reversed(after.audit_trail[:added]))
            await self._publisher.publish_audit_entries(after.item_id, entries)
        known_tasks = len(before.execution_items) if before else 0
        for task in after.execution_items[known_tasks:]:
            await self._publisher.publish_execution_item(after.item_id, task)

    @asynccontextmanager
    async def _item_lock(self, item_id: str) -> AsyncIterator[None]:
        """Serialize commands on one item.

        The lock entry lives only while some command holds or awaits it,
        so ids that name no stored item leave nothing behind.
        """
        lock = self._locks.get(item_id)
        if lock is None:
            lock = self._locks[item_id] = asyncio.Lock()
        self._lock_users[item_id] = self._lock_users.get(item_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[item_id] -= 1
            if not self._lock_users[item_id]:
                del self._lock_users[item_id]
                del self._locks[item_id]

    async def _execute(
        self,
        operation: str,
        item_id: str,
        transition: Transition,
    ) -> DeliberationItem:
        """Apply one transition to a stored item under its lock."""
        log = self._log_operation(operation, item_id=item_id)
        async with self._item_lock(item_id):
            item = await self._load(item_id)
            result = transition(item)
            updated = await result if inspect.isawaitable(result) else result
            if updated is not item:
                await self._repository.save(updated)
                await self._publish_changes(item, updated)
        self._log_outcome(log, item, updated)
        return updated

    async def _population(self, item: DeliberationItem) -> int | None:
        stage = item.active_stage
        committee_id = stage.committee_id if stage else item.owner_committee_id
        return await self._directory.get_voter_population(committee_id)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def _resolve_owner(self, payload: SubmitDeliberationDTO) -> Committee:
        template = resolve_template(payload.template_id)
        if payload.template_id is not None and template is None:
            raise DeliberationValidationError(
                "template_id", f"unknown template {payload.template_id}"
            )
        committee_id = payload.owner_committee_id or (
            template.owner_committee_id if template else None
        )
        if not committee_id:
            raise DeliberationValidationError(
                "owner_committee_id", "an owner committee or template is required"
            )
        committee = await self._directory.get_committee(committee_id)
        if committee is None:
            raise DeliberationValidationError(
                "owner_committee_id", f"unknown committee {committee_id}"
            )
        return committee

    async def submit_deliberation(
        self,
        payload: SubmitDeliberationDTO,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        """Create a deliberation from a request and (by default) submit it.

        The stage plan is built by the routing policy from the payload.

        Args:
            payload: The validated request.
            actor: Requesting actor; defaults to the actor provider's.

        Returns:
            The stored item (SUBMITTED, or DRAFT when payload.submit is False).

        Raises:
            DeliberationValidationError: Blank title, or unknown committee
                or template.
        """
        actor = self._actor(actor)
        log = self._log_operation(
            "submit_deliberation",
            owner_committee_id=payload.owner_committee_id,
            template_id=payload.template_id,
        )

        if not payload.title or not payload.title.strip():
            log.warning("submission_rejected", reason="blank title")
            raise DeliberationValidationError("title", "title is required")

        owner = await self._resolve_owner(payload)
        routing_input = RoutingInput(
            owner_committee_id=owner.committee_id,
            financial_impact=payload.financial_impact,
            risk_level=payload.risk_level,
            margin_percent=payload.margin_percent,
            strategic_flag=payload.strategic_flag,
            outside_budget=payload.outside_budget,
            role_strategic=payload.role_strategic,
            policy_exception=payload.policy_exception,
            atypical_contract=payload.atypical_contract,
            technical_investment=payload.technical_investment,
            security_criticality=payload.security_criticality,
            ip_license_criticality=payload.ip_license_criticality,
            aggressive_payment_terms=payload.aggressive_payment_terms,
            special_clauses=payload.special_clauses,
            penalty_exposure=payload.penalty_exposure,
            strategic_client=payload.strategic_client,
            high_ticket=payload.high_ticket,
            regulatory_exposure=payload.regulatory_exposure,
            material_financial_impact=payload.material_financial_impact,
            material_legal_sensitivity=payload.material_legal_sensitivity,
        )
        stages = build_stage_plan(routing_input)
        dependents = tuple(
            Committee(
                committee_id=stage.committee_id,
                name=stage.committee_name,
                code=stage.committee_id.upper(),
            )
            for stage in stages
            if stage.stage_type == StageType.DEPENDENT_REVIEW
        )

        now = self._time.now()
        item = self._machine.create_draft(
            actor,
            now=now,
            title=payload.title.strip(),
            description=payload.description,
            requested_decision=payload.requested_decision,
            owner_committee=owner,
            dependent_committees=dependents,
            stages=stages,
            business_area=payload.business_area,
            risk_level=payload.risk_level,
            financial_impact=payload.financial_impact,
            strategic_flag=payload.strategic_flag,
            template=resolve_template(payload.template_id),
        )
        if payload.submit:
            population = await self._directory.get_voter_population(owner.committee_id)
            item = self._machine.submit(item, actor, now=now, voter_population=population)

        async with self._item_lock(item.item_id):
            await self._repository.save(item)
            await self._publish_changes(None, item)

        log.info(
            "deliberation_created",
            item_id=item.item_id,
            status=item.deliberation_status.value,
            stages=[s.stage_id for s in item.stages],
        )
        return item

    async def submit(self, item_id: str, actor: Actor | None = None) -> DeliberationItem:
        """Submit a stored draft or a returned item."""
        actor = self._actor(actor)

        async def transition(item: DeliberationItem) -> DeliberationItem:
            population = await self._population(item)
            return self._machine.submit(
                item, actor, now=self._time.now(), voter_population=population
            )

        return await self._execute("submit", item_id, transition)

    async def get_deliberation(self, item_id: str) -> DeliberationItem:
        """Load an item.

        Raises:
            DeliberationNotFoundError: If no item has this id.
        """
        return await self._load(item_id)

    # ------------------------------------------------------------------
    # Review and voting
    # ------------------------------------------------------------------

    async def request_review(
        self, item_id: str, actor: Actor | None = None
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "request_review",
            item_id,
            lambda i: self._machine.request_review(i, actor, now=self._time.now()),
        )

    async def start_voting(
        self, item_id: str, actor: Actor | None = None
    ) -> DeliberationItem:
        """Open the voting window of the item's active stage.

        The quorum head count uses the stage committee's population from
        the committee directory.
        """
        actor = self._actor(actor)

        async def transition(item: DeliberationItem) -> DeliberationItem:
            population = await self._population(item)
            return self._machine.start_voting(
                item, actor, now=self._time.now(), voter_population=population
            )

        return await self._execute("start_voting", item_id, transition)

    async def cast_vote(
        self,
        item_id: str,
        vote: VoteOption,
        justification: str | None = None,
        has_conflict_of_interest: bool = False,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        """Record the actor's vote on the active stage."""
        actor = self._actor(actor)
        return await self._execute(
            "cast_vote",
            item_id,
            lambda i: self._machine.cast_vote(
                i,
                actor,
                now=self._time.now(),
                vote=vote,
                justification=justification,
                has_conflict_of_interest=has_conflict_of_interest,
            ),
        )

    async def close_voting(
        self, item_id: str, actor: Actor | None = None
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "close_voting",
            item_id,
            lambda i: self._machine.close_voting(i, actor, now=self._time.now()),
        )

    # ------------------------------------------------------------------
    # Minutes and execution
    # ------------------------------------------------------------------

    async def generate_minutes(
        self, item_id: str, actor: Actor | None = None
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "generate_minutes",
            item_id,
            lambda i: self._machine.generate_minutes(i, actor, now=self._time.now()),
        )

    async def publish_minutes(
        self, item_id: str, actor: Actor | None = None
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "publish_minutes",
            item_id,
            lambda i: self._machine.publish_minutes(i, actor, now=self._time.now()),
        )

    async def create_execution_task(
        self,
        item_id: str,
        spec: ExecutionTaskSpec,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        """Add a follow-up task to an item.

        When an entity validator is configured, a linked reference must
        exist before the task is stored.

        Raises:
            DeliberationValidationError: If the validator rejects the link.
        """
        actor = self._actor(actor)
        if (
            self._entity_validator is not None
            and spec.linked_entity_type is not None
            and spec.linked_entity_id is not None
        ):
            exists = await self._entity_validator.exists(
                spec.linked_entity_type, spec.linked_entity_id
            )
            if not exists:
                self._log_operation("create_execution_task", item_id=item_id).warning(
                    "linked_entity_not_found",
                    linked_entity_type=spec.linked_entity_type.value,
                    linked_entity_id=spec.linked_entity_id,
                )
                raise DeliberationValidationError(
                    "linked_entity_id",
                    f"{spec.linked_entity_type.value} {spec.linked_entity_id} does not exist",
                )
        return await self._execute(
            "create_execution_task",
            item_id,
            lambda i: self._machine.create_execution_task(
                i, actor, now=self._time.now(), spec=spec
            ),
        )

    async def update_execution_task_status(
        self,
        item_id: str,
        task_id: str,
        status: ExecutionItemStatus,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "update_execution_task_status",
            item_id,
            lambda i: self._machine.update_execution_task_status(
                i, actor, now=self._time.now(), task_id=task_id, status=status
            ),
        )

    async def add_evidence(
        self,
        item_id: str,
        name: str,
        url: str,
        attachment_type: AttachmentType = AttachmentType.DOCUMENT,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        actor = self._actor(actor)
        if not name or not name.strip():
            raise DeliberationValidationError("name", "evidence name is required")
        return await self._execute(
            "add_evidence",
            item_id,
            lambda i: self._machine.add_evidence(
                i,
                actor,
                now=self._time.now(),
                name=name.strip(),
                url=url,
                attachment_type=attachment_type,
            ),
        )

    # ------------------------------------------------------------------
    # Side branches
    # ------------------------------------------------------------------

    async def return_for_revision(
        self,
        item_id: str,
        reason: str | None = None,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "return_for_revision",
            item_id,
            lambda i: self._machine.return_for_revision(
                i, actor, now=self._time.now(), reason=reason
            ),
        )

    async def withdraw(
        self,
        item_id: str,
        reason: str | None = None,
        actor: Actor | None = None,
    ) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "withdraw",
            item_id,
            lambda i: self._machine.withdraw(i, actor, now=self._time.now(), reason=reason),
        )

    async def close(self, item_id: str, actor: Actor | None = None) -> DeliberationItem:
        actor = self._actor(actor)
        return await self._execute(
            "close",
            item_id,
            lambda i: self._machine.close(i, actor, now=self._time.now()),
        )
