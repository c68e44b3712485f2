"""Deliberation API routes.

FastAPI router for the deliberation workflow command and query surface.

Error mapping (RFC 7807 problem details in ``detail``):
- DeliberationNotFoundError / ExecutionTaskNotFoundError / StageNotFoundError -> 404
- InvalidTransitionError (strict mode) -> 409
- DeliberationValidationError -> 422

In the default (lenient) mode an out-of-state command returns 200 with the
unchanged item; clients compare deliberation_status to detect it.

Developer Golden Rules:
1. THIN ROUTES - All workflow logic lives in the services
2. FAIL LOUD - Return meaningful RFC 7807 error responses
3. ACTOR FROM HEADERS - X-Actor-Id / X-Actor-Name identify the caller
"""

from typing import Awaitable

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.dependencies.deliberation import (
    get_current_actor,
    get_deliberation_query_service,
    get_deliberation_service,
)
from src.api.models.deliberation import (
    AddEvidenceRequest,
    BoardHealthKpisResponse,
    CastVoteRequest,
    CreateExecutionTaskRequest,
    DeliberationErrorResponse,
    DeliberationListResponse,
    DeliberationResponse,
    DeliberationSummaryModel,
    QueueCountsResponse,
    ReasonRequest,
    SubmitDeliberationRequest,
    UpdateExecutionTaskRequest,
)
from src.application.dtos.deliberation import (
    DeliberationFilterDTO,
    KpiBucket,
    SubmitDeliberationDTO,
)
from src.application.services.deliberation_query_service import (
    DeliberationQueryService,
)
from src.application.services.deliberation_service import DeliberationService
from src.domain.errors.deliberation import (
    DeliberationNotFoundError,
    DeliberationValidationError,
    ExecutionTaskNotFoundError,
    InvalidTransitionError,
    StageNotFoundError,
)
from src.domain.models.actor import Actor
from src.domain.models.deliberation_item import (
    AttachmentType,
    DeliberationItem,
    DeliberationStatus,
    RiskLevel,
)
from src.domain.models.execution_item import (
    ExecutionItemStatus,
    ExecutionTaskSpec,
    LinkedEntityType,
)
from src.domain.models.vote_record import VoteOption

router = APIRouter(prefix="/v1/deliberations", tags=["deliberations"])

ERROR_RESPONSES = {
    404: {"model": DeliberationErrorResponse, "description": "Item or task not found"},
    409: {"model": DeliberationErrorResponse, "description": "Invalid transition"},
    422: {"model": DeliberationErrorResponse, "description": "Invalid payload"},
}


# =============================================================================
# Mapping helpers
# =============================================================================


def _problem(request: Request, status: int, slug: str, title: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=status,
        detail={
            "type": f"urn:deliberation:error:{slug}",
            "title": title,
            "status": status,
            "detail": str(exc),
            "instance": str(request.url),
        },
    )


async def _run(request: Request, command: Awaitable[DeliberationItem]) -> DeliberationResponse:
    """Await a service command and map domain errors to HTTP errors."""
    try:
        item = await command
    except (
        DeliberationNotFoundError,
        ExecutionTaskNotFoundError,
        StageNotFoundError,
    ) as e:
        raise _problem(request, 404, "not-found", "Not Found", e) from None
    except InvalidTransitionError as e:
        raise _problem(request, 409, "invalid-transition", "Invalid Transition", e) from None
    except DeliberationValidationError as e:
        raise _problem(request, 422, "validation", "Validation Failed", e) from None
    return DeliberationResponse.model_validate(item.to_dict())


def _summary(item: DeliberationItem) -> DeliberationSummaryModel:
    return DeliberationSummaryModel(
        item_id=item.item_id,
        title=item.title,
        owner_committee_id=item.owner_committee_id,
        owner_committee_name=item.owner_committee_name,
        deliberation_status=item.deliberation_status.value,
        priority=item.priority.value,
        risk_level=item.risk_level.value,
        current_stage_id=item.current_stage_id,
        due_date=item.due_date,
        resolved_at=item.resolved_at,
    )


def _to_submit_dto(body: SubmitDeliberationRequest) -> SubmitDeliberationDTO:
    fields = body.model_dump(exclude={"risk_level"})
    return SubmitDeliberationDTO(risk_level=RiskLevel(body.risk_level.value), **fields)


# =============================================================================
# Queries
# =============================================================================


@router.get(
    "",
    response_model=DeliberationListResponse,
    summary="List deliberations",
    description="Filter by status queue, owner committee, search text or KPI bucket.",
)
async def list_deliberations(
    status: DeliberationStatus | None = Query(default=None),
    committee_id: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    kpi: KpiBucket | None = Query(default=None),
    queries: DeliberationQueryService = Depends(get_deliberation_query_service),
) -> DeliberationListResponse:
    items = await queries.list_deliberations(
        DeliberationFilterDTO(status=status, committee_id=committee_id, search=search, kpi=kpi)
    )
    return DeliberationListResponse(items=[_summary(i) for i in items], total=len(items))


@router.get("/queue-counts", response_model=QueueCountsResponse, summary="Count items per status")
async def get_queue_counts(
    queries: DeliberationQueryService = Depends(get_deliberation_query_service),
) -> QueueCountsResponse:
    counts = await queries.queue_counts()
    return QueueCountsResponse(counts={s.value: n for s, n in counts.items()})


@router.get("/kpis", response_model=BoardHealthKpisResponse, summary="Board health KPIs")
async def get_board_health_kpis(
    queries: DeliberationQueryService = Depends(get_deliberation_query_service),
) -> BoardHealthKpisResponse:
    kpis = await queries.board_health_kpis()
    return BoardHealthKpisResponse(
        open_count=kpis.open_count,
        in_voting_count=kpis.in_voting_count,
        overdue_count=kpis.overdue_count,
        resolved_recently_count=kpis.resolved_recently_count,
        average_resolution_days=kpis.average_resolution_days,
    )


@router.get(
    "/next-session",
    response_model=DeliberationListResponse,
    summary="Items for the next committee session",
)
async def get_next_session_items(
    limit: int = Query(default=3, ge=1, le=50),
    queries: DeliberationQueryService = Depends(get_deliberation_query_service),
) -> DeliberationListResponse:
    items = await queries.next_session_items(limit=limit)
    return DeliberationListResponse(items=[_summary(i) for i in items], total=len(items))


@router.get(
    "/{item_id}",
    response_model=DeliberationResponse,
    responses={404: ERROR_RESPONSES[404]},
    summary="Get a deliberation",
)
async def get_deliberation(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
) -> DeliberationResponse:
    return await _run(request, service.get_deliberation(item_id))


# =============================================================================
# Commands
# =============================================================================


@router.post(
    "",
    response_model=DeliberationResponse,
    status_code=201,
    responses={422: ERROR_RESPONSES[422]},
    summary="Submit a new deliberation",
    description="Builds the stage plan from the routing policy and submits the item.",
)
async def submit_deliberation(
    body: SubmitDeliberationRequest,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.submit_deliberation(_to_submit_dto(body), actor=actor))


@router.post("/{item_id}/submit", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def submit_existing(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.submit(item_id, actor=actor))


@router.post("/{item_id}/review", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def request_review(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.request_review(item_id, actor=actor))


@router.post(
    "/{item_id}/voting/start", response_model=DeliberationResponse, responses=ERROR_RESPONSES
)
async def start_voting(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.start_voting(item_id, actor=actor))


@router.post("/{item_id}/votes", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def cast_vote(
    item_id: str,
    body: CastVoteRequest,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(
        request,
        service.cast_vote(
            item_id,
            VoteOption(body.vote.value),
            justification=body.justification,
            has_conflict_of_interest=body.has_conflict_of_interest,
            actor=actor,
        ),
    )


@router.post(
    "/{item_id}/voting/close", response_model=DeliberationResponse, responses=ERROR_RESPONSES
)
async def close_voting(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.close_voting(item_id, actor=actor))


@router.post("/{item_id}/minutes", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def generate_minutes(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.generate_minutes(item_id, actor=actor))


@router.post(
    "/{item_id}/minutes/publish", response_model=DeliberationResponse, responses=ERROR_RESPONSES
)
async def publish_minutes(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.publish_minutes(item_id, actor=actor))


@router.post(
    "/{item_id}/execution-tasks", response_model=DeliberationResponse, responses=ERROR_RESPONSES
)
async def create_execution_task(
    item_id: str,
    body: CreateExecutionTaskRequest,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    spec = ExecutionTaskSpec(
        title=body.title,
        owner_name=body.owner_name,
        due_date=body.due_date,
        linked_entity_type=(
            LinkedEntityType(body.linked_entity_type.value)
            if body.linked_entity_type
            else None
        ),
        linked_entity_id=body.linked_entity_id,
    )
    return await _run(request, service.create_execution_task(item_id, spec, actor=actor))


@router.patch(
    "/{item_id}/execution-tasks/{task_id}",
    response_model=DeliberationResponse,
    responses=ERROR_RESPONSES,
)
async def update_execution_task(
    item_id: str,
    task_id: str,
    body: UpdateExecutionTaskRequest,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(
        request,
        service.update_execution_task_status(
            item_id, task_id, ExecutionItemStatus(body.status.value), actor=actor
        ),
    )


@router.post("/{item_id}/evidence", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def add_evidence(
    item_id: str,
    body: AddEvidenceRequest,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(
        request,
        service.add_evidence(
            item_id,
            body.name,
            body.url,
            attachment_type=AttachmentType(body.attachment_type.value),
            actor=actor,
        ),
    )


@router.post("/{item_id}/return", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def return_for_revision(
    item_id: str,
    request: Request,
    body: ReasonRequest | None = None,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    reason = body.reason if body else None
    return await _run(request, service.return_for_revision(item_id, reason=reason, actor=actor))


@router.post("/{item_id}/withdraw", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def withdraw(
    item_id: str,
    request: Request,
    body: ReasonRequest | None = None,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    reason = body.reason if body else None
    return await _run(request, service.withdraw(item_id, reason=reason, actor=actor))


@router.post("/{item_id}/close", response_model=DeliberationResponse, responses=ERROR_RESPONSES)
async def close_deliberation(
    item_id: str,
    request: Request,
    service: DeliberationService = Depends(get_deliberation_service),
    actor: Actor | None = Depends(get_current_actor),
) -> DeliberationResponse:
    return await _run(request, service.close(item_id, actor=actor))
