"""FastAPI routes for the Production domain."""

import os
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from production.api.schemas import (
    ActorRequest,
    BoardResponse,
    CompleteStepRequest,
    ConfigureOutboundRequest,
    OrderResponse,
    OutboundConfigResponse,
    QualityIssueRequest,
    QueueCountsResponse,
    QueueEntryResponse,
    QueueStatsResponse,
    ReasonRequest,
    SeedOrderRequest,
    SelectStepRequest,
    TimerResponse,
    WorkflowResponse,
    WorkflowResultResponse,
)
from production.engine import get_engine
from production.engine.snapshots import WorkflowResult
from production.orders import get_order_source
from production.orders.memory_source import InMemoryOrderSource
from production.orders.port import OrderRecord
from production.outbound import get_note_emitter, get_status_publisher
from production.outbound.fake_notes import FakeNoteEmitter
from production.outbound.fake_status import FakeStatusPublisher
from production.projections.workflow_board import WorkflowBoard
from production.queue.classifier import QueueName
from production.queue.priority_queue import PriorityQueue, SortKey, SortOrder


def _result_response(result: WorkflowResult) -> WorkflowResultResponse:
    return WorkflowResultResponse(
        workflow=WorkflowResponse(**asdict(result.workflow)),
        warnings=[{"sink": w.sink, "order_id": w.order_id, "reason": w.reason} for w in result.warnings],
    )


def _queue() -> PriorityQueue:
    return PriorityQueue(clock=get_engine().clock)


def _reject_in_production(what: str) -> None:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail=f"{what} not available in production")


# ---------------------------------------------------------------------------
# Workflow Router
# ---------------------------------------------------------------------------
workflow_router = APIRouter(prefix="/workflows", tags=["workflows"])


@workflow_router.put("/{order_id}/steps/{step_index}/start", response_model=WorkflowResultResponse)
async def start_step(order_id: str, step_index: int, body: ActorRequest) -> WorkflowResultResponse:
    """Start a pending step. The first start creates the workflow."""
    return _result_response(get_engine().start_step(order_id, step_index, body.actor_id))


@workflow_router.put("/{order_id}/steps/{step_index}/complete", response_model=WorkflowResultResponse)
async def complete_step(order_id: str, step_index: int, body: CompleteStepRequest) -> WorkflowResultResponse:
    """Complete an in-progress step."""
    return _result_response(get_engine().complete_step(order_id, step_index, body.notes, body.actor_id))


@workflow_router.put("/{order_id}/steps/{step_index}/block", response_model=WorkflowResultResponse)
async def block_step(order_id: str, step_index: int, body: ReasonRequest) -> WorkflowResultResponse:
    """Block an in-progress step with a reason."""
    return _result_response(get_engine().block_step(order_id, step_index, body.reason, body.actor_id))


@workflow_router.put("/{order_id}/steps/{step_index}/unblock", response_model=WorkflowResultResponse)
async def unblock_step(order_id: str, step_index: int, body: ActorRequest) -> WorkflowResultResponse:
    """Return a blocked step to pending."""
    return _result_response(get_engine().unblock_step(order_id, step_index, body.actor_id))


@workflow_router.put("/{order_id}/steps/{step_index}/skip", response_model=WorkflowResultResponse)
async def skip_step(order_id: str, step_index: int, body: ReasonRequest) -> WorkflowResultResponse:
    """Skip a pending step with a reason."""
    return _result_response(get_engine().skip_step(order_id, step_index, body.reason, body.actor_id))


@workflow_router.put("/{order_id}/pause", response_model=WorkflowResultResponse)
async def pause_step(order_id: str, body: ActorRequest) -> WorkflowResultResponse:
    return _result_response(get_engine().pause_step(order_id, body.actor_id))


@workflow_router.put("/{order_id}/resume", response_model=WorkflowResultResponse)
async def resume_step(order_id: str, body: ActorRequest) -> WorkflowResultResponse:
    return _result_response(get_engine().resume_step(order_id, body.actor_id))


@workflow_router.put("/{order_id}/abandon", response_model=WorkflowResultResponse)
async def abandon_workflow(order_id: str, body: ReasonRequest) -> WorkflowResultResponse:
    """Stop production of an order."""
    return _result_response(get_engine().abandon(order_id, body.reason, body.actor_id))


@workflow_router.put("/{order_id}/reconcile", response_model=WorkflowResultResponse)
async def reconcile_order(order_id: str, body: ActorRequest) -> WorkflowResultResponse:
    """Abandon or archive the workflow according to the order's status."""
    return _result_response(get_engine().reconcile_order(order_id, body.actor_id))


@workflow_router.put("/{order_id}/status-sync", response_model=WorkflowResultResponse)
async def retry_status_sync(order_id: str, body: ActorRequest) -> WorkflowResultResponse:
    """Retry a failed post-production order status update."""
    return _result_response(get_engine().retry_status_sync(order_id, body.actor_id))


@workflow_router.put("/{order_id}/selection", response_model=WorkflowResultResponse)
async def select_step(order_id: str, body: SelectStepRequest) -> WorkflowResultResponse:
    return _result_response(get_engine().select_step(order_id, body.step_index))


@workflow_router.post("/{order_id}/quality-issues", status_code=201, response_model=WorkflowResultResponse)
async def report_quality_issue(order_id: str, body: QualityIssueRequest) -> WorkflowResultResponse:
    """Report a quality issue. No step changes state."""
    return _result_response(get_engine().report_quality_issue(order_id, body.description, body.actor_id))


@workflow_router.get("/{order_id}", response_model=WorkflowResponse)
async def get_workflow(order_id: str) -> WorkflowResponse:
    return WorkflowResponse(**asdict(get_engine().snapshot(order_id)))


@workflow_router.get("/{order_id}/timer", response_model=TimerResponse)
async def get_timer(order_id: str) -> TimerResponse:
    """Server-side elapsed time of the active step, for client reconciliation."""
    snapshot = get_engine().snapshot(order_id)
    return TimerResponse(
        order_id=snapshot.order_id,
        elapsed_seconds=snapshot.elapsed_seconds,
        timer_active=snapshot.timer_active,
        step_index=snapshot.timer_step_index,
        as_of=snapshot.as_of,
    )


@workflow_router.get("/{order_id}/board", response_model=BoardResponse)
async def get_board(order_id: str) -> BoardResponse:
    view = current_domain.repository_for(WorkflowBoard).get(order_id)
    return BoardResponse(
        order_id=str(view.order_id),
        order_number=view.order_number,
        status=view.status,
        total_steps=view.total_steps or 0,
        completed_steps=view.completed_steps or 0,
        skipped_steps=view.skipped_steps or 0,
        progress=view.progress or 0.0,
        current_step_index=view.current_step_index,
        current_step_title=view.current_step_title,
        is_processing=bool(view.is_processing),
        is_paused=bool(view.is_paused),
        is_blocked=bool(view.is_blocked),
        blocked_steps=view.blocked_steps or 0,
        last_actor_id=view.last_actor_id,
        updated_at=view.updated_at,
    )


# ---------------------------------------------------------------------------
# Queue Router
# ---------------------------------------------------------------------------
queue_router = APIRouter(prefix="/queues", tags=["queues"])


@queue_router.get("", response_model=QueueCountsResponse)
async def queue_counts() -> QueueCountsResponse:
    return QueueCountsResponse(**_queue().counts())


@queue_router.get("/{queue_id}", response_model=list[QueueEntryResponse])
async def list_queue(
    queue_id: QueueName,
    sort_by: SortKey = Query(default=SortKey.PRIORITY),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
) -> list[QueueEntryResponse]:
    """Ranked entries of one work queue."""
    entries = _queue().list(queue_id, sort_by=sort_by, sort_order=sort_order)
    return [QueueEntryResponse(**asdict(entry)) for entry in entries]


@queue_router.get("/{queue_id}/stats", response_model=QueueStatsResponse)
async def queue_stats(queue_id: QueueName) -> QueueStatsResponse:
    return QueueStatsResponse(**asdict(_queue().stats(queue_id)))


# ---------------------------------------------------------------------------
# Dev Router (seeding and fake sink configuration, non-production only)
# ---------------------------------------------------------------------------
dev_router = APIRouter(prefix="/dev", tags=["dev"])


@dev_router.post("/orders", status_code=201, response_model=OrderResponse)
async def seed_order(body: SeedOrderRequest) -> OrderResponse:
    """Add or replace an order in the in-memory order source."""
    _reject_in_production("Order seeding")

    source = get_order_source()
    if not isinstance(source, InMemoryOrderSource):
        raise HTTPException(status_code=400, detail="Order seeding only available for InMemoryOrderSource")

    order = OrderRecord(**body.model_dump())
    source.put(order)
    return OrderResponse(**asdict(order))


@dev_router.post("/outbound/configure", response_model=OutboundConfigResponse)
async def configure_outbound(body: ConfigureOutboundRequest) -> OutboundConfigResponse:
    """Make the fake note emitter and status publisher fail or succeed."""
    _reject_in_production("Outbound configuration")

    emitter, publisher = get_note_emitter(), get_status_publisher()
    if not isinstance(emitter, FakeNoteEmitter) or not isinstance(publisher, FakeStatusPublisher):
        raise HTTPException(status_code=400, detail="Outbound configuration only available for fake adapters")

    emitter.configure(should_succeed=body.notes_succeed, failure_reason=body.failure_reason)
    publisher.configure(should_succeed=body.status_succeed, failure_reason=body.failure_reason)
    return OutboundConfigResponse(
        notes_succeed=emitter.should_succeed,
        status_succeed=publisher.should_succeed,
        failure_reason=body.failure_reason,
    )
