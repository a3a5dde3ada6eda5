"""Pydantic API schemas for the Production domain.

These are the external API contracts — separate from domain commands and
from the engine's snapshot dataclasses. The routes translate between them.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class ActorRequest(BaseModel):
    actor_id: str


class CompleteStepRequest(BaseModel):
    actor_id: str
    notes: str | None = None


class ReasonRequest(BaseModel):
    actor_id: str
    reason: str


class SelectStepRequest(BaseModel):
    step_index: int = Field(ge=0)


class QualityIssueRequest(BaseModel):
    actor_id: str
    description: str


class SeedOrderRequest(BaseModel):
    id: str
    order_number: str
    customer_id: str
    urgency_level: str = "NORMAL"
    status: str = "PENDING"
    total_amount: float = 0.0
    created_at: datetime | None = None
    expected_delivery: datetime | None = None
    item_count: int = 0


class ConfigureOutboundRequest(BaseModel):
    notes_succeed: bool = True
    status_succeed: bool = True
    failure_reason: str = "Simulated outage"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class StepResponse(BaseModel):
    index: int
    key: str
    title: str
    description: str | None = None
    status: str
    estimated_duration_minutes: int | None = None
    actual_duration_minutes: int | None = None
    elapsed_seconds: float
    assignee: str | None = None
    requirements: list[str] = []
    tools: list[str] = []
    quality_checks: list[str] = []
    notes: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    blocked_reason: str | None = None
    skipped_reason: str | None = None


class WorkflowResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    steps: list[StepResponse]
    current_step_index: int
    selected_step_index: int
    strict_sequence: bool
    completed_steps: int
    total_steps: int
    progress: float
    elapsed_seconds: float
    timer_active: bool
    timer_step_index: int | None = None
    status_synced: bool
    abandoned_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    as_of: datetime


class SyncWarningResponse(BaseModel):
    sink: str
    order_id: str
    reason: str


class WorkflowResultResponse(BaseModel):
    workflow: WorkflowResponse
    warnings: list[SyncWarningResponse] = []


class TimerResponse(BaseModel):
    order_id: str
    elapsed_seconds: float
    timer_active: bool
    step_index: int | None = None
    as_of: datetime


class BoardResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    total_steps: int
    completed_steps: int
    skipped_steps: int
    progress: float
    current_step_index: int | None = None
    current_step_title: str | None = None
    is_processing: bool
    is_paused: bool
    is_blocked: bool
    blocked_steps: int = 0
    last_actor_id: str | None = None
    updated_at: datetime | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    urgency_level: str
    status: str
    total_amount: float
    created_at: datetime | None = None
    expected_delivery: datetime | None = None
    item_count: int


class TimeStatusResponse(BaseModel):
    is_overdue: bool
    hours_remaining: float | None = None
    label: str


class QueueEntryResponse(BaseModel):
    order: OrderResponse
    score: float
    hours_in_queue: float
    time_status: TimeStatusResponse


class QueueCountsResponse(BaseModel):
    urgent: int
    pending: int
    processing: int


class QueueStatsResponse(BaseModel):
    queue: str
    item_count: int
    long_wait_count: int
    average_score: float
    total_value: float
    overdue_count: int


class OutboundConfigResponse(BaseModel):
    notes_succeed: bool
    status_succeed: bool
    failure_reason: str
