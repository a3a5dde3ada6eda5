"""Read models returned by the engine.

Snapshots are plain frozen dataclasses built from the aggregate, so callers
never hold a live Workflow outside the engine's lock.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime

from production.errors import ExternalSyncFailure
from production.workflow.workflow import ProductionStep, Workflow


@dataclass(frozen=True)
class StepSnapshot:
    index: int
    key: str
    title: str
    description: str | None
    status: str
    estimated_duration_minutes: int | None
    actual_duration_minutes: int | None
    elapsed_seconds: float
    assignee: str | None
    requirements: list[str]
    tools: list[str]
    quality_checks: list[str]
    notes: str | None
    started_at: datetime | None
    completed_at: datetime | None
    blocked_reason: str | None
    skipped_reason: str | None


@dataclass(frozen=True)
class WorkflowSnapshot:
    order_id: str
    order_number: str
    status: str
    steps: tuple[StepSnapshot, ...]
    current_step_index: int
    selected_step_index: int
    strict_sequence: bool
    completed_steps: int
    total_steps: int
    progress: float
    elapsed_seconds: float
    timer_active: bool
    timer_step_index: int | None
    status_synced: bool
    abandoned_reason: str | None
    created_at: datetime | None
    updated_at: datetime | None
    completed_at: datetime | None
    as_of: datetime


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of a mutating engine operation."""

    workflow: WorkflowSnapshot
    warnings: tuple[ExternalSyncFailure, ...] = field(default_factory=tuple)


def _json_list(value: str | None) -> list[str]:
    return json.loads(value) if value else []


def snapshot_step(wf: Workflow, step: ProductionStep, now: datetime) -> StepSnapshot:
    return StepSnapshot(
        index=step.sequence,
        key=step.key,
        title=step.title,
        description=step.description,
        status=step.status,
        estimated_duration_minutes=step.estimated_duration_minutes,
        actual_duration_minutes=step.actual_duration_minutes,
        elapsed_seconds=wf.step_elapsed_seconds(step, now),
        assignee=str(step.assignee) if step.assignee else None,
        requirements=_json_list(step.requirements),
        tools=_json_list(step.tools),
        quality_checks=_json_list(step.quality_checks),
        notes=step.notes,
        started_at=step.started_at,
        completed_at=step.completed_at,
        blocked_reason=step.blocked_reason,
        skipped_reason=step.skipped_reason,
    )


def snapshot_workflow(wf: Workflow, now: datetime) -> WorkflowSnapshot:
    steps = wf.ordered_steps
    return WorkflowSnapshot(
        order_id=str(wf.order_id),
        order_number=wf.order_number,
        status=wf.status,
        steps=tuple(snapshot_step(wf, s, now) for s in steps),
        current_step_index=wf.current_step_index,
        selected_step_index=wf.selected_step_index,
        strict_sequence=bool(wf.strict_sequence),
        completed_steps=wf.completed_count,
        total_steps=len(steps),
        progress=wf.progress,
        elapsed_seconds=wf.elapsed_seconds(now),
        timer_active=bool(wf.timer and wf.timer.active),
        timer_step_index=wf.timer.step_index if wf.timer else None,
        status_synced=bool(wf.status_synced),
        abandoned_reason=wf.abandoned_reason,
        created_at=wf.created_at,
        updated_at=wf.updated_at,
        completed_at=wf.completed_at,
        as_of=now,
    )
