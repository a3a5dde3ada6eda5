"""Workflow board — one row per order in production for the staff dashboard.

The ``is_processing`` and ``is_blocked`` flags only exist here. They are
derived from workflow events and never written back to the aggregate.
``is_blocked`` stays set while any step of the order is blocked, which in
free sequence mode can outlive the start of another step.
"""

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from production.domain import production
from production.workflow.events import (
    StepBlocked,
    StepCompleted,
    StepPaused,
    StepResumed,
    StepSkipped,
    StepStarted,
    StepUnblocked,
    WorkflowAbandoned,
    WorkflowArchived,
    WorkflowCompleted,
    WorkflowCreated,
)
from production.workflow.workflow import Workflow


@production.projection
class WorkflowBoard:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, sanitize=False)
    status = String(required=True)
    total_steps = Integer(default=0)
    completed_steps = Integer(default=0)
    skipped_steps = Integer(default=0)
    progress = Float(default=0.0)
    current_step_index = Integer()
    current_step_title = String(sanitize=False)
    is_processing = Boolean(default=False)
    is_paused = Boolean(default=False)
    is_blocked = Boolean(default=False)
    blocked_steps = Integer(default=0)
    last_actor_id = String()
    created_at = DateTime()
    updated_at = DateTime()


def _progress(view: WorkflowBoard) -> float:
    return round(view.completed_steps / view.total_steps, 4) if view.total_steps else 0.0


def _count_blocked(view: WorkflowBoard, delta: int) -> None:
    view.blocked_steps = max((view.blocked_steps or 0) + delta, 0)
    view.is_blocked = view.blocked_steps > 0


@production.projector(projector_for=WorkflowBoard, aggregates=[Workflow])
class WorkflowBoardProjector:
    @on(WorkflowCreated)
    def on_workflow_created(self, event):
        current_domain.repository_for(WorkflowBoard).add(
            WorkflowBoard(
                order_id=event.order_id,
                order_number=event.order_number,
                status="Active",
                total_steps=event.step_count,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(StepStarted)
    def on_step_started(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.current_step_index = event.step_index
        view.current_step_title = event.step_title
        view.is_processing = True
        view.is_paused = False
        view.last_actor_id = event.actor_id
        view.updated_at = event.started_at
        repo.add(view)

    @on(StepPaused)
    def on_step_paused(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.is_paused = True
        view.last_actor_id = event.actor_id
        view.updated_at = event.paused_at
        repo.add(view)

    @on(StepResumed)
    def on_step_resumed(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.is_paused = False
        view.last_actor_id = event.actor_id
        view.updated_at = event.resumed_at
        repo.add(view)

    @on(StepCompleted)
    def on_step_completed(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.completed_steps = (view.completed_steps or 0) + 1
        view.progress = _progress(view)
        view.is_processing = False
        view.is_paused = False
        view.last_actor_id = event.actor_id
        view.updated_at = event.completed_at
        repo.add(view)

    @on(StepBlocked)
    def on_step_blocked(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.is_processing = False
        view.is_paused = False
        _count_blocked(view, 1)
        view.last_actor_id = event.actor_id
        view.updated_at = event.blocked_at
        repo.add(view)

    @on(StepUnblocked)
    def on_step_unblocked(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        _count_blocked(view, -1)
        view.last_actor_id = event.actor_id
        view.updated_at = event.unblocked_at
        repo.add(view)

    @on(StepSkipped)
    def on_step_skipped(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.skipped_steps = (view.skipped_steps or 0) + 1
        view.last_actor_id = event.actor_id
        view.updated_at = event.skipped_at
        repo.add(view)

    @on(WorkflowCompleted)
    def on_workflow_completed(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.status = "Completed"
        view.is_processing = False
        view.updated_at = event.completed_at
        repo.add(view)

    @on(WorkflowAbandoned)
    def on_workflow_abandoned(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.status = "Abandoned"
        view.is_processing = False
        view.is_paused = False
        if event.halted_step_index is not None:
            _count_blocked(view, 1)
        view.last_actor_id = event.actor_id
        view.updated_at = event.abandoned_at
        repo.add(view)

    @on(WorkflowArchived)
    def on_workflow_archived(self, event):
        repo = current_domain.repository_for(WorkflowBoard)
        view = repo.get(event.order_id)
        view.status = "Archived"
        view.updated_at = event.archived_at
        repo.add(view)
