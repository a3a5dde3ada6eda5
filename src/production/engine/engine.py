"""Workflow engine — the application service staff actions go through.

Every mutating operation:

1. validates its input,
2. takes the per-order instance lock,
3. processes a domain command (the unit of work commits or rolls back),
4. talks to the external sinks.

Sink failures never undo a committed transition. They are logged and
returned to the caller as ``ExternalSyncFailure`` warnings. The final order
status update runs inside the lock so that it is requested exactly once;
audit notes are written after the lock is released.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from production.engine.locks import InstanceLocks
from production.engine.notes import (
    quality_issue_note,
    step_blocked_note,
    step_completed_note,
    step_skipped_note,
    workflow_abandoned_note,
)
from production.engine.snapshots import WorkflowResult, WorkflowSnapshot, snapshot_workflow
from production.errors import ConcurrentModification, ExternalSyncFailure, InvalidTransition
from production.orders import get_order_source
from production.orders.port import CANCELLATION_STATUSES, OrderRecord, OrderSource, OrderStatus
from production.outbound import get_note_emitter, get_status_publisher
from production.outbound.note_port import NoteEmitter, ProductionNote
from production.outbound.status_port import StatusPublisher
from production.workflow.abandonment import AbandonWorkflow, ArchiveWorkflow, MarkStatusSynced
from production.workflow.blocking import BlockStep, ReportQualityIssue, UnblockStep
from production.workflow.completion import CompleteStep, SkipStep
from production.workflow.navigation import SelectStep
from production.workflow.starting import PauseStep, ResumeStep, StartStep
from production.workflow.workflow import Workflow, WorkflowStatus

logger = structlog.get_logger(__name__)

COMPLETION_REASON = "Production completed successfully"


def _require_text(value: str | None, field: str, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError({field: [message]})
    return str(value).strip()


class WorkflowEngine:
    """Drives production workflows for staff actions."""

    def __init__(
        self,
        order_source: OrderSource | None = None,
        note_emitter: NoteEmitter | None = None,
        status_publisher: StatusPublisher | None = None,
        clock: Callable[[], datetime] | None = None,
        locks: InstanceLocks | None = None,
        strict_sequence: bool = True,
        completed_order_status: str = OrderStatus.SHIPPED.value,
        lock_timeout: float = 2.0,
    ):
        self._order_source = order_source
        self._note_emitter = note_emitter
        self._status_publisher = status_publisher
        self.clock = clock or (lambda: datetime.now(UTC))
        self.locks = locks or InstanceLocks()
        self.strict_sequence = strict_sequence
        self.completed_order_status = completed_order_status
        self.lock_timeout = lock_timeout

    # -------------------------------------------------------------------
    # Collaborators (resolved lazily so tests can swap the singletons)
    # -------------------------------------------------------------------
    @property
    def order_source(self) -> OrderSource:
        return self._order_source or get_order_source()

    @property
    def note_emitter(self) -> NoteEmitter:
        return self._note_emitter or get_note_emitter()

    @property
    def status_publisher(self) -> StatusPublisher:
        return self._status_publisher or get_status_publisher()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    @contextmanager
    def _transition(self, order_id: str, operation: str, actor_id: str | None = None, wait: bool = True) -> Iterator[None]:
        """Hold the instance lock for one transition and log rejections."""
        try:
            with self.locks.claim(str(order_id), blocking=wait, timeout=self.lock_timeout):
                yield
        except InvalidTransition as exc:
            logger.info(
                "Workflow transition rejected",
                order_id=str(order_id),
                operation=operation,
                actor_id=actor_id,
                reason=exc.messages,
            )
            raise
        except ConcurrentModification:
            logger.info(
                "Workflow is locked by another actor",
                order_id=str(order_id),
                operation=operation,
                actor_id=actor_id,
            )
            raise

    def _process(self, command) -> Workflow:
        return current_domain.process(command, asynchronous=False)

    def _load(self, order_id: str) -> Workflow:
        return current_domain.repository_for(Workflow).get(str(order_id))

    def _require_order(self, order_id: str) -> OrderRecord:
        order = self.order_source.get_order(str(order_id))
        if order is None:
            raise ObjectNotFoundError({"_entity": f"Order {order_id} not found"})
        return order

    def _emit(self, order_id: str, note: ProductionNote, warnings: list[ExternalSyncFailure]) -> None:
        try:
            result = self.note_emitter.emit(str(order_id), note)
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
        else:
            if result.get("status") != "failed":
                return
            reason = result.get("error") or "Unknown note emitter error"

        logger.warning(
            "Failed to record production note",
            order_id=str(order_id),
            note_type=note.note_type,
            error=reason,
        )
        warnings.append(ExternalSyncFailure("note_emitter", str(order_id), reason))

    def _sync_status(self, wf: Workflow, warnings: list[ExternalSyncFailure]) -> Workflow:
        """Ask the order service to advance the order. Caller holds the lock."""
        order_id = str(wf.order_id)
        try:
            result = self.status_publisher.publish(order_id, self.completed_order_status, COMPLETION_REASON)
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
        else:
            if result.get("status") != "failed":
                logger.info(
                    "Order status updated after production",
                    order_id=order_id,
                    status=self.completed_order_status,
                )
                return self._process(
                    MarkStatusSynced(
                        order_id=order_id,
                        order_status=self.completed_order_status,
                        requested_at=self.clock(),
                    )
                )
            reason = result.get("error") or "Unknown status publisher error"

        logger.warning(
            "Failed to update order status after production",
            order_id=order_id,
            status=self.completed_order_status,
            error=reason,
        )
        warnings.append(ExternalSyncFailure("status_publisher", order_id, reason))
        return wf

    def _result(self, wf: Workflow, warnings: list[ExternalSyncFailure]) -> WorkflowResult:
        return WorkflowResult(workflow=snapshot_workflow(wf, self.clock()), warnings=tuple(warnings))

    # -------------------------------------------------------------------
    # Step operations
    # -------------------------------------------------------------------
    def start_step(self, order_id: str, step_index: int, actor_id: str) -> WorkflowResult:
        """Start a pending step, creating the workflow on first use.

        Does not wait for the instance lock: a concurrent start on the same
        order fails with ConcurrentModification.
        """
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        order = self._require_order(order_id)
        if order.is_terminal:
            raise InvalidTransition({"order": [f"Order {order.order_number} is {order.status}"]})

        with self._transition(order_id, "start_step", actor_id, wait=False):
            wf = self._process(
                StartStep(
                    order_id=str(order_id),
                    order_number=order.order_number,
                    step_index=step_index,
                    actor_id=actor_id,
                    strict_sequence=self.strict_sequence,
                    requested_at=self.clock(),
                )
            )

        logger.info("Production step started", order_id=str(order_id), step_index=step_index, actor_id=actor_id)
        return self._result(wf, [])

    def pause_step(self, order_id: str, actor_id: str) -> WorkflowResult:
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        with self._transition(order_id, "pause_step", actor_id):
            wf = self._process(PauseStep(order_id=str(order_id), actor_id=actor_id, requested_at=self.clock()))
        return self._result(wf, [])

    def resume_step(self, order_id: str, actor_id: str) -> WorkflowResult:
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        with self._transition(order_id, "resume_step", actor_id):
            wf = self._process(ResumeStep(order_id=str(order_id), actor_id=actor_id, requested_at=self.clock()))
        return self._result(wf, [])

    def complete_step(self, order_id: str, step_index: int, notes: str | None, actor_id: str) -> WorkflowResult:
        """Complete an in-progress step; the last one finishes the workflow."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        notes = notes.strip() if notes and notes.strip() else None
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "complete_step", actor_id):
            wf = self._process(
                CompleteStep(
                    order_id=str(order_id),
                    step_index=step_index,
                    actor_id=actor_id,
                    notes=notes,
                    requested_at=self.clock(),
                )
            )
            if wf.needs_status_sync:
                logger.info("Production workflow completed", order_id=str(order_id), actor_id=actor_id)
                wf = self._sync_status(wf, warnings)

        step = wf.step_at(step_index)
        logger.info(
            "Production step completed",
            order_id=str(order_id),
            step_index=step_index,
            actor_id=actor_id,
            actual_duration_minutes=step.actual_duration_minutes,
        )
        self._emit(order_id, step_completed_note(step.title, notes), warnings)
        return self._result(wf, warnings)

    def block_step(self, order_id: str, step_index: int, reason: str, actor_id: str) -> WorkflowResult:
        """Halt an in-progress step; elapsed time is banked on the step."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        reason = _require_text(reason, "reason", "A reason is required to block a step")
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "block_step", actor_id):
            wf = self._process(
                BlockStep(
                    order_id=str(order_id),
                    step_index=step_index,
                    actor_id=actor_id,
                    reason=reason,
                    requested_at=self.clock(),
                )
            )

        step = wf.step_at(step_index)
        logger.info("Production step blocked", order_id=str(order_id), step_index=step_index, actor_id=actor_id)
        self._emit(order_id, step_blocked_note(step.title, reason), warnings)
        return self._result(wf, warnings)

    def unblock_step(self, order_id: str, step_index: int, actor_id: str) -> WorkflowResult:
        """Return a blocked step to pending."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        with self._transition(order_id, "unblock_step", actor_id):
            wf = self._process(
                UnblockStep(
                    order_id=str(order_id),
                    step_index=step_index,
                    actor_id=actor_id,
                    requested_at=self.clock(),
                )
            )
        return self._result(wf, [])

    def skip_step(self, order_id: str, step_index: int, reason: str, actor_id: str) -> WorkflowResult:
        """Bypass a pending step. Skipping the last open step completes the workflow."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        reason = _require_text(reason, "reason", "A reason is required to skip a step")
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "skip_step", actor_id):
            wf = self._process(
                SkipStep(
                    order_id=str(order_id),
                    step_index=step_index,
                    actor_id=actor_id,
                    reason=reason,
                    requested_at=self.clock(),
                )
            )
            if wf.needs_status_sync:
                logger.info("Production workflow completed", order_id=str(order_id), actor_id=actor_id)
                wf = self._sync_status(wf, warnings)

        step = wf.step_at(step_index)
        self._emit(order_id, step_skipped_note(step.title, reason), warnings)
        return self._result(wf, warnings)

    def report_quality_issue(self, order_id: str, description: str, actor_id: str) -> WorkflowResult:
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        description = _require_text(description, "description", "A description of the quality issue is required")
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "report_quality_issue", actor_id):
            wf = self._process(
                ReportQualityIssue(
                    order_id=str(order_id),
                    actor_id=actor_id,
                    description=description,
                    requested_at=self.clock(),
                )
            )

        logger.info("Quality issue reported", order_id=str(order_id), actor_id=actor_id)
        self._emit(order_id, quality_issue_note(description), warnings)
        return self._result(wf, warnings)

    def select_step(self, order_id: str, step_index: int) -> WorkflowResult:
        with self._transition(order_id, "select_step"):
            wf = self._process(SelectStep(order_id=str(order_id), step_index=step_index, requested_at=self.clock()))
        return self._result(wf, [])

    # -------------------------------------------------------------------
    # Workflow lifecycle
    # -------------------------------------------------------------------
    def abandon(self, order_id: str, reason: str, actor_id: str) -> WorkflowResult:
        """Stop production; an in-progress step is halted as blocked."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        reason = _require_text(reason, "reason", "A reason is required to abandon a workflow")
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "abandon", actor_id):
            wf = self._process(
                AbandonWorkflow(
                    order_id=str(order_id),
                    actor_id=actor_id,
                    reason=reason,
                    requested_at=self.clock(),
                )
            )

        logger.info("Production workflow abandoned", order_id=str(order_id), actor_id=actor_id, reason=reason)
        self._emit(order_id, workflow_abandoned_note(reason), warnings)
        return self._result(wf, warnings)

    def reconcile_order(self, order_id: str, actor_id: str) -> WorkflowResult:
        """Bring the workflow in line with the order's current status.

        A cancelled or refunded order abandons an active workflow. Any
        terminal order status archives the workflow.
        """
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        order = self._require_order(order_id)
        warnings: list[ExternalSyncFailure] = []
        abandoned_reason = None

        with self._transition(order_id, "reconcile_order", actor_id):
            wf = self._load(order_id)
            if order.status in CANCELLATION_STATUSES and wf.status == WorkflowStatus.ACTIVE.value:
                abandoned_reason = f"Order {order.status.lower()}"
                wf = self._process(
                    AbandonWorkflow(
                        order_id=str(order_id),
                        actor_id=actor_id,
                        reason=abandoned_reason,
                        requested_at=self.clock(),
                    )
                )
            if order.is_terminal and wf.status != WorkflowStatus.ARCHIVED.value:
                wf = self._process(
                    ArchiveWorkflow(
                        order_id=str(order_id),
                        order_status=order.status,
                        requested_at=self.clock(),
                    )
                )
                logger.info("Production workflow archived", order_id=str(order_id), order_status=order.status)

        if abandoned_reason:
            self._emit(order_id, workflow_abandoned_note(abandoned_reason), warnings)
        return self._result(wf, warnings)

    def retry_status_sync(self, order_id: str, actor_id: str) -> WorkflowResult:
        """Re-attempt a failed post-production status update."""
        actor_id = _require_text(actor_id, "actor_id", "An actor is required")
        warnings: list[ExternalSyncFailure] = []

        with self._transition(order_id, "retry_status_sync", actor_id):
            wf = self._load(order_id)
            if wf.completed_at is None:
                raise InvalidTransition({"status": ["Workflow has not completed production"]})
            if wf.needs_status_sync:
                wf = self._sync_status(wf, warnings)

        return self._result(wf, warnings)

    # -------------------------------------------------------------------
    # Lock-free reads
    # -------------------------------------------------------------------
    def snapshot(self, order_id: str) -> WorkflowSnapshot:
        return snapshot_workflow(self._load(order_id), self.clock())

    def elapsed_seconds(self, order_id: str) -> float:
        """Server-side elapsed work time of the active step."""
        return self._load(order_id).elapsed_seconds(self.clock())
