"""Workflow aggregate — one production run of an order through the pipeline.

The Workflow is created lazily when staff start the first step of an order
and owns its ordered ProductionSteps and the TimerSession of the active one.

Step state machine:
    pending → in-progress → completed
    in-progress → blocked → pending
    pending → skipped

Workflow lifecycle:
    Active → {Completed, Abandoned} → Archived
    Active → Archived   (order reached a terminal status externally)

At most one step is in progress at any time. The final step can only start
or be skipped once every earlier step is resolved, even without strict
sequencing, so the workflow always completes on the final step.
"""

import json
import math
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from production.domain import production
from production.errors import InvalidTransition
from production.workflow.events import (
    OrderStatusSynced,
    QualityIssueReported,
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
from production.workflow.template import DEFAULT_PIPELINE, StepDefinition
from production.workflow.timer import TimerSession


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class StepStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"


class WorkflowStatus(Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"
    ARCHIVED = "Archived"


_STEP_TRANSITIONS = {
    StepStatus.PENDING: {StepStatus.IN_PROGRESS, StepStatus.SKIPPED},
    StepStatus.IN_PROGRESS: {StepStatus.COMPLETED, StepStatus.BLOCKED},
    StepStatus.BLOCKED: {StepStatus.PENDING},
    StepStatus.COMPLETED: set(),  # terminal
    StepStatus.SKIPPED: set(),  # terminal
}

_RESOLVED_STEP_STATUSES = {StepStatus.COMPLETED, StepStatus.SKIPPED}


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(UTC)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@production.entity(part_of="Workflow")
class ProductionStep:
    """One stage of the production pipeline for a single order."""

    key = String(required=True, max_length=50)
    sequence = Integer(required=True, min_value=0)
    title = String(required=True, max_length=200, sanitize=False)
    description = String(max_length=500, sanitize=False)
    status = String(
        max_length=20,
        choices=StepStatus,
        default=StepStatus.PENDING.value,
    )
    estimated_duration_minutes = Integer(min_value=0)
    actual_duration_minutes = Integer()
    elapsed_seconds = Float(default=0.0)
    assignee = Identifier()
    requirements = Text(sanitize=False)  # JSON list of strings
    tools = Text(sanitize=False)  # JSON list of strings
    quality_checks = Text(sanitize=False)  # JSON list of strings
    notes = Text(sanitize=False)
    started_at = DateTime()
    completed_at = DateTime()
    blocked_reason = Text(sanitize=False)
    skipped_reason = Text(sanitize=False)

    @classmethod
    def from_definition(cls, sequence: int, definition: StepDefinition) -> "ProductionStep":
        return cls(
            key=definition.key,
            sequence=sequence,
            title=definition.title,
            description=definition.description,
            estimated_duration_minutes=definition.estimated_duration_minutes,
            requirements=json.dumps(definition.requirements),
            tools=json.dumps(definition.tools),
            quality_checks=json.dumps(definition.quality_checks),
        )

    @property
    def is_resolved(self) -> bool:
        return StepStatus(self.status) in _RESOLVED_STEP_STATUSES


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@production.aggregate
class Workflow:
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50, sanitize=False)
    status = String(
        max_length=20,
        choices=WorkflowStatus,
        default=WorkflowStatus.ACTIVE.value,
    )
    steps = HasMany(ProductionStep)
    current_step_index = Integer(default=0)
    selected_step_index = Integer(default=0)
    strict_sequence = Boolean(default=True)
    timer = ValueObject(TimerSession)
    status_synced = Boolean(default=False)
    abandoned_reason = Text(sanitize=False)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    @invariant.post
    def at_most_one_step_in_progress(self):
        active = [s for s in self.steps or [] if s.status == StepStatus.IN_PROGRESS.value]
        if len(active) > 1:
            raise ValidationError({"steps": ["Only one production step can be in progress"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        order_number: str,
        template: tuple[StepDefinition, ...] = DEFAULT_PIPELINE,
        strict_sequence: bool = True,
        now: datetime | None = None,
    ):
        """Instantiate the pipeline for an order. The workflow id is the order id."""
        now = _now(now)
        wf = cls(
            id=order_id,
            order_id=order_id,
            order_number=order_number,
            status=WorkflowStatus.ACTIVE.value,
            strict_sequence=strict_sequence,
            created_at=now,
            updated_at=now,
        )
        for sequence, definition in enumerate(template):
            wf.add_steps(ProductionStep.from_definition(sequence, definition))
        wf.raise_(
            WorkflowCreated(
                workflow_id=str(wf.id),
                order_id=order_id,
                order_number=order_number,
                step_count=len(template),
                strict_sequence=strict_sequence,
                created_at=now,
            )
        )
        return wf

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def ordered_steps(self) -> list[ProductionStep]:
        return sorted(self.steps or [], key=lambda s: s.sequence)

    def step_at(self, step_index: int) -> ProductionStep:
        steps = self.ordered_steps
        if step_index is None or not 0 <= step_index < len(steps):
            raise ValidationError({"step_index": [f"Step index must be between 0 and {len(steps) - 1}"]})
        return steps[step_index]

    @property
    def final_step_index(self) -> int:
        return len(self.steps or []) - 1

    @property
    def in_progress_step(self) -> ProductionStep | None:
        return next((s for s in self.ordered_steps if s.status == StepStatus.IN_PROGRESS.value), None)

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.ordered_steps if s.status == StepStatus.COMPLETED.value)

    @property
    def progress(self) -> float:
        """Completed steps over total steps, between 0 and 1."""
        total = len(self.steps or [])
        return self.completed_count / total if total else 0.0

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        """Work time of the step that owns the timer, 0 when no step does."""
        if self.timer is None:
            return 0.0
        return self.timer.elapsed_seconds(_now(now))

    def step_elapsed_seconds(self, step: ProductionStep, now: datetime | None = None) -> float:
        if self.timer is not None and self.timer.step_index == step.sequence:
            return self.timer.elapsed_seconds(_now(now))
        return step.elapsed_seconds or 0.0

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_active(self) -> None:
        if WorkflowStatus(self.status) != WorkflowStatus.ACTIVE:
            raise InvalidTransition({"status": [f"Workflow is {self.status}, not Active"]})

    def _assert_can_transition(self, step: ProductionStep, target: StepStatus) -> None:
        current = StepStatus(step.status)
        if target not in _STEP_TRANSITIONS.get(current, set()):
            raise InvalidTransition(
                {"status": [f"Cannot transition step {step.sequence} from {current.value} to {target.value}"]}
            )

    def _assert_in_progress(self, step: ProductionStep) -> None:
        if step.status != StepStatus.IN_PROGRESS.value:
            raise InvalidTransition({"status": [f"Step {step.sequence} is {step.status}, not in-progress"]})

    def _assert_earlier_steps_resolved(self, step_index: int) -> None:
        unresolved = [s.sequence for s in self.ordered_steps[:step_index] if not s.is_resolved]
        if unresolved:
            raise InvalidTransition(
                {"steps": [f"Steps {unresolved} must be completed or skipped before step {step_index}"]}
            )

    def _running_step(self) -> ProductionStep:
        step = self.in_progress_step
        if step is None or self.timer is None:
            raise InvalidTransition({"status": ["No production step is in progress"]})
        return step

    def _next_unresolved_index(self, after: int) -> int | None:
        steps = self.ordered_steps
        for step in steps[after + 1 :] + steps[: after + 1]:
            if not step.is_resolved:
                return step.sequence
        return None

    # -------------------------------------------------------------------
    # Step transitions
    # -------------------------------------------------------------------
    def start_step(self, step_index: int, actor_id: str, now: datetime | None = None) -> None:
        """Begin work on a pending step and start its timer session."""
        self._assert_active()
        step = self.step_at(step_index)
        self._assert_can_transition(step, StepStatus.IN_PROGRESS)

        active = self.in_progress_step
        if active is not None:
            raise InvalidTransition({"steps": [f"Step {active.sequence} is already in progress"]})

        if self.strict_sequence or step_index == self.final_step_index:
            self._assert_earlier_steps_resolved(step_index)

        now = _now(now)
        carried = step.elapsed_seconds or 0.0
        with atomic_change(self):
            step.status = StepStatus.IN_PROGRESS.value
            step.assignee = actor_id
            if step.started_at is None:
                step.started_at = now
            self.current_step_index = step_index
            self.selected_step_index = step_index
            self.timer = TimerSession.begin(step_index, now, carried_seconds=carried)
            self.updated_at = now

        self.raise_(
            StepStarted(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step_index,
                step_key=step.key,
                step_title=step.title,
                actor_id=actor_id,
                carried_seconds=carried,
                started_at=now,
            )
        )

    def pause_step(self, actor_id: str, now: datetime | None = None) -> None:
        """Freeze the running timer; the step stays in progress."""
        self._assert_active()
        step = self._running_step()
        if not self.timer.active:
            raise InvalidTransition({"timer": ["Timer is already paused"]})

        now = _now(now)
        self.timer = self.timer.freeze(now)
        self.updated_at = now
        self.raise_(
            StepPaused(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step.sequence,
                actor_id=actor_id,
                elapsed_seconds=self.timer.accumulated_seconds,
                paused_at=now,
            )
        )

    def resume_step(self, actor_id: str, now: datetime | None = None) -> None:
        """Start a new timer interval, keeping the accumulated time."""
        self._assert_active()
        step = self._running_step()
        if self.timer.active:
            raise InvalidTransition({"timer": ["Timer is already running"]})

        now = _now(now)
        self.timer = self.timer.resume(now)
        self.updated_at = now
        self.raise_(
            StepResumed(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step.sequence,
                actor_id=actor_id,
                resumed_at=now,
            )
        )

    def complete_step(self, step_index: int, actor_id: str, notes: str | None = None, now: datetime | None = None) -> bool:
        """Finish an in-progress step. Returns True when this finished the workflow."""
        self._assert_active()
        step = self.step_at(step_index)
        self._assert_in_progress(step)

        now = _now(now)
        total = self.step_elapsed_seconds(step, now)
        with atomic_change(self):
            step.status = StepStatus.COMPLETED.value
            step.completed_at = now
            step.elapsed_seconds = total
            step.actual_duration_minutes = math.floor(total / 60)
            if notes:
                step.notes = notes
            self.timer = None
            self.updated_at = now

        is_final = self._advance_past(step_index, now)
        self.raise_(
            StepCompleted(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step_index,
                step_key=step.key,
                step_title=step.title,
                actor_id=actor_id,
                actual_duration_minutes=step.actual_duration_minutes,
                notes=notes,
                is_final=is_final,
                completed_at=now,
            )
        )
        if is_final:
            self._complete(now)
        return is_final

    def block_step(self, step_index: int, reason: str, actor_id: str, now: datetime | None = None) -> None:
        """Halt an in-progress step. Work time so far is banked on the step."""
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A reason is required to block a step"]})
        self._assert_active()
        step = self.step_at(step_index)
        self._assert_can_transition(step, StepStatus.BLOCKED)

        now = _now(now)
        banked = self.step_elapsed_seconds(step, now)
        with atomic_change(self):
            step.status = StepStatus.BLOCKED.value
            step.blocked_reason = reason.strip()
            step.elapsed_seconds = banked
            self.timer = None
            self.updated_at = now

        self.raise_(
            StepBlocked(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step_index,
                step_title=step.title,
                actor_id=actor_id,
                reason=reason.strip(),
                elapsed_seconds=banked,
                blocked_at=now,
            )
        )

    def unblock_step(self, step_index: int, actor_id: str, now: datetime | None = None) -> None:
        """Release a blocked step back to pending so it can be restarted."""
        self._assert_active()
        step = self.step_at(step_index)
        self._assert_can_transition(step, StepStatus.PENDING)

        now = _now(now)
        with atomic_change(self):
            step.status = StepStatus.PENDING.value
            step.blocked_reason = None
            self.updated_at = now

        self.raise_(
            StepUnblocked(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step_index,
                actor_id=actor_id,
                unblocked_at=now,
            )
        )

    def skip_step(self, step_index: int, reason: str, actor_id: str, now: datetime | None = None) -> bool:
        """Explicitly bypass a pending step. Returns True when this finished the workflow."""
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A reason is required to skip a step"]})
        self._assert_active()
        step = self.step_at(step_index)
        self._assert_can_transition(step, StepStatus.SKIPPED)
        if step_index == self.final_step_index:
            self._assert_earlier_steps_resolved(step_index)

        now = _now(now)
        with atomic_change(self):
            step.status = StepStatus.SKIPPED.value
            step.skipped_reason = reason.strip()
            step.completed_at = now
            self.updated_at = now

        is_final = self._advance_past(step_index, now)
        self.raise_(
            StepSkipped(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=step_index,
                step_title=step.title,
                actor_id=actor_id,
                reason=reason.strip(),
                is_final=is_final,
                skipped_at=now,
            )
        )
        if is_final:
            self._complete(now)
        return is_final

    def select_step(self, step_index: int, now: datetime | None = None) -> None:
        """Change which step the operator is looking at. No state change."""
        self.step_at(step_index)
        self.selected_step_index = step_index
        self.updated_at = _now(now)

    def report_quality_issue(self, description: str, actor_id: str, now: datetime | None = None) -> None:
        if not description or not description.strip():
            raise ValidationError({"description": ["A description of the quality issue is required"]})

        now = _now(now)
        active = self.in_progress_step
        self.updated_at = now
        self.raise_(
            QualityIssueReported(
                workflow_id=str(self.id),
                order_id=self.order_id,
                step_index=active.sequence if active is not None else None,
                actor_id=actor_id,
                description=description.strip(),
                reported_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Workflow lifecycle
    # -------------------------------------------------------------------
    def _advance_past(self, step_index: int, now: datetime) -> bool:
        """Move the cursor to the next unresolved step. True when none is left."""
        next_index = self._next_unresolved_index(step_index)
        if next_index is None:
            return True
        # Only move the cursor forward when the resolved step was the current one
        if step_index == self.current_step_index or self.in_progress_step is None:
            self.current_step_index = next_index
            self.selected_step_index = next_index
        return False

    def _complete(self, now: datetime) -> None:
        steps = self.ordered_steps
        self.status = WorkflowStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now
        self.raise_(
            WorkflowCompleted(
                workflow_id=str(self.id),
                order_id=self.order_id,
                completed_steps=sum(1 for s in steps if s.status == StepStatus.COMPLETED.value),
                skipped_steps=sum(1 for s in steps if s.status == StepStatus.SKIPPED.value),
                completed_at=now,
            )
        )

    def abandon(self, reason: str, actor_id: str, now: datetime | None = None) -> None:
        """Stop production for good. An in-progress step is halted as blocked."""
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A reason is required to abandon a workflow"]})
        self._assert_active()

        now = _now(now)
        halted = self.in_progress_step
        with atomic_change(self):
            if halted is not None:
                halted.elapsed_seconds = self.step_elapsed_seconds(halted, now)
                halted.status = StepStatus.BLOCKED.value
                halted.blocked_reason = reason.strip()
            self.timer = None
            self.status = WorkflowStatus.ABANDONED.value
            self.abandoned_reason = reason.strip()
            self.updated_at = now

        self.raise_(
            WorkflowAbandoned(
                workflow_id=str(self.id),
                order_id=self.order_id,
                actor_id=actor_id,
                reason=reason.strip(),
                halted_step_index=halted.sequence if halted is not None else None,
                abandoned_at=now,
            )
        )

    def archive(self, order_status: str, now: datetime | None = None) -> None:
        """Freeze the workflow once its order reached a terminal status."""
        if WorkflowStatus(self.status) == WorkflowStatus.ARCHIVED:
            raise InvalidTransition({"status": ["Workflow is already archived"]})
        if self.in_progress_step is not None:
            raise InvalidTransition({"status": ["Cannot archive a workflow with a step in progress"]})

        now = _now(now)
        self.status = WorkflowStatus.ARCHIVED.value
        self.updated_at = now
        self.raise_(
            WorkflowArchived(
                workflow_id=str(self.id),
                order_id=self.order_id,
                order_status=order_status,
                archived_at=now,
            )
        )

    @property
    def needs_status_sync(self) -> bool:
        return self.completed_at is not None and not self.status_synced

    def mark_status_synced(self, order_status: str, now: datetime | None = None) -> None:
        if self.completed_at is None:
            raise InvalidTransition({"status": ["Workflow has not completed production"]})
        if self.status_synced:
            return

        now = _now(now)
        self.status_synced = True
        self.updated_at = now
        self.raise_(
            OrderStatusSynced(
                workflow_id=str(self.id),
                order_id=self.order_id,
                order_status=order_status,
                synced_at=now,
            )
        )
