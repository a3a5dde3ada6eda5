"""Workflow domain events — immutable facts about production progress.

All events are past tense, versioned, and carry the order id so the board
projection and downstream consumers never need to load the aggregate.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from production.domain import production


@production.event(part_of="Workflow")
class WorkflowCreated:
    """A workflow was instantiated for an order on its first step start."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True, sanitize=False)
    step_count = Integer(required=True)
    strict_sequence = Boolean(default=True)
    created_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepStarted:
    """Work began on a production step."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    step_key = String(required=True)
    step_title = String(required=True, sanitize=False)
    actor_id = Identifier(required=True)
    carried_seconds = Float(default=0.0)
    started_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepPaused:
    """The timer of the in-progress step was paused."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    actor_id = Identifier(required=True)
    elapsed_seconds = Float(required=True)
    paused_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepResumed:
    """The timer of the in-progress step was resumed."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    actor_id = Identifier(required=True)
    resumed_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepCompleted:
    """A production step was finished."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    step_key = String(required=True)
    step_title = String(required=True, sanitize=False)
    actor_id = Identifier(required=True)
    actual_duration_minutes = Integer(required=True)
    notes = Text(sanitize=False)
    is_final = Boolean(default=False)
    completed_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepBlocked:
    """A production step was halted by a problem."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    step_title = String(required=True, sanitize=False)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    elapsed_seconds = Float(required=True)
    blocked_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepUnblocked:
    """A blocked step was released back to pending."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    actor_id = Identifier(required=True)
    unblocked_at = DateTime(required=True)


@production.event(part_of="Workflow")
class StepSkipped:
    """A pending step was explicitly skipped."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer(required=True)
    step_title = String(required=True, sanitize=False)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    is_final = Boolean(default=False)
    skipped_at = DateTime(required=True)


@production.event(part_of="Workflow")
class QualityIssueReported:
    """Staff reported a quality problem with an order in production."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    step_index = Integer()
    actor_id = Identifier(required=True)
    description = Text(required=True, sanitize=False)
    reported_at = DateTime(required=True)


@production.event(part_of="Workflow")
class WorkflowCompleted:
    """Every step of the workflow is completed or skipped."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    completed_steps = Integer(required=True)
    skipped_steps = Integer(default=0)
    completed_at = DateTime(required=True)


@production.event(part_of="Workflow")
class WorkflowAbandoned:
    """Production stopped before completion (e.g. the order was cancelled)."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)
    halted_step_index = Integer()
    abandoned_at = DateTime(required=True)


@production.event(part_of="Workflow")
class WorkflowArchived:
    """The order reached a terminal status; the workflow is read-only."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_status = String(required=True)
    archived_at = DateTime(required=True)


@production.event(part_of="Workflow")
class OrderStatusSynced:
    """The order service accepted the post-production status update."""

    __version__ = "v1"

    workflow_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_status = String(required=True)
    synced_at = DateTime(required=True)
