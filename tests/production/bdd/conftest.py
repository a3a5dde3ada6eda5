"""Shared BDD fixtures and step definitions for production workflows."""

from datetime import UTC, datetime, timedelta

import pytest
from production.errors import InvalidTransition
from production.workflow.events import (
    QualityIssueReported,
    StepBlocked,
    StepCompleted,
    StepPaused,
    StepResumed,
    StepSkipped,
    StepStarted,
    StepUnblocked,
    WorkflowAbandoned,
    WorkflowCompleted,
    WorkflowCreated,
)
from production.workflow.workflow import Workflow
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_WORKFLOW_EVENT_CLASSES = {
    "WorkflowCreated": WorkflowCreated,
    "StepStarted": StepStarted,
    "StepPaused": StepPaused,
    "StepResumed": StepResumed,
    "StepCompleted": StepCompleted,
    "StepBlocked": StepBlocked,
    "StepUnblocked": StepUnblocked,
    "StepSkipped": StepSkipped,
    "QualityIssueReported": QualityIssueReported,
    "WorkflowCompleted": WorkflowCompleted,
    "WorkflowAbandoned": WorkflowAbandoned,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def moment():
    """Mutable 'now' shared by the steps of one scenario."""
    return {"now": datetime(2026, 3, 2, 9, 0, tzinfo=UTC)}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a production workflow for order "{order_id}"'), target_fixture="workflow")
def new_workflow(order_id, moment):
    wf = Workflow.create(order_id=order_id, order_number=f"CO-{order_id}", now=moment["now"])
    wf._events.clear()
    return wf


@given(parsers.cfparse("a free-sequence production workflow for order \"{order_id}\""), target_fixture="workflow")
def free_sequence_workflow(order_id, moment):
    wf = Workflow.create(order_id=order_id, order_number=f"CO-{order_id}", strict_sequence=False, now=moment["now"])
    wf._events.clear()
    return wf


@given(parsers.cfparse("step {index:d} is in progress"))
def step_in_progress(workflow, moment, index):
    workflow.start_step(index, "staff-1", now=moment["now"])
    workflow._events.clear()


@given(parsers.cfparse("steps {first:d} to {last:d} are completed"))
def steps_completed(workflow, moment, first, last):
    for index in range(first, last + 1):
        workflow.start_step(index, "staff-1", now=moment["now"])
        moment["now"] += timedelta(minutes=1)
        workflow.complete_step(index, "staff-1", now=moment["now"])
    workflow._events.clear()


@given(parsers.cfparse('step {index:d} is blocked because "{reason}"'))
def step_blocked(workflow, moment, index, reason):
    workflow.start_step(index, "staff-1", now=moment["now"])
    workflow.block_step(index, reason, "staff-1", now=moment["now"])
    workflow._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('step {index:d} is "{status}"'))
def step_status_is(workflow, index, status):
    assert workflow.step_at(index).status == status


@then(parsers.cfparse('the workflow status is "{status}"'))
def workflow_status_is(workflow, status):
    assert workflow.status == status


@then(parsers.cfparse("the workflow progress is {progress:g}"))
def workflow_progress_is(workflow, progress):
    assert workflow.progress == pytest.approx(progress)


@then(parsers.cfparse("the timer shows {seconds:d} seconds"))
def timer_shows(workflow, moment, seconds):
    assert workflow.elapsed_seconds(moment["now"]) == pytest.approx(seconds)


@then("the workflow action fails with an invalid transition")
def action_fails_with_invalid_transition(error):
    assert error["exc"] is not None, "Expected an invalid transition but none was raised"
    assert isinstance(error["exc"], InvalidTransition)


@then("the workflow action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def event_raised(workflow, event_type):
    event_cls = _WORKFLOW_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in workflow._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in workflow._events]}"


@then(parsers.cfparse("no {event_type} event is raised"))
def event_not_raised(workflow, event_type):
    event_cls = _WORKFLOW_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in workflow._events)
