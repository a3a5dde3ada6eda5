"""Tests for Workflow creation and its read-side helpers."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from production.workflow.events import WorkflowCreated
from production.workflow.template import DEFAULT_PIPELINE, StepDefinition
from production.workflow.workflow import StepStatus, Workflow, WorkflowStatus
from protean.exceptions import ValidationError

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def _make_workflow(**overrides):
    fields = {"order_id": "ord-001", "order_number": "CO-1001", "now": T0}
    fields.update(overrides)
    return Workflow.create(**fields)


class TestWorkflowCreation:
    def test_identity_is_the_order_id(self):
        wf = _make_workflow()
        assert str(wf.id) == "ord-001"
        assert wf.order_id == "ord-001"

    def test_starts_active_with_cursor_on_first_step(self):
        wf = _make_workflow()
        assert wf.status == WorkflowStatus.ACTIVE.value
        assert wf.current_step_index == 0
        assert wf.selected_step_index == 0
        assert wf.timer is None
        assert wf.status_synced is False

    def test_steps_follow_the_default_pipeline(self):
        wf = _make_workflow()
        steps = wf.ordered_steps
        assert [s.key for s in steps] == [d.key for d in DEFAULT_PIPELINE]
        assert [s.sequence for s in steps] == list(range(6))
        assert all(s.status == StepStatus.PENDING.value for s in steps)

    def test_default_pipeline_durations(self):
        wf = _make_workflow()
        assert [s.estimated_duration_minutes for s in wf.ordered_steps] == [15, 30, 20, 120, 25, 15]

    def test_step_checklists_are_stored_as_json(self):
        wf = _make_workflow()
        review = wf.step_at(0)
        assert json.loads(review.requirements) == list(DEFAULT_PIPELINE[0].requirements)
        assert json.loads(review.tools) == list(DEFAULT_PIPELINE[0].tools)
        assert json.loads(review.quality_checks) == list(DEFAULT_PIPELINE[0].quality_checks)

    def test_custom_template(self):
        template = (
            StepDefinition(key="cut", title="Cut", description="Cut fabric", estimated_duration_minutes=10),
            StepDefinition(key="sew", title="Sew", description="Sew panels", estimated_duration_minutes=40),
        )
        wf = _make_workflow(template=template)
        assert [s.title for s in wf.ordered_steps] == ["Cut", "Sew"]

    def test_strict_sequence_defaults_to_true(self):
        assert _make_workflow().strict_sequence is True
        assert _make_workflow(strict_sequence=False).strict_sequence is False

    def test_timestamps_use_given_time(self):
        wf = _make_workflow()
        assert wf.created_at == T0
        assert wf.updated_at == T0
        assert wf.completed_at is None

    def test_raises_workflow_created(self):
        wf = _make_workflow()
        assert len(wf._events) == 1
        event = wf._events[0]
        assert isinstance(event, WorkflowCreated)
        assert event.order_id == "ord-001"
        assert event.order_number == "CO-1001"
        assert event.step_count == 6


class TestWorkflowQueries:
    def test_step_at_rejects_out_of_range_index(self):
        wf = _make_workflow()
        with pytest.raises(ValidationError) as exc:
            wf.step_at(6)
        assert "step_index" in exc.value.messages

    def test_step_at_rejects_negative_index(self):
        wf = _make_workflow()
        with pytest.raises(ValidationError):
            wf.step_at(-1)

    def test_progress_is_completed_over_total(self):
        wf = _make_workflow()
        assert wf.progress == 0.0
        wf.start_step(0, "staff-1", now=T0)
        wf.complete_step(0, "staff-1", now=T0 + timedelta(minutes=10))
        wf.start_step(1, "staff-1", now=T0 + timedelta(minutes=11))
        wf.complete_step(1, "staff-1", now=T0 + timedelta(minutes=20))
        wf.start_step(2, "staff-1", now=T0 + timedelta(minutes=21))
        wf.complete_step(2, "staff-1", now=T0 + timedelta(minutes=30))
        assert wf.completed_count == 3
        assert wf.progress == 0.5

    def test_skipped_steps_do_not_count_towards_progress(self):
        wf = _make_workflow()
        wf.skip_step(0, "Design supplied print-ready", "staff-1", now=T0)
        assert wf.completed_count == 0
        assert wf.progress == 0.0

    def test_in_progress_step_is_none_initially(self):
        assert _make_workflow().in_progress_step is None

    def test_elapsed_is_zero_without_a_timer(self):
        assert _make_workflow().elapsed_seconds(T0) == 0.0
