"""Integration tests for the workflow API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from production.api import register_workflow_error_handlers, workflow_router
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client(engine):
    app = FastAPI()
    app.include_router(workflow_router)
    register_exception_handlers(app)
    register_workflow_error_handlers(app)
    return TestClient(app)


def _start(client, order_id, index=0, actor="staff-1"):
    return client.put(f"/workflows/{order_id}/steps/{index}/start", json={"actor_id": actor})


class TestStepEndpoints:
    def test_start_returns_snapshot(self, client, make_order):
        make_order("ord-api-1")
        response = _start(client, "ord-api-1")
        assert response.status_code == 200
        body = response.json()
        assert body["warnings"] == []
        assert body["workflow"]["order_id"] == "ord-api-1"
        assert body["workflow"]["steps"][0]["status"] == "in-progress"
        assert body["workflow"]["steps"][0]["requirements"] == [
            "Design files",
            "Specifications document",
            "Material requirements",
        ]

    def test_start_unknown_order_returns_404(self, client):
        assert _start(client, "ord-nope").status_code == 404

    def test_start_with_sibling_in_progress_returns_409(self, client, make_order):
        make_order("ord-api-2")
        _start(client, "ord-api-2", 0)
        response = _start(client, "ord-api-2", 1, actor="staff-2")
        assert response.status_code == 409
        assert "error" in response.json()

    def test_complete_with_notes(self, client, make_order, clock):
        make_order("ord-api-3")
        _start(client, "ord-api-3")
        clock.advance(minutes=12)
        response = client.put(
            "/workflows/ord-api-3/steps/0/complete",
            json={"actor_id": "staff-1", "notes": "Proof approved"},
        )
        assert response.status_code == 200
        step = response.json()["workflow"]["steps"][0]
        assert step["status"] == "completed"
        assert step["actual_duration_minutes"] == 12
        assert step["notes"] == "Proof approved"

    def test_block_without_reason_returns_400(self, client, make_order):
        make_order("ord-api-4")
        _start(client, "ord-api-4")
        response = client.put("/workflows/ord-api-4/steps/0/block", json={"actor_id": "staff-1", "reason": "  "})
        assert response.status_code == 400

    def test_block_and_unblock(self, client, make_order):
        make_order("ord-api-5")
        _start(client, "ord-api-5")
        blocked = client.put(
            "/workflows/ord-api-5/steps/0/block",
            json={"actor_id": "staff-1", "reason": "Waiting for fabric"},
        )
        assert blocked.json()["workflow"]["steps"][0]["status"] == "blocked"
        unblocked = client.put("/workflows/ord-api-5/steps/0/unblock", json={"actor_id": "staff-1"})
        assert unblocked.json()["workflow"]["steps"][0]["status"] == "pending"

    def test_skip(self, client, make_order):
        make_order("ord-api-6")
        _start(client, "ord-api-6")
        response = client.put(
            "/workflows/ord-api-6/steps/2/skip",
            json={"actor_id": "lead-1", "reason": "Machine already configured"},
        )
        assert response.json()["workflow"]["steps"][2]["status"] == "skipped"

    def test_skip_without_reason_field_returns_422(self, client, make_order):
        make_order("ord-api-7")
        _start(client, "ord-api-7")
        response = client.put("/workflows/ord-api-7/steps/2/skip", json={"actor_id": "lead-1"})
        assert response.status_code == 422


class TestWorkflowEndpoints:
    def test_pause_resume_and_timer(self, client, make_order, clock):
        make_order("ord-api-10")
        _start(client, "ord-api-10")
        clock.advance(seconds=40)
        paused = client.put("/workflows/ord-api-10/pause", json={"actor_id": "staff-1"})
        assert paused.json()["workflow"]["timer_active"] is False

        clock.advance(minutes=5)
        timer = client.get("/workflows/ord-api-10/timer").json()
        assert timer["elapsed_seconds"] == 40.0
        assert timer["timer_active"] is False
        assert timer["step_index"] == 0

        client.put("/workflows/ord-api-10/resume", json={"actor_id": "staff-1"})
        clock.advance(seconds=20)
        assert client.get("/workflows/ord-api-10/timer").json()["elapsed_seconds"] == 60.0

    def test_pause_twice_returns_409(self, client, make_order):
        make_order("ord-api-11")
        _start(client, "ord-api-11")
        client.put("/workflows/ord-api-11/pause", json={"actor_id": "staff-1"})
        assert client.put("/workflows/ord-api-11/pause", json={"actor_id": "staff-1"}).status_code == 409

    def test_get_workflow(self, client, make_order):
        make_order("ord-api-12")
        _start(client, "ord-api-12")
        body = client.get("/workflows/ord-api-12").json()
        assert body["total_steps"] == 6
        assert body["progress"] == 0.0

    def test_get_unknown_workflow_returns_404(self, client):
        assert client.get("/workflows/ord-unknown").status_code == 404

    def test_selection(self, client, make_order):
        make_order("ord-api-13")
        _start(client, "ord-api-13")
        response = client.put("/workflows/ord-api-13/selection", json={"step_index": 4})
        assert response.json()["workflow"]["selected_step_index"] == 4

    def test_quality_issue(self, client, make_order, notes):
        make_order("ord-api-14")
        _start(client, "ord-api-14")
        response = client.post(
            "/workflows/ord-api-14/quality-issues",
            json={"actor_id": "staff-1", "description": "Stitching loose"},
        )
        assert response.status_code == 201
        assert notes.notes_for("ord-api-14")[0]["note_type"] == "QUALITY"

    def test_abandon(self, client, make_order):
        make_order("ord-api-15")
        _start(client, "ord-api-15")
        response = client.put("/workflows/ord-api-15/abandon", json={"actor_id": "lead-1", "reason": "Fraud hold"})
        assert response.json()["workflow"]["status"] == "Abandoned"

    def test_reconcile(self, client, make_order, orders):
        make_order("ord-api-16")
        _start(client, "ord-api-16")
        orders.set_status("ord-api-16", "CANCELLED")
        response = client.put("/workflows/ord-api-16/reconcile", json={"actor_id": "system"})
        assert response.json()["workflow"]["status"] == "Archived"

    def test_status_sync_warning_and_retry(self, client, make_order, publisher):
        make_order("ord-api-17")
        publisher.configure(should_succeed=False, failure_reason="Order service down")
        for index in range(6):
            _start(client, "ord-api-17", index)
            response = client.put(f"/workflows/ord-api-17/steps/{index}/complete", json={"actor_id": "staff-1"})
        body = response.json()
        assert body["workflow"]["status"] == "Completed"
        assert body["warnings"] == [
            {"sink": "status_publisher", "order_id": "ord-api-17", "reason": "Order service down"}
        ]

        publisher.configure(should_succeed=True)
        retried = client.put("/workflows/ord-api-17/status-sync", json={"actor_id": "staff-1"})
        assert retried.json()["workflow"]["status_synced"] is True
        assert retried.json()["warnings"] == []
