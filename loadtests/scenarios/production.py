"""Production floor load test scenarios.

Stateful SequentialTaskSet journeys covering a full production run (happy
path with pauses and skips), blocked and abandoned runs, staff browsing the
work queues, and several staff contending for the same small set of orders.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    block_reason,
    completion_notes,
    order_data,
    quality_issue,
    skip_reason,
    staff_member,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ProductionState

QUEUES = ["urgent", "pending", "processing"]
SORT_KEYS = ["priority", "time", "value"]


def _seed_order(client, state: ProductionState, status: str = "PROCESSING") -> bool:
    payload = order_data(status=status)
    with client.post("/dev/orders", json=payload, catch_response=True, name="POST /dev/orders") as resp:
        if resp.status_code == 201:
            state.order_id = payload["id"]
            state.actor_id = staff_member()
            return True
        resp.failure(f"Seed order failed: {resp.status_code} — {extract_error_detail(resp)}")
        return False


class _WorkflowJourney(SequentialTaskSet):
    """Shared plumbing for journeys that drive one workflow."""

    def on_start(self):
        self.state = ProductionState()

    def _put(self, path: str, body: dict, name: str) -> None:
        with self.client.put(
            f"/workflows/{self.state.order_id}{path}",
            json=body,
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code == 200:
                self.state.warnings += len(resp.json()["warnings"])
            else:
                resp.failure(f"{name} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()


class ProductionRunJourney(_WorkflowJourney):
    """Seed -> (Start -> [Pause -> Resume] -> Complete | Skip) x 6 -> Completed.

    The happy path: one staff member works an order through every step.
    Generates every step-level event plus WorkflowCompleted and the
    post-production status update.
    """

    @task
    def seed_order(self):
        if not _seed_order(self.client, self.state):
            self.interrupt()

    @task
    def work_steps(self):
        while not self.state.finished:
            index = self.state.step_index
            if index > 0 and random.random() < 0.1:
                self._skip(index)
            else:
                self._start(index)
                if random.random() < 0.25:
                    self._pause_and_resume()
                self._complete(index)
            self.state.step_index += 1

    @task
    def check_workflow(self):
        with self.client.get(
            f"/workflows/{self.state.order_id}",
            catch_response=True,
            name="GET /workflows/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] == "Completed":
                self.state.current_status = "Completed"
            else:
                resp.failure(f"Workflow not completed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()

    def _start(self, index: int) -> None:
        self._put(f"/steps/{index}/start", {"actor_id": self.state.actor_id}, "PUT /workflows/{id}/steps/{i}/start")

    def _pause_and_resume(self) -> None:
        self._put("/pause", {"actor_id": self.state.actor_id}, "PUT /workflows/{id}/pause")
        self._put("/resume", {"actor_id": self.state.actor_id}, "PUT /workflows/{id}/resume")

    def _complete(self, index: int) -> None:
        self._put(
            f"/steps/{index}/complete",
            {"actor_id": self.state.actor_id, "notes": completion_notes()},
            "PUT /workflows/{id}/steps/{i}/complete",
        )

    def _skip(self, index: int) -> None:
        self._put(
            f"/steps/{index}/skip",
            {"actor_id": self.state.actor_id, "reason": skip_reason()},
            "PUT /workflows/{id}/steps/{i}/skip",
        )


class BlockedRunJourney(_WorkflowJourney):
    """Seed -> Start -> Quality issue -> Block -> Unblock -> Restart -> Abandon.

    Models a run that hits trouble on the floor and is finally stopped.
    """

    @task
    def seed_order(self):
        if not _seed_order(self.client, self.state):
            self.interrupt()

    @task
    def start_first_step(self):
        self._put("/steps/0/start", {"actor_id": self.state.actor_id}, "PUT /workflows/{id}/steps/{i}/start")

    @task
    def report_quality_issue(self):
        with self.client.post(
            f"/workflows/{self.state.order_id}/quality-issues",
            json={"actor_id": self.state.actor_id, "description": quality_issue()},
            catch_response=True,
            name="POST /workflows/{id}/quality-issues",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Quality issue failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def block(self):
        self._put(
            "/steps/0/block",
            {"actor_id": self.state.actor_id, "reason": block_reason()},
            "PUT /workflows/{id}/steps/{i}/block",
        )
        self.state.current_status = "Blocked"

    @task
    def unblock_and_restart(self):
        self._put("/steps/0/unblock", {"actor_id": staff_member()}, "PUT /workflows/{id}/steps/{i}/unblock")
        self._put("/steps/0/start", {"actor_id": self.state.actor_id}, "PUT /workflows/{id}/steps/{i}/start")

    @task
    def abandon(self):
        self._put(
            "/abandon",
            {"actor_id": staff_member(), "reason": "Customer withdrew the order"},
            "PUT /workflows/{id}/abandon",
        )
        self.state.current_status = "Abandoned"

    @task
    def done(self):
        self.interrupt()


class ProductionUser(HttpUser):
    """Locust user simulating production staff working orders.

    Weighted distribution:
    - 80% Full production run
    - 20% Blocked and abandoned run
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        ProductionRunJourney: 8,
        BlockedRunJourney: 2,
    }


class QueueWatcherUser(HttpUser):
    """Read-heavy user: dashboards polling queue listings and stats.

    Seeds a few pending orders so the queues are never empty.
    """

    wait_time = between(1.0, 3.0)

    def on_start(self):
        for _ in range(3):
            _seed_order(self.client, ProductionState(), status="PENDING")

    @task(5)
    def list_queue(self):
        self.client.get(
            f"/queues/{random.choice(QUEUES)}",
            params={"sort_by": random.choice(SORT_KEYS), "sort_order": random.choice(["asc", "desc"])},
            name="GET /queues/{queue}",
        )

    @task(2)
    def queue_counts(self):
        self.client.get("/queues", name="GET /queues")

    @task(1)
    def queue_stats(self):
        self.client.get(f"/queues/{random.choice(QUEUES)}/stats", name="GET /queues/{queue}/stats")


class ContendedOrderUser(HttpUser):
    """Stress test: many staff racing to work the same few orders.

    Users share one small pool of orders and keep starting or completing
    whatever step each order is on. A 409 is the expected outcome of losing
    a race and is counted as a success.
    """

    wait_time = between(0.1, 0.5)
    shared_orders: list[str] = []

    def on_start(self):
        if len(self.shared_orders) < 5:
            state = ProductionState()
            if _seed_order(self.client, state):
                self.shared_orders.append(state.order_id)

    @task
    def race_step(self):
        if not self.shared_orders:
            return
        order_id = random.choice(self.shared_orders)

        with self.client.get(f"/workflows/{order_id}", catch_response=True, name="[RACE] GET /workflows/{id}") as resp:
            if resp.status_code == 404:
                resp.success()
                index, action = 0, "start"
            elif resp.status_code == 200:
                workflow = resp.json()
                if workflow["status"] != "Active":
                    return
                index = workflow["current_step_index"]
                running = workflow["steps"][index]["status"] == "in-progress"
                action = "complete" if running else "start"
            else:
                resp.failure(f"Read failed: {resp.status_code} — {extract_error_detail(resp)}")
                return

        with self.client.put(
            f"/workflows/{order_id}/steps/{index}/{action}",
            json={"actor_id": staff_member()},
            catch_response=True,
            name=f"[RACE] PUT /workflows/{{id}}/steps/{{i}}/{action}",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"{action} failed: {resp.status_code} — {extract_error_detail(resp)}")
