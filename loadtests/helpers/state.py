"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks the seeded order and the step being worked so follow-up
operations can reference them.
"""

from dataclasses import dataclass

PIPELINE_LENGTH = 6


@dataclass
class ProductionState:
    """Tracks state for a single simulated production run."""

    order_id: str | None = None
    actor_id: str | None = None
    step_index: int = 0
    current_status: str = "Active"
    warnings: int = 0

    @property
    def finished(self) -> bool:
        return self.step_index >= PIPELINE_LENGTH
