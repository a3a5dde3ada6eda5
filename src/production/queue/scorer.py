"""Priority scoring for queued orders.

    score = urgency weight + min(hours in queue * 2, 50) + min(total / 100, 25)

Scores depend on the current time and are recomputed on every read.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from production.orders.port import OrderRecord


@dataclass(frozen=True)
class ScoringPolicy:
    """Weights and caps used by :func:`score`."""

    urgency_weights: dict[str, float] = field(
        default_factory=lambda: {
            "EMERGENCY": 100.0,
            "RUSH": 75.0,
            "EXPEDITED": 50.0,
            "NORMAL": 25.0,
        }
    )
    default_weight: float = 25.0
    points_per_hour: float = 2.0
    wait_cap: float = 50.0
    value_divisor: float = 100.0
    value_cap: float = 25.0

    def weight_for(self, urgency_level: str | None) -> float:
        return self.urgency_weights.get(urgency_level or "", self.default_weight)


DEFAULT_POLICY = ScoringPolicy()


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the order feed are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def hours_in_queue(order: OrderRecord, now: datetime | None = None) -> float:
    """Wall-clock hours since the order was created, never negative."""
    if order.created_at is None:
        return 0.0
    now = _as_utc(now or datetime.now(UTC))
    hours = (now - _as_utc(order.created_at)).total_seconds() / 3600
    return max(hours, 0.0)


def score(order: OrderRecord, now: datetime | None = None, policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    """Priority score of an order at ``now``. Higher is more urgent."""
    wait_points = min(hours_in_queue(order, now) * policy.points_per_hour, policy.wait_cap)
    value_points = min(max(order.total_amount or 0.0, 0.0) / policy.value_divisor, policy.value_cap)
    return policy.weight_for(order.urgency_level) + wait_points + value_points
