"""Service-level deadlines per urgency level.

Advisory only: an overdue order is flagged in the queue view, nothing is
escalated automatically.
"""

from dataclasses import dataclass
from datetime import datetime

from production.orders.port import OrderRecord, UrgencyLevel
from production.queue.scorer import hours_in_queue

MAX_TURNAROUND_HOURS = {
    UrgencyLevel.EMERGENCY.value: 4,
    UrgencyLevel.RUSH.value: 24,
    UrgencyLevel.EXPEDITED.value: 72,
}


@dataclass(frozen=True)
class TimeStatus:
    is_overdue: bool
    hours_remaining: float | None
    label: str


def time_status(order: OrderRecord, now: datetime | None = None) -> TimeStatus:
    """How an order is doing against its urgency's turnaround window."""
    elapsed = hours_in_queue(order, now)
    max_hours = MAX_TURNAROUND_HOURS.get(order.urgency_level)

    if max_hours is None:
        return TimeStatus(is_overdue=False, hours_remaining=None, label=f"{int(elapsed)}h elapsed")

    remaining = max_hours - elapsed
    if remaining < 0:
        return TimeStatus(
            is_overdue=True,
            hours_remaining=remaining,
            label=f"OVERDUE by {int(abs(remaining))}h",
        )
    return TimeStatus(is_overdue=False, hours_remaining=remaining, label=f"{int(remaining)}h remaining")
