"""Queue classification — which work queue an order belongs to.

Each order lands in at most one queue:

    urgent      RUSH or EMERGENCY orders still PENDING
    pending     every other PENDING order
    processing  orders in PROCESSING

Orders in any other status are not queued.
"""

from collections.abc import Iterable
from enum import Enum

from production.orders.port import OrderRecord, OrderStatus, UrgencyLevel


class QueueName(Enum):
    URGENT = "urgent"
    PENDING = "pending"
    PROCESSING = "processing"


_URGENT_LEVELS = {UrgencyLevel.RUSH.value, UrgencyLevel.EMERGENCY.value}


def classify(order: OrderRecord) -> QueueName | None:
    """Return the single queue an order belongs to, or None."""
    if order.status == OrderStatus.PENDING.value:
        if order.urgency_level in _URGENT_LEVELS:
            return QueueName.URGENT
        return QueueName.PENDING
    if order.status == OrderStatus.PROCESSING.value:
        return QueueName.PROCESSING
    return None


def partition(orders: Iterable[OrderRecord]) -> dict[QueueName, list[OrderRecord]]:
    """Group a batch of orders into the three queues."""
    queues: dict[QueueName, list[OrderRecord]] = {name: [] for name in QueueName}
    for order in orders:
        name = classify(order)
        if name is not None:
            queues[name].append(order)
    return queues
