"""Order source port — read-only feed of order records.

Orders are owned by the order-management service. The production domain
only reads them (to build work queues and to check an order before its
workflow starts) and never writes back through this port; status changes
go through the StatusPublisher instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UrgencyLevel(Enum):
    NORMAL = "NORMAL"
    EXPEDITED = "EXPEDITED"
    RUSH = "RUSH"
    EMERGENCY = "EMERGENCY"


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DESIGN_PENDING = "DESIGN_PENDING"
    DESIGN_APPROVED = "DESIGN_APPROVED"
    DESIGN_REJECTED = "DESIGN_REJECTED"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    PROCESSING = "PROCESSING"
    PRODUCTION = "PRODUCTION"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


TERMINAL_ORDER_STATUSES = frozenset(
    {
        OrderStatus.SHIPPED.value,
        OrderStatus.DELIVERED.value,
        OrderStatus.CANCELLED.value,
        OrderStatus.REFUNDED.value,
    }
)

# Terminal statuses that mean production work must stop
CANCELLATION_STATUSES = frozenset({OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value})


@dataclass(frozen=True)
class OrderRecord:
    """Snapshot of an order as supplied by the order service."""

    id: str
    order_number: str
    customer_id: str
    urgency_level: str = UrgencyLevel.NORMAL.value
    status: str = OrderStatus.PENDING.value
    total_amount: float = 0.0
    created_at: datetime | None = None
    expected_delivery: datetime | None = None
    item_count: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES


class OrderSource(ABC):
    """Abstract interface for order feeds."""

    @abstractmethod
    def get_order(self, order_id: str) -> OrderRecord | None:
        """Return the order with the given id, or None if it is unknown."""
        ...

    @abstractmethod
    def list_orders(self) -> list[OrderRecord]:
        """Return a point-in-time snapshot of all live orders.

        Must not block on writers: callers build queue views from the
        returned list without holding any lock.
        """
        ...
