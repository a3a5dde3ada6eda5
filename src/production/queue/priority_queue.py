"""Priority queue view — ranked, read-only listings of the work queues.

The view is recomputed from the order source on every call. It takes no
locks and never mutates orders.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from production.orders import get_order_source
from production.orders.port import OrderRecord, OrderSource
from production.queue.classifier import QueueName, partition
from production.queue.scorer import DEFAULT_POLICY, ScoringPolicy, hours_in_queue, score
from production.queue.service_levels import TimeStatus, time_status

LONG_WAIT_HOURS = 4

_EPOCH = datetime.min.replace(tzinfo=UTC)


class SortKey(Enum):
    PRIORITY = "priority"
    TIME = "time"
    VALUE = "value"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class QueueEntry:
    order: OrderRecord
    score: float
    hours_in_queue: float
    time_status: TimeStatus


@dataclass(frozen=True)
class QueueStats:
    queue: str
    item_count: int
    long_wait_count: int
    average_score: float
    total_value: float
    overdue_count: int


def _created(entry: QueueEntry) -> datetime:
    created = entry.order.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=UTC)


_PRIMARY_KEYS: dict[SortKey, Callable[[QueueEntry], float]] = {
    SortKey.PRIORITY: lambda e: e.score,
    SortKey.TIME: lambda e: e.hours_in_queue,
    SortKey.VALUE: lambda e: e.order.total_amount or 0.0,
}


class PriorityQueue:
    """Ranks the orders of each queue by score, waiting time or value."""

    def __init__(
        self,
        source: OrderSource | None = None,
        policy: ScoringPolicy = DEFAULT_POLICY,
        clock: Callable[[], datetime] | None = None,
    ):
        self._source = source
        self.policy = policy
        self.clock = clock or (lambda: datetime.now(UTC))

    @property
    def source(self) -> OrderSource:
        return self._source or get_order_source()

    def _entries(self, queue: QueueName, now: datetime) -> list[QueueEntry]:
        orders = partition(self.source.list_orders())[queue]
        return [
            QueueEntry(
                order=order,
                score=score(order, now, self.policy),
                hours_in_queue=hours_in_queue(order, now),
                time_status=time_status(order, now),
            )
            for order in orders
        ]

    def list(
        self,
        queue: QueueName | str,
        sort_by: SortKey | str = SortKey.PRIORITY,
        sort_order: SortOrder | str = SortOrder.DESC,
        now: datetime | None = None,
    ) -> list[QueueEntry]:
        """Entries of one queue, ordered.

        Descending order puts the highest score, the longest wait or the
        highest value first. Equal keys fall back to the oldest order, then
        to the order number.
        """
        queue, sort_by, sort_order = QueueName(queue), SortKey(sort_by), SortOrder(sort_order)
        entries = self._entries(queue, now or self.clock())

        primary = _PRIMARY_KEYS[sort_by]
        sign = -1 if sort_order == SortOrder.DESC else 1
        return sorted(entries, key=lambda e: (sign * primary(e), _created(e), e.order.order_number))

    def counts(self) -> dict[str, int]:
        """Number of orders in each queue."""
        return {name.value: len(orders) for name, orders in partition(self.source.list_orders()).items()}

    def stats(self, queue: QueueName | str, now: datetime | None = None) -> QueueStats:
        """Queue performance figures for the staff dashboard."""
        queue = QueueName(queue)
        entries = self._entries(queue, now or self.clock())
        count = len(entries)
        return QueueStats(
            queue=queue.value,
            item_count=count,
            long_wait_count=sum(1 for e in entries if e.hours_in_queue > LONG_WAIT_HOURS),
            average_score=round(sum(e.score for e in entries) / count, 2) if count else 0.0,
            total_value=round(sum(e.order.total_amount or 0.0 for e in entries), 2),
            overdue_count=sum(1 for e in entries if e.time_status.is_overdue),
        )
