"""Tests for work queue classification."""

import pytest
from production.orders.port import OrderRecord, OrderStatus, UrgencyLevel
from production.queue.classifier import QueueName, classify, partition


def _order(order_id="ord-1", urgency="NORMAL", status="PENDING"):
    return OrderRecord(id=order_id, order_number=f"CO-{order_id}", customer_id="c-1", urgency_level=urgency, status=status)


class TestClassify:
    @pytest.mark.parametrize("urgency", ["RUSH", "EMERGENCY"])
    def test_urgent_pending_orders(self, urgency):
        assert classify(_order(urgency=urgency)) == QueueName.URGENT

    @pytest.mark.parametrize("urgency", ["NORMAL", "EXPEDITED"])
    def test_regular_pending_orders(self, urgency):
        assert classify(_order(urgency=urgency)) == QueueName.PENDING

    @pytest.mark.parametrize("urgency", [u.value for u in UrgencyLevel])
    def test_processing_orders_regardless_of_urgency(self, urgency):
        assert classify(_order(urgency=urgency, status="PROCESSING")) == QueueName.PROCESSING

    @pytest.mark.parametrize(
        "status",
        [s.value for s in OrderStatus if s not in (OrderStatus.PENDING, OrderStatus.PROCESSING)],
    )
    def test_other_statuses_are_not_queued(self, status):
        assert classify(_order(urgency="EMERGENCY", status=status)) is None


class TestPartition:
    def test_queues_are_disjoint_and_cover_queued_orders(self):
        orders = [
            _order("1", "RUSH", "PENDING"),
            _order("2", "NORMAL", "PENDING"),
            _order("3", "EMERGENCY", "PROCESSING"),
            _order("4", "NORMAL", "SHIPPED"),
            _order("5", "EMERGENCY", "PENDING"),
        ]
        queues = partition(orders)
        ids = {name: {o.id for o in queue} for name, queue in queues.items()}
        assert ids[QueueName.URGENT] == {"1", "5"}
        assert ids[QueueName.PENDING] == {"2"}
        assert ids[QueueName.PROCESSING] == {"3"}
        assert ids[QueueName.URGENT].isdisjoint(ids[QueueName.PENDING])

    def test_empty_batch_yields_three_empty_queues(self):
        assert partition([]) == {QueueName.URGENT: [], QueueName.PENDING: [], QueueName.PROCESSING: []}
