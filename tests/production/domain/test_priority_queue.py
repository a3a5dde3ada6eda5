"""Tests for the ranked priority queue view."""

from datetime import UTC, datetime, timedelta

import pytest
from production.orders.memory_source import InMemoryOrderSource
from production.orders.port import OrderRecord
from production.queue.classifier import QueueName
from production.queue.priority_queue import PriorityQueue, SortKey, SortOrder

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


def _order(order_id, urgency="NORMAL", status="PENDING", hours_ago=1.0, total=0.0):
    return OrderRecord(
        id=order_id,
        order_number=f"CO-{order_id}",
        customer_id="c-1",
        urgency_level=urgency,
        status=status,
        total_amount=total,
        created_at=NOW - timedelta(hours=hours_ago),
    )


@pytest.fixture()
def source():
    return InMemoryOrderSource(
        [
            _order("a", "RUSH", hours_ago=5, total=1575),
            _order("b", "NORMAL", hours_ago=1, total=28500),
            _order("c", "NORMAL", hours_ago=10, total=50),
            _order("d", "EXPEDITED", hours_ago=2, total=400),
            _order("e", "EMERGENCY", hours_ago=6, total=10),
            _order("f", "NORMAL", status="PROCESSING", hours_ago=30, total=90),
            _order("g", "RUSH", status="SHIPPED", hours_ago=3, total=90),
        ]
    )


@pytest.fixture()
def queue(source):
    return PriorityQueue(source=source, clock=lambda: NOW)


def _ids(entries):
    return [e.order.id for e in entries]


class TestListing:
    def test_urgent_queue_by_priority(self, queue):
        assert _ids(queue.list("urgent")) == ["e", "a"]

    def test_pending_queue_by_priority_desc(self, queue):
        # b: 25 + 2 + 25 = 52, c: 25 + 20 + 0.5 = 45.5, d: 50 + 4 + 4 = 58
        assert _ids(queue.list(QueueName.PENDING)) == ["d", "b", "c"]

    def test_priority_ascending(self, queue):
        assert _ids(queue.list("pending", sort_order="asc")) == ["c", "b", "d"]

    def test_by_time_desc_is_longest_wait_first(self, queue):
        assert _ids(queue.list("pending", sort_by=SortKey.TIME, sort_order=SortOrder.DESC)) == ["c", "d", "b"]

    def test_by_value_desc_is_highest_value_first(self, queue):
        assert _ids(queue.list("pending", sort_by="value")) == ["b", "d", "c"]

    def test_processing_queue(self, queue):
        assert _ids(queue.list("processing")) == ["f"]

    def test_entries_carry_score_wait_and_time_status(self, queue):
        entry = queue.list("urgent")[1]
        assert entry.order.id == "a"
        assert entry.score == pytest.approx(100.75)
        assert entry.hours_in_queue == pytest.approx(5)
        assert entry.time_status.label == "19h remaining"

    def test_ties_fall_back_to_oldest_first(self):
        source = InMemoryOrderSource(
            [
                _order("young", "NORMAL", hours_ago=30, total=0),
                _order("old", "NORMAL", hours_ago=40, total=0),
            ]
        )
        queue = PriorityQueue(source=source, clock=lambda: NOW)
        # Both hit the wait cap, so scores are equal
        assert _ids(queue.list("pending")) == ["old", "young"]
        assert _ids(queue.list("pending", sort_order="asc")) == ["old", "young"]

    def test_unknown_queue_is_rejected(self, queue):
        with pytest.raises(ValueError):
            queue.list("archived")

    def test_listing_does_not_mutate_orders(self, queue, source):
        before = source.list_orders()
        queue.list("pending")
        assert source.list_orders() == before

    def test_scores_are_recomputed_per_read(self, source):
        clock = {"now": NOW}
        queue = PriorityQueue(source=source, clock=lambda: clock["now"])
        first = queue.list("pending")[0].score
        clock["now"] = NOW + timedelta(hours=3)
        assert queue.list("pending")[0].score > first


class TestCountsAndStats:
    def test_counts(self, queue):
        assert queue.counts() == {"urgent": 2, "pending": 3, "processing": 1}

    def test_stats_for_urgent_queue(self, queue):
        stats = queue.stats("urgent")
        assert stats.queue == "urgent"
        assert stats.item_count == 2
        assert stats.long_wait_count == 2
        assert stats.average_score == pytest.approx((100.75 + 112.1) / 2, abs=0.01)
        assert stats.total_value == 1585
        assert stats.overdue_count == 1

    def test_stats_for_empty_queue(self):
        queue = PriorityQueue(source=InMemoryOrderSource(), clock=lambda: NOW)
        stats = queue.stats("processing")
        assert stats.item_count == 0
        assert stats.average_score == 0.0
        assert stats.total_value == 0.0
