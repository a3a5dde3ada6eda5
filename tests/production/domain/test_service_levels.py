"""Tests for service-level deadlines per urgency level."""

from datetime import UTC, datetime, timedelta

import pytest
from production.orders.port import OrderRecord
from production.queue.service_levels import MAX_TURNAROUND_HOURS, time_status

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


def _order(urgency, hours_ago):
    return OrderRecord(
        id="ord-sl",
        order_number="CO-SL",
        customer_id="c-1",
        urgency_level=urgency,
        created_at=NOW - timedelta(hours=hours_ago),
    )


class TestTimeStatus:
    def test_turnaround_windows(self):
        assert MAX_TURNAROUND_HOURS == {"EMERGENCY": 4, "RUSH": 24, "EXPEDITED": 72}

    def test_emergency_overdue(self):
        status = time_status(_order("EMERGENCY", 7), NOW)
        assert status.is_overdue is True
        assert status.hours_remaining == pytest.approx(-3)
        assert status.label == "OVERDUE by 3h"

    def test_rush_remaining(self):
        status = time_status(_order("RUSH", 19), NOW)
        assert status.is_overdue is False
        assert status.hours_remaining == pytest.approx(5)
        assert status.label == "5h remaining"

    def test_expedited_within_window(self):
        assert time_status(_order("EXPEDITED", 71), NOW).is_overdue is False
        assert time_status(_order("EXPEDITED", 73), NOW).is_overdue is True

    def test_normal_has_no_deadline(self):
        status = time_status(_order("NORMAL", 7.5), NOW)
        assert status.is_overdue is False
        assert status.hours_remaining is None
        assert status.label == "7h elapsed"

    def test_exactly_at_deadline_is_not_overdue(self):
        assert time_status(_order("EMERGENCY", 4), NOW).is_overdue is False
