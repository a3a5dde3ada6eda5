"""Fake status publisher — records status updates in memory for test assertions."""

from production.outbound.status_port import StatusPublisher


class FakeStatusPublisher(StatusPublisher):
    """Status publisher that records every call in memory."""

    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Order service unavailable"):
        """Configure the fake publisher behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, order_id: str, status: str, reason: str) -> dict:
        self.published.append({"order_id": str(order_id), "status": status, "reason": reason})
        if not self.should_succeed:
            return {"status": "failed", "error": self.failure_reason}
        return {"status": "sent"}

    def calls_for(self, order_id: str) -> list[dict]:
        return [p for p in self.published if p["order_id"] == str(order_id)]

    def reset(self):
        """Clear recorded calls (useful between tests)."""
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"
