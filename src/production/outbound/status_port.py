"""Status publisher port — abstract interface to the order service.

Called once per workflow, when the final production step is done, to
advance the order's externally visible status.
"""

from abc import ABC, abstractmethod


class StatusPublisher(ABC):
    """Abstract interface for order-status adapters."""

    @abstractmethod
    def publish(self, order_id: str, status: str, reason: str) -> dict:
        """Request an order status change.

        Returns:
            dict with keys: status ("sent" or "failed"), error (optional)
        """
        ...
