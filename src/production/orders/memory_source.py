"""In-memory order source — order feed for development and testing.

Records are immutable ``OrderRecord`` snapshots; updates replace the record
for an id. Readers get a copied list, so building a queue view never holds
the write lock.
"""

import dataclasses
import threading

from production.orders.port import OrderRecord, OrderSource


class InMemoryOrderSource(OrderSource):
    """Order source backed by a dict of OrderRecord snapshots."""

    def __init__(self, orders: list[OrderRecord] | None = None):
        self._orders: dict[str, OrderRecord] = {}
        self._write_lock = threading.Lock()
        for order in orders or []:
            self.put(order)

    def put(self, order: OrderRecord) -> None:
        """Add or replace an order record."""
        with self._write_lock:
            self._orders[str(order.id)] = order

    def set_status(self, order_id: str, status: str) -> OrderRecord:
        """Replace the status of a known order and return the new record."""
        with self._write_lock:
            current = self._orders[str(order_id)]
            updated = dataclasses.replace(current, status=status)
            self._orders[str(order_id)] = updated
        return updated

    def get_order(self, order_id: str) -> OrderRecord | None:
        return self._orders.get(str(order_id))

    def list_orders(self) -> list[OrderRecord]:
        return list(self._orders.values())

    def reset(self):
        """Forget all orders (useful between tests)."""
        with self._write_lock:
            self._orders.clear()
