"""Order source factory.

Provides get_order_source() / set_order_source() to swap implementations:
- InMemoryOrderSource for development and testing
- an order-service client in production (configured via ORDER_SOURCE)
"""

import os

from production.orders.port import OrderSource

_current_source: OrderSource | None = None


def get_order_source() -> OrderSource:
    """Return the configured order source (singleton)."""
    global _current_source
    if _current_source is None:
        adapter = os.environ.get("ORDER_SOURCE", "memory")
        if adapter == "memory":
            from production.orders.memory_source import InMemoryOrderSource

            _current_source = InMemoryOrderSource()
        else:
            raise ValueError(f"Unknown order source: {adapter}")
    return _current_source


def set_order_source(source: OrderSource) -> None:
    """Override the active order source (useful for tests)."""
    global _current_source
    _current_source = source


def reset_order_source() -> None:
    """Reset to the default order source."""
    global _current_source
    _current_source = None
