from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture


class FakeClock:
    """Controllable clock for deterministic timer tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0, hours: float = 0) -> datetime:
        self.now += timedelta(seconds=seconds, minutes=minutes, hours=hours)
        return self.now


@pytest.fixture(scope="session")
def production_bed():
    from production.domain import production

    bed = DomainFixture(production)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(production_bed):
    with production_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _adapters():
    """Fresh order source, sinks and engine for every test."""
    from production.engine import reset_engine
    from production.orders import reset_order_source
    from production.outbound import reset_outbound

    reset_order_source()
    reset_outbound()
    reset_engine()
    yield
    reset_order_source()
    reset_outbound()
    reset_engine()


@pytest.fixture()
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture()
def orders():
    from production.orders import get_order_source

    return get_order_source()


@pytest.fixture()
def notes():
    from production.outbound import get_note_emitter

    return get_note_emitter()


@pytest.fixture()
def publisher():
    from production.outbound import get_status_publisher

    return get_status_publisher()


@pytest.fixture()
def make_order(orders, clock):
    """Seed an order into the in-memory source and return it."""
    from production.orders.port import OrderRecord

    counter = {"n": 0}

    def _make(order_id=None, **overrides):
        counter["n"] += 1
        order_id = order_id or f"ord-{counter['n']:03d}"
        fields = {
            "id": order_id,
            "order_number": f"CO-{1000 + counter['n']}",
            "customer_id": "cust-001",
            "urgency_level": "NORMAL",
            "status": "PROCESSING",
            "total_amount": 120.0,
            "created_at": clock.now - timedelta(hours=1),
            "item_count": 2,
        }
        fields.update(overrides)
        order = OrderRecord(**fields)
        orders.put(order)
        return order

    return _make


@pytest.fixture()
def engine(clock):
    from production.engine import set_engine
    from production.engine.engine import WorkflowEngine

    engine = WorkflowEngine(clock=clock)
    set_engine(engine)
    return engine
