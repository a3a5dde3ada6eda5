"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the exact field names expected
by the API's Pydantic request schemas.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

URGENCY_LEVELS = ["NORMAL", "EXPEDITED", "RUSH", "EMERGENCY"]
STAFF = [f"staff-{n}" for n in range(1, 13)]


def unique_order_id() -> str:
    """Generate unique order IDs like 'ord-lt-a1b2c3d4'."""
    return f"ord-lt-{uuid.uuid4().hex[:8]}"


def order_number() -> str:
    return f"CO-{random.randint(10000, 99999)}"


def order_data(status: str = "PENDING", urgency_level: str | None = None) -> dict:
    """Generate a SeedOrderRequest payload.

    Urgency is weighted towards NORMAL the way a real order book is.
    ``created_at`` falls within the last two days so queue scores spread out.
    """
    created = datetime.now(UTC) - timedelta(minutes=random.randint(0, 48 * 60))
    return {
        "id": unique_order_id(),
        "order_number": order_number(),
        "customer_id": f"cust-{fake.uuid4()[:8]}",
        "urgency_level": urgency_level or random.choices(URGENCY_LEVELS, weights=[60, 20, 15, 5])[0],
        "status": status,
        "total_amount": round(random.uniform(15.0, 3500.0), 2),
        "created_at": created.isoformat(),
        "item_count": random.randint(1, 8),
    }


def staff_member() -> str:
    return random.choice(STAFF)


def completion_notes() -> str | None:
    """Notes on roughly a third of completions."""
    return fake.sentence(nb_words=8) if random.random() < 0.33 else None


def block_reason() -> str:
    return random.choice(
        [
            "Waiting for material delivery",
            "Machine maintenance",
            "Design clarification needed",
            "Operator unavailable",
        ]
    )


def skip_reason() -> str:
    return random.choice(["Customer supplied materials", "Already prepared", "Not required for this item"])


def quality_issue() -> str:
    return fake.sentence(nb_words=6)
