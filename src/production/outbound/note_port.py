"""Note emitter port — abstract interface for the order audit log.

Production milestones (step completed, step blocked, quality issue) are
recorded as order notes in the communications subsystem.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class NoteType(Enum):
    GENERAL = "GENERAL"
    URGENCY = "URGENCY"
    TIMELINE = "TIMELINE"
    SHIPPING = "SHIPPING"
    CUSTOMIZATION = "CUSTOMIZATION"
    PRODUCTION = "PRODUCTION"
    QUALITY = "QUALITY"
    DESIGN_APPROVAL = "DESIGN_APPROVAL"


class NotePriority(Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


@dataclass(frozen=True)
class ProductionNote:
    """An audit note about an order's production."""

    note_type: str
    title: str
    content: str
    is_internal: bool = True
    priority: str = NotePriority.NORMAL.value


class NoteEmitter(ABC):
    """Abstract interface for audit-note adapters."""

    @abstractmethod
    def emit(self, order_id: str, note: ProductionNote) -> dict:
        """Attach a note to an order.

        Returns:
            dict with keys: note_id, status ("sent" or "failed"), error (optional)
        """
        ...
