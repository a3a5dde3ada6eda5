"""Fake note emitter — records notes in memory for test assertions."""

from dataclasses import asdict
from uuid import uuid4

from production.outbound.note_port import NoteEmitter, ProductionNote


class FakeNoteEmitter(NoteEmitter):
    """Note emitter that records notes in memory."""

    def __init__(self):
        self.sent_notes: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Audit log unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Audit log unavailable"):
        """Configure the fake emitter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def emit(self, order_id: str, note: ProductionNote) -> dict:
        if not self.should_succeed:
            return {"note_id": None, "status": "failed", "error": self.failure_reason}

        note_id = f"note-{uuid4().hex[:12]}"
        self.sent_notes.append({"note_id": note_id, "order_id": str(order_id), **asdict(note)})
        return {"note_id": note_id, "status": "sent"}

    def notes_for(self, order_id: str) -> list[dict]:
        return [n for n in self.sent_notes if n["order_id"] == str(order_id)]

    def reset(self):
        """Clear recorded notes (useful between tests)."""
        self.sent_notes.clear()
        self.should_succeed = True
        self.failure_reason = "Audit log unavailable"
