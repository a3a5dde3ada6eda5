"""Outbound adapter registry — audit notes and order status updates.

Provides singleton access to the NoteEmitter and StatusPublisher. Uses fake
adapters by default; real adapters (communications service, order service)
are selected via the NOTE_EMITTER and STATUS_PUBLISHER environment
variables in production.
"""

import os

from production.outbound.note_port import NoteEmitter
from production.outbound.status_port import StatusPublisher

_note_emitter: NoteEmitter | None = None
_status_publisher: StatusPublisher | None = None


def get_note_emitter() -> NoteEmitter:
    """Return the configured note emitter (singleton)."""
    global _note_emitter
    if _note_emitter is None:
        adapter = os.environ.get("NOTE_EMITTER", "fake")
        if adapter == "fake":
            from production.outbound.fake_notes import FakeNoteEmitter

            _note_emitter = FakeNoteEmitter()
        else:
            raise ValueError(f"Unknown note emitter: {adapter}")
    return _note_emitter


def get_status_publisher() -> StatusPublisher:
    """Return the configured status publisher (singleton)."""
    global _status_publisher
    if _status_publisher is None:
        adapter = os.environ.get("STATUS_PUBLISHER", "fake")
        if adapter == "fake":
            from production.outbound.fake_status import FakeStatusPublisher

            _status_publisher = FakeStatusPublisher()
        else:
            raise ValueError(f"Unknown status publisher: {adapter}")
    return _status_publisher


def reset_outbound():
    """Reset both adapter singletons (useful for testing)."""
    global _note_emitter, _status_publisher
    _note_emitter = None
    _status_publisher = None


def set_note_emitter(emitter: NoteEmitter) -> None:
    """Override the active note emitter (useful for tests)."""
    global _note_emitter
    _note_emitter = emitter


def set_status_publisher(publisher: StatusPublisher) -> None:
    """Override the active status publisher (useful for tests)."""
    global _status_publisher
    _status_publisher = publisher
