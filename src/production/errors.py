"""Production domain errors.

``InvalidTransition`` is a ``ValidationError`` so existing handlers (and
protean's FastAPI integration) keep treating it as a rejected domain
operation; the API maps it to 409 on its own.
"""

from protean.exceptions import ValidationError


class InvalidTransition(ValidationError):
    """A step or workflow is not in the state the operation requires."""


class ConcurrentModification(Exception):
    """Another actor holds the workflow lock for this order."""

    def __init__(self, order_id: str, message: str | None = None):
        self.order_id = order_id
        super().__init__(message or f"Workflow for order {order_id} is being modified by another actor; retry")


class ExternalSyncFailure(Exception):
    """A sink call failed after the local transition had been committed.

    Never raised by the engine: instances are returned as warnings so that
    production progress does not stall on an audit or notification outage.
    """

    def __init__(self, sink: str, order_id: str, reason: str):
        self.sink = sink
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"{sink} failed for order {order_id}: {reason}")
