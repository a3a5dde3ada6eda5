"""Production domain API package."""

from production.api.errors import register_workflow_error_handlers
from production.api.routes import dev_router, queue_router, workflow_router

__all__ = ["workflow_router", "queue_router", "dev_router", "register_workflow_error_handlers"]
