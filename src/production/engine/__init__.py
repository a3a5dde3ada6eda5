"""Workflow engine registry.

Provides singleton access to the WorkflowEngine. Tuning comes from the
environment:

    PRODUCTION_STRICT_SEQUENCE   "true" (default) or "false"
    PRODUCTION_COMPLETED_STATUS  order status requested on completion (SHIPPED)
    PRODUCTION_LOCK_TIMEOUT      seconds a mutation waits for the instance lock (2.0)
"""

import os

from production.engine.engine import WorkflowEngine

_engine: WorkflowEngine | None = None


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_engine() -> WorkflowEngine:
    """Return the configured workflow engine (singleton)."""
    global _engine
    if _engine is None:
        _engine = WorkflowEngine(
            strict_sequence=_env_flag("PRODUCTION_STRICT_SEQUENCE", True),
            completed_order_status=os.environ.get("PRODUCTION_COMPLETED_STATUS", "SHIPPED"),
            lock_timeout=float(os.environ.get("PRODUCTION_LOCK_TIMEOUT", "2.0")),
        )
    return _engine


def set_engine(engine: WorkflowEngine) -> None:
    global _engine
    _engine = engine


def reset_engine():
    """Reset the engine singleton (useful for testing)."""
    global _engine
    _engine = None
