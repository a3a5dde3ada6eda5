"""Production bounded context: Work Queues and Production Workflows.

Ranks pending orders into prioritized work queues and drives each order
through a fixed pipeline of production steps. Uses CQRS: the Workflow
aggregate is the single source of truth for step state, and dashboards read
derived projections.
"""

import logging

import structlog
from protean.domain import Domain

production = Domain(name="production")

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)
