"""Production FastAPI application.

Web server for the production floor: work queues and production workflows.
Every request runs inside the production domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in production/domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from production.domain import production  # noqa: E402
from protean.integrations.fastapi import register_exception_handlers

production.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Production Floor API",
    description="Work queues and production workflows",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the production domain context for each request."""
    with production.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from production.api import (  # noqa: E402
    dev_router,
    queue_router,
    register_workflow_error_handlers,
    workflow_router,
)

app.include_router(workflow_router)
app.include_router(queue_router)
app.include_router(dev_router)

register_exception_handlers(app)
register_workflow_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "production": {"name": production.name},
            },
        }
    )
