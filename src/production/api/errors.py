"""HTTP mapping for production errors not covered by protean's handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError

from production.errors import ConcurrentModification, InvalidTransition


async def _invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.messages})


async def _concurrent_modification(request: Request, exc: ConcurrentModification) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc)})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


def register_workflow_error_handlers(app: FastAPI) -> None:
    """Map workflow conflicts to 409 and unknown workflows or orders to 404.

    Register after ``protean.integrations.fastapi.register_exception_handlers``.
    """
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(ConcurrentModification, _concurrent_modification)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
