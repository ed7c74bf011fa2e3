"""Error Handlers — global exception handlers for the CRUD API.

Invariants:
    - CrudError → its failure envelope {"ok": 0, "err": code} with its HTTP status
    - Exception (catch-all) → {"ok": 0, "err": "internal_error"}, never leaks details

Design Decisions:
    - CRUD routes already turn CrudError into responses in the dispatcher; these
      handlers cover everything else mounted on the app (health, user routes)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from restcrud.core.errors import CrudError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_crud_error_handler(app)
    _register_generic_error_handler(app)


def _register_crud_error_handler(app: FastAPI) -> None:
    """Register restcrud domain/infrastructure error handler."""

    @app.exception_handler(CrudError)
    async def crud_error_handler(request: Request, exc: CrudError):
        """Handle all restcrud errors raised outside the dispatcher."""
        logger.error(
            f"CrudError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": 0, "err": "internal_error"},
        )
