"""Maps domain errors to JSON responses of the form {"detail": ..., "code": ...}."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from rbac_portal.app.core.exceptions import PortalError, Unauthenticated

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, code: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "code": code}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for domain errors, constraint violations and anything unexpected."""

    @app.exception_handler(PortalError)
    async def handle_portal_error(request: Request, exc: PortalError):
        logger.warning(
            f"{request.method} {request.url.path} rejected: {exc.message}",
            extra={"extra_data": {"status_code": exc.status_code, "code": exc.code}},
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return _error_response(exc.status_code, exc.message, exc.code, headers=headers)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        # Unique or foreign key rule tripped by a concurrent write after the pre-checks
        logger.warning(
            f"{request.method} {request.url.path} constraint violation",
            extra={"extra_data": {"error": str(exc.orig)}},
        )
        return _error_response(409, "Conflict with existing data", "conflict")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return _error_response(500, "Internal server error", "server_error")
