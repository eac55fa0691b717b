"""Exception handlers rendering errors as {"success": false, "error": ...}."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from registration_api.core.exceptions import (
    FileTooLargeError,
    RegistrationError,
    ValidationError,
)
from registration_api.core.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Caller input violated a precondition: 400, or 413 for oversize files."""
    status_code = (
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        if isinstance(exc, FileTooLargeError)
        else status.HTTP_400_BAD_REQUEST
    )
    logger.warning(
        "request_rejected",
        path=request.url.path,
        status_code=status_code,
        error=str(exc),
    )
    return error_response(status_code, str(exc))


async def registration_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Downstream or configuration failure: 500 with the error message."""
    logger.error(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected failure: 500 without internal details."""
    logger.error(
        "request_unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RegistrationError, registration_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
