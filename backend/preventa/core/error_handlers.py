"""Global exception handlers for the FastAPI application.

Every failure leaves the API in the same envelope::

    {"error": {"code": "...", "message": "...", "details": {...}}}
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from preventa.core.exceptions import PreventaException
from preventa.core.logging import get_logger

logger = get_logger(__name__)


def error_response(
    status_code: int, code: str, message: str, details: dict[str, Any] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            }
        },
    )


async def preventa_exception_handler(request: Request, exc: PreventaException) -> JSONResponse:
    """Handle all PreventaException subclasses."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_error",
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path,
        method=request.method,
    )
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


def _format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    formatted = []
    for error in errors:
        field = ".".join(str(loc) for loc in error["loc"])
        formatted.append({"field": field, "message": error["msg"]})
    return formatted


async def pydantic_validation_handler(
    request: Request, exc: PydanticValidationError | RequestValidationError
) -> JSONResponse:
    """Handle request body and model validation errors with consistent format."""
    errors = _format_validation_errors(exc.errors())

    logger.warning(
        "validation_error",
        errors=errors,
        path=request.url.path,
        method=request.method,
    )
    return error_response(
        422, "VALIDATION_ERROR", "Request validation failed", {"errors": errors}
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "unhandled_exception",
        error=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")
