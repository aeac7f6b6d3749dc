"""Global exception handlers for consistent error responses.

- AppError subclasses map to an HTTP status by type
- HTTPException (403, 404, 429, ...) keeps its status and headers
- Unexpected exceptions become a generic 500
- Every body carries the request_id for correlation
"""

import logging
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from veltri.core.errors import (
    AppError,
    AuthenticationAppError,
    DetectionAppError,
    LLMAppError,
    ValidationAppError,
)
from veltri.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_for(exc: AppError) -> int:
    """Pick the HTTP status for a domain error.

    DetectionAppError may carry its own status in ``details["http_status"]``
    (e.g. 500 for missing configuration); provider failures default to 502.
    """
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, AuthenticationAppError):
        return 403
    if isinstance(exc, DetectionAppError):
        return int((exc.details or {}).get("http_status", 502))
    if isinstance(exc, LLMAppError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error as ``{"error": {code, message, request_id, details?}}``."""
    status_code = status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    details = {k: v for k, v in (exc.details or {}).items() if k != "http_status"}
    if details:
        error_content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


def http_error_code(status_code: int) -> str:
    """Snake-case reason phrase for a status, e.g. 429 -> "too_many_requests"."""
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "http_error"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (403, 404, 429, ...) in the same envelope.

    Headers set on the exception, such as Retry-After, are kept.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": http_error_code(exc.status_code),
                "message": str(exc.detail),
                "request_id": get_request_id(),
            }
        },
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Safety net for unexpected errors; never leaks internals to the client."""
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the handlers on a FastAPI app (specific before general)."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
