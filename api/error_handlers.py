"""JSON error rendering for every failure the gateway can produce.

All errors leave the API as::

    {"error": {"code": ..., "message": ..., "details": ...}, "message": ...}

The top-level ``message`` is what the dashboard client shows in its toasts.
Anything that reaches the 500 path is logged in full and answered with a
generic message.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.exceptions import PostboardException, UpstreamError

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

# Codes for errors raised by the framework rather than by services
HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_FAILED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    503: "SERVICE_UNAVAILABLE",
}


def create_error_response(
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build the error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error, "message": message}


def _respond(
    status_code: int,
    body: dict[str, Any],
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    if status_code == 401:
        headers = {**BEARER_CHALLENGE, **(headers or {})}
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def postboard_exception_handler(
    request: Request, exc: PostboardException
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            exc.error_code,
            request.method,
            request.url.path,
            exc.message,
        )
        body = create_error_response(exc.error_code, UpstreamError.default_message)
        return _respond(exc.status_code, body)

    logger.warning(
        "%s on %s %s: %s",
        exc.error_code,
        request.method,
        request.url.path,
        exc.message,
    )
    error = exc.to_dict()
    return _respond(exc.status_code, {"error": error, "message": error["message"]})


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]
    logger.info(
        "Rejected %s %s with %d invalid fields",
        request.method,
        request.url.path,
        len(errors),
    )
    return _respond(
        400,
        create_error_response(
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": errors},
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing misses, method mismatches and explicit HTTPExceptions."""
    message = str(exc.detail) if exc.detail else "An error occurred"
    code = HTTP_ERROR_CODES.get(exc.status_code, "ERROR")
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "HTTP %d on %s %s: %s", exc.status_code, request.method, request.url.path, message)
    return _respond(
        exc.status_code,
        create_error_response(code, message),
        getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _respond(
        500,
        create_error_response("INTERNAL_ERROR", "An unexpected error occurred"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PostboardException, postboard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
