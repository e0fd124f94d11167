"""Shared response schemas for the OpenAPI docs.

The error envelope itself is produced by ``api.error_handlers``; these
models only describe it so every route documents the same shape.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorContent(BaseModel):
    code: str = Field(description="Machine-readable code, e.g. POST_IMMUTABLE")
    message: str
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """``{"error": {...}, "message": ...}`` with ``message`` repeated at top level."""

    error: ErrorContent
    message: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": {
                        "code": "VALIDATION_ERROR",
                        "message": "Scheduled time must be in the future",
                        "details": {"field": "scheduledFor"},
                    },
                    "message": "Scheduled time must be in the future",
                },
            ]
        }
    }


class SuccessResponse(BaseModel):
    """Body for deletes and other writes with nothing to return."""

    success: bool = True
    message: Optional[str] = None


# Passed as ``responses=`` on routes that raise domain errors
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation, conflict or published-post error"},
    401: {"model": ErrorResponse, "description": "Missing, expired or invalid bearer token"},
    404: {"model": ErrorResponse, "description": "Not found or owned by another user"},
}
