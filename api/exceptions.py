"""Standard exception classes for the API.

All custom exceptions inherit from PostboardException and include:
- message: Human-readable error message
- error_code: Machine-readable error code (e.g., "NOT_FOUND")
- details: Optional dictionary with additional context

Services raise these; the handlers in api.error_handlers turn them into
JSON responses unmodified.
"""

from typing import Any, Optional


class PostboardException(Exception):
    """Base exception for all Postboard API errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        details: Optional dictionary with additional error context
        status_code: HTTP status code (set by subclasses)
    """

    status_code: int = 500
    default_error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(PostboardException):
    """Request validation failed (HTTP 400).

    Missing or malformed required fields, bad enum values, past timestamps.
    """

    status_code = 400
    default_error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidCredentialsError(PostboardException):
    """Login failed (HTTP 400).

    The message is the same whether the email is unknown or the password
    is wrong.
    """

    status_code = 400
    default_error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class AuthenticationError(PostboardException):
    """Authentication failed (HTTP 401).

    Use when the bearer token is missing or the user it names is gone.
    """

    status_code = 401
    default_error_code = "AUTHENTICATION_FAILED"
    default_message = "Authentication required"


class TokenExpiredError(AuthenticationError):
    """Session token is past its expiry (HTTP 401)."""

    default_error_code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Session token has a bad signature or shape (HTTP 401)."""

    default_error_code = "TOKEN_INVALID"
    default_message = "Invalid token"


class NotFoundError(PostboardException):
    """Resource not found (HTTP 404).

    Also used when the resource exists but belongs to another user.
    """

    status_code = 404
    default_error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ImmutableError(PostboardException):
    """Attempt to modify a published post (HTTP 400)."""

    status_code = 400
    default_error_code = "POST_IMMUTABLE"
    default_message = "Published posts cannot be modified"


class ConflictError(PostboardException):
    """Resource conflict (HTTP 400).

    Duplicate username/email, or a write that kept losing a concurrent race.
    """

    status_code = 400
    default_error_code = "CONFLICT"
    default_message = "Resource conflict"


class UpstreamError(PostboardException):
    """Storage, database or disk failure (HTTP 500).

    The message sent to the client is always generic.
    """

    status_code = 500
    default_error_code = "UPSTREAM_ERROR"
    default_message = "A storage error occurred"
