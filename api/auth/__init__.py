"""Authentication module for the API."""

from api.auth.jwt import TokenClaims, issue_token, validate_token
from api.auth.password import hash_password, verify_password
from api.auth.dependencies import CurrentUser, get_current_user

__all__ = [
    # JWT
    "TokenClaims",
    "issue_token",
    "validate_token",
    # Password
    "hash_password",
    "verify_password",
    # Dependencies
    "CurrentUser",
    "get_current_user",
]
