"""FastAPI dependencies for authentication.

Provides:
- get_current_user: Validate the bearer token and load the acting user
- CurrentUser: Container handed to route handlers
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from api.auth.jwt import TokenClaims, validate_token
from api.exceptions import AuthenticationError
from postboard.db.engine import get_session_dependency
from postboard.db.models import User, UserRole
from postboard.logging import bind_context


# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)


class CurrentUser:
    """Authenticated user context.

    Every store call made for a request is scoped by ``user_id`` from
    this object.
    """

    def __init__(self, user: User, claims: Optional[TokenClaims] = None):
        self.user = user
        self.claims = claims

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session_dependency),
) -> CurrentUser:
    """Extract and validate the current user from the bearer token.

    This dependency:
    1. Extracts the JWT from the Authorization header
    2. Verifies signature and expiry
    3. Loads the user from the database

    Raises:
        AuthenticationError: Missing credentials or unknown/inactive user
        TokenExpiredError: Token is past its expiry
        TokenInvalidError: Token signature or payload is bad
    """
    if not credentials or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing authentication credentials")

    claims = validate_token(credentials.credentials)

    user = session.get(User, claims.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found")

    bind_context(user_id=user.id)
    return CurrentUser(user=user, claims=claims)
