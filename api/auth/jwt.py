"""JWT session tokens.

Tokens are HS256-signed, carry the user id and role, and expire after
seven days. Clients treat them as opaque strings.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt

from api.exceptions import TokenExpiredError, TokenInvalidError
from postboard.db.models import UserRole

# Configuration - JWT_SECRET is REQUIRED in all environments
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError(
        "JWT_SECRET environment variable is required. "
        "Set it to a secure random string (e.g., openssl rand -hex 32)"
    )
JWT_ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = 7
ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded payload of a valid session token."""

    user_id: UUID
    role: UserRole
    expires_at: datetime
    jti: str


def issue_token(user_id: UUID, role: UserRole) -> str:
    """Create a signed session token.

    Args:
        user_id: ID of the authenticated user
        role: The user's role, copied into the ``role`` claim

    Returns:
        Encoded JWT token string
    """
    now = datetime.utcnow()
    payload = {
        "sub": str(user_id),
        "userId": str(user_id),
        "role": UserRole(role).value,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(days=TOKEN_EXPIRE_DAYS),
        "jti": str(uuid4()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def validate_token(token: str) -> TokenClaims:
    """Verify and decode a session token.

    Args:
        token: JWT token string

    Returns:
        TokenClaims for the token

    Raises:
        TokenExpiredError: The signature is valid but ``exp`` has passed
        TokenInvalidError: Bad signature, malformed token or missing claims
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise TokenInvalidError()

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenInvalidError("Invalid token type")

    try:
        user_id = UUID(payload["sub"])
        role = UserRole(payload["role"])
        expires_at = datetime.utcfromtimestamp(payload["exp"])
    except (KeyError, TypeError, ValueError):
        raise TokenInvalidError("Invalid token payload")

    return TokenClaims(
        user_id=user_id,
        role=role,
        expires_at=expires_at,
        jti=payload.get("jti", ""),
    )
