"""Authentication service for registration, login and password changes."""

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from api.auth.password import hash_password, verify_password
from api.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    ValidationError,
)
from postboard.content.repository import UserRepository
from postboard.db.models import User, UserRole
from postboard.logging import get_logger

logger = get_logger(__name__)


class AuthService:
    """Service for credential operations.

    Owns the user table: creation, bcrypt verification and password
    rotation. Token issuing lives in api.auth.jwt.
    """

    def __init__(self, session: Session):
        """Initialize with a SQLModel session.

        Args:
            session: SQLModel Session for database operations
        """
        self._session = session
        self._users = UserRepository(session)

    def register(
        self,
        username: str,
        email: str,
        password: str,
        role: Optional[str] = None,
    ) -> User:
        """Register a new user.

        Args:
            username: Unique display handle
            email: Unique email address
            password: Plain text password (will be hashed)
            role: One of admin/editor/viewer; editor when omitted

        Returns:
            Created User instance

        Raises:
            ValidationError: A field is missing or the role is unknown
            ConflictError: Username or email already exists
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        missing = [
            name
            for name, value in (("username", username), ("email", email), ("password", password))
            if not value
        ]
        if missing:
            raise ValidationError(
                "Username, email and password are required",
                details={"missing": missing},
            )

        try:
            user_role = UserRole(role) if role else UserRole.editor
        except ValueError:
            raise ValidationError(
                f"Invalid role: {role}",
                details={"allowed": [r.value for r in UserRole]},
            )

        if self._users.find_conflict(username, email):
            raise ConflictError("User already exists")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=user_role,
            is_active=True,
        )
        try:
            user = self._users.add(user)
        except IntegrityError:
            # A concurrent registration claimed the username or email first
            self._session.rollback()
            raise ConflictError("User already exists")
        logger.info("user_registered", user_id=str(user.id), role=user.role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Verify an email/password pair.

        Unknown email, inactive user and wrong password all raise the same
        error so callers cannot learn which emails exist.

        Raises:
            InvalidCredentialsError: The credentials do not match a live user
        """
        if not email or not password:
            raise InvalidCredentialsError()

        user = self._users.get_by_email(email.strip().lower())
        if user is None or not user.is_active:
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.info("login_failed", user_id=str(user.id))
            raise InvalidCredentialsError()
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> User:
        """Replace a user's password after checking the current one."""
        if not new_password:
            raise ValidationError("New password is required")
        if not verify_password(current_password or "", user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)
        logger.info("password_changed", user_id=str(user.id))
        return user

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._users.get_by_email(email.strip().lower())
