"""User model: the root aggregate owning accounts, posts and conversations."""

from enum import Enum

from sqlmodel import Field

from postboard.db.models.base import UUIDModel, TimestampMixin


class UserRole(str, Enum):
    """Dashboard role.

    Stored on the user and carried in session tokens. No route gates on
    it yet.
    """

    admin = "admin"
    editor = "editor"
    viewer = "viewer"


class User(UUIDModel, TimestampMixin, table=True):
    """Dashboard user with a bcrypt password digest."""

    __tablename__ = "users"

    username: str = Field(unique=True, index=True, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.editor, nullable=False)
    is_active: bool = Field(default=True)
