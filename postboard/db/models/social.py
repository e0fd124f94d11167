"""Linked social platform accounts."""

from enum import Enum
from typing import Optional
from uuid import UUID

from sqlmodel import Field

from postboard.db.models.base import UUIDModel, TimestampMixin


class SocialPlatform(str, Enum):
    """Supported target platforms."""

    facebook = "facebook"
    instagram = "instagram"
    tiktok = "tiktok"
    whatsapp = "whatsapp"


class SocialAccount(UUIDModel, TimestampMixin, table=True):
    """A platform identity a user can target with posts.

    Posts never reference this table directly; they embed a snapshot of the
    account at authoring time, so editing or deleting an account leaves
    historical posts untouched.
    """

    __tablename__ = "social_accounts"

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    platform: SocialPlatform = Field(nullable=False)
    account_name: str = Field(nullable=False)
    account_id: str = Field(nullable=False, index=True)  # ID on the platform
    access_token: Optional[str] = Field(default=None)  # never serialized to clients
    page_id: Optional[str] = Field(default=None, index=True)  # Facebook Pages
    is_active: bool = Field(default=True)
