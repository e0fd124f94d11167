"""Scheduled post model."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field

from postboard.db.models.base import UUIDModel, TimestampMixin


class MediaType(str, Enum):
    """Kind of media attached to a post."""

    text = "text"
    image = "image"
    video = "video"
    carousel = "carousel"
    reel = "reel"


class PostStatus(str, Enum):
    """Publication status of a post.

    draft -> scheduled -> published | failed. Only the external publisher
    moves a post out of scheduled.
    """

    draft = "draft"
    scheduled = "scheduled"
    published = "published"
    failed = "failed"


class Post(UUIDModel, TimestampMixin, table=True):
    """An authored post waiting for (or past) its publication time."""

    __tablename__ = "posts"

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    content: str = Field(nullable=False)
    hashtags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    cta: str = Field(default="")
    media_type: MediaType = Field(nullable=False)
    media_urls: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    scheduled_for: datetime = Field(nullable=False, index=True)
    status: PostStatus = Field(default=PostStatus.scheduled, nullable=False)

    # Snapshot of {id, platform, name, type} per targeted account
    selected_accounts: list[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    # Set by the external publisher
    published_at: Optional[datetime] = Field(default=None)
    error_message: Optional[str] = Field(default=None)

    # Compare-and-set counter, bumped on every write
    version: int = Field(default=1, nullable=False)
