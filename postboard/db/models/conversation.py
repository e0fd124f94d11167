"""Conversation threads with external platform users."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from postboard.db.models.base import UUIDModel, TimestampMixin
from postboard.db.models.social import SocialPlatform


class ConversationStatus(str, Enum):
    active = "active"
    resolved = "resolved"
    archived = "archived"


class MessageDirection(str, Enum):
    received = "received"
    sent = "sent"


class Conversation(UUIDModel, TimestampMixin, table=True):
    """A thread between a dashboard user's account and one external participant."""

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint(
            "owner_user_id",
            "external_user_id",
            "platform",
            name="uq_conversations_owner_participant_platform",
        ),
    )

    owner_user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    external_user_id: str = Field(nullable=False, index=True)
    platform: SocialPlatform = Field(default=SocialPlatform.facebook, nullable=False)
    status: ConversationStatus = Field(default=ConversationStatus.active, nullable=False)


class ConversationMessage(UUIDModel, table=True):
    """One message in a conversation. Rows are only ever inserted."""

    __tablename__ = "conversation_messages"
    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "position", name="uq_conversation_messages_position"
        ),
    )

    conversation_id: UUID = Field(
        foreign_key="conversations.id", nullable=False, index=True
    )
    position: int = Field(nullable=False)  # 0-based append order
    text: str = Field(nullable=False)
    direction: MessageDirection = Field(nullable=False)
    external_message_id: Optional[str] = Field(default=None)
    sent_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
