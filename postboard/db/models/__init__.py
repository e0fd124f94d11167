"""SQLModel table definitions.

All primary keys use UUID.

Model Categories:
- Identity: User
- Publishing: SocialAccount, Post
- Inbox: Conversation, ConversationMessage
"""

from postboard.db.models.base import UUIDModel, TimestampMixin

from postboard.db.models.user import User, UserRole
from postboard.db.models.social import SocialAccount, SocialPlatform
from postboard.db.models.post import Post, MediaType, PostStatus
from postboard.db.models.conversation import (
    Conversation,
    ConversationMessage,
    ConversationStatus,
    MessageDirection,
)

__all__ = [
    "UUIDModel",
    "TimestampMixin",
    "User",
    "UserRole",
    "SocialAccount",
    "SocialPlatform",
    "Post",
    "MediaType",
    "PostStatus",
    "Conversation",
    "ConversationMessage",
    "ConversationStatus",
    "MessageDirection",
]
