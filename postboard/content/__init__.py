"""Repository layer for dashboard entities."""

from postboard.content.repository import (
    UserRepository,
    SocialAccountRepository,
    PostRepository,
    ConversationRepository,
)

__all__ = [
    "UserRepository",
    "SocialAccountRepository",
    "PostRepository",
    "ConversationRepository",
]
