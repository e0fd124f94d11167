"""SQLModel-based repository layer.

Each repository wraps a session and encapsulates the queries for one
entity. Business rules (ownership errors, validation, immutability) live
in the api.services layer on top of these.

Usage:
    from postboard.db import get_session
    from postboard.content.repository import PostRepository

    with get_session() as session:
        repo = PostRepository(session)
        posts = repo.list_by_user(user_id)
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlmodel import Session, SQLModel, select

from postboard.db.models import (
    User,
    SocialAccount,
    Post,
    PostStatus,
    Conversation,
    ConversationMessage,
    SocialPlatform,
)

T = TypeVar("T", bound=SQLModel)

# Outcomes written by the publisher; clients can no longer edit these posts
LOCKED_STATUSES = (PostStatus.published, PostStatus.failed)


# =============================================================================
# Base Repository
# =============================================================================

class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations."""

    model: type[T]
    owner_field: str = "user_id"

    def __init__(self, session: Session):
        self.session = session

    def add(self, obj: T) -> T:
        """Persist a new record and return it refreshed."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def get(self, id: UUID) -> Optional[T]:
        """Get a record by ID."""
        return self.session.get(self.model, id)

    def get_owned(self, id: UUID, user_id: UUID) -> Optional[T]:
        """Get a record by ID only if it belongs to ``user_id``."""
        obj = self.get(id)
        if obj is None or getattr(obj, self.owner_field) != user_id:
            return None
        return obj

    def count(self) -> int:
        statement = select(func.count()).select_from(self.model)
        return self.session.exec(statement).one()

    def delete(self, obj: T) -> None:
        self.session.delete(obj)
        self.session.commit()


# =============================================================================
# User Repository
# =============================================================================

class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User
    owner_field = "id"

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def get_by_username(self, username: str) -> Optional[User]:
        statement = select(User).where(User.username == username)
        return self.session.exec(statement).first()

    def find_conflict(self, username: str, email: str) -> Optional[User]:
        """Return any user already holding this username or email."""
        statement = select(User).where(
            (User.username == username) | (User.email == email)
        )
        return self.session.exec(statement).first()


# =============================================================================
# Social Account Repository
# =============================================================================

class SocialAccountRepository(BaseRepository[SocialAccount]):
    """Repository for linked platform accounts."""

    model = SocialAccount

    def list_by_user(self, user_id: UUID) -> list[SocialAccount]:
        statement = (
            select(SocialAccount)
            .where(SocialAccount.user_id == user_id)
            .order_by(SocialAccount.created_at, SocialAccount.id)
        )
        return list(self.session.exec(statement).all())

    def find_by_platform_id(
        self, platform: SocialPlatform, platform_id: str
    ) -> Optional[SocialAccount]:
        """Find the active account whose page or account ID matches.

        Used to route inbound webhook messages to the owning user.
        """
        statement = select(SocialAccount).where(
            SocialAccount.platform == platform,
            SocialAccount.is_active == True,  # noqa: E712
            (SocialAccount.page_id == platform_id)
            | (SocialAccount.account_id == platform_id),
        )
        return self.session.exec(statement).first()


# =============================================================================
# Post Repository
# =============================================================================

class PostRepository(BaseRepository[Post]):
    """Repository for Post operations."""

    model = Post

    def list_by_user(self, user_id: UUID) -> list[Post]:
        """List a user's posts, soonest first.

        Ties are broken by creation time and ID so repeated reads return
        the same order.
        """
        statement = (
            select(Post)
            .where(Post.user_id == user_id)
            .order_by(Post.scheduled_for, Post.created_at, Post.id)
        )
        return list(self.session.exec(statement).all())

    def compare_and_set(
        self, post_id: UUID, expected_version: int, values: dict[str, Any]
    ) -> bool:
        """Write ``values`` only if the row is unchanged and still editable.

        Returns True if the row was updated. The version is bumped on
        success so a concurrent writer holding the old version misses.
        """
        statement = (
            update(Post)
            .where(
                Post.id == post_id,
                Post.version == expected_version,
                Post.status.notin_(LOCKED_STATUSES),
            )
            .values(
                **values,
                version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def delete_if_unchanged(self, post_id: UUID, expected_version: int) -> bool:
        """Delete the row only if it is unchanged and not published."""
        statement = (
            delete(Post)
            .where(
                Post.id == post_id,
                Post.version == expected_version,
                Post.status != PostStatus.published,
            )
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def reload(self, post: Post) -> Optional[Post]:
        """Re-read a post from the database, discarding cached state."""
        self.session.expire(post)
        return self.session.get(Post, post.id)


# =============================================================================
# Conversation Repository
# =============================================================================

class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversations and their messages."""

    model = Conversation
    owner_field = "owner_user_id"

    def list_by_user(self, user_id: UUID) -> list[Conversation]:
        """List a user's conversations, most recently updated first."""
        statement = (
            select(Conversation)
            .where(Conversation.owner_user_id == user_id)
            .order_by(Conversation.updated_at.desc(), Conversation.id)
        )
        return list(self.session.exec(statement).all())

    def find(
        self, owner_user_id: UUID, external_user_id: str, platform: SocialPlatform
    ) -> Optional[Conversation]:
        statement = select(Conversation).where(
            Conversation.owner_user_id == owner_user_id,
            Conversation.external_user_id == external_user_id,
            Conversation.platform == platform,
        )
        return self.session.exec(statement).first()

    def list_messages(
        self, conversation_id: UUID, limit: Optional[int] = None
    ) -> list[ConversationMessage]:
        """Messages in append order; with ``limit``, only the last N."""
        statement = select(ConversationMessage).where(
            ConversationMessage.conversation_id == conversation_id
        )
        if limit is None:
            statement = statement.order_by(ConversationMessage.position)
            return list(self.session.exec(statement).all())

        statement = statement.order_by(ConversationMessage.position.desc()).limit(limit)
        return list(reversed(self.session.exec(statement).all()))

    def next_position(self, conversation_id: UUID) -> int:
        statement = select(func.max(ConversationMessage.position)).where(
            ConversationMessage.conversation_id == conversation_id
        )
        current = self.session.exec(statement).one()
        return 0 if current is None else current + 1
