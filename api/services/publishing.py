"""Publisher hook for the scheduled -> published/failed transition.

No worker in this service publishes anything. An external job picks due
posts, calls a ``Publisher`` and hands the outcome to
``PublishingService.record_result``, which is the only code path that
moves a post out of ``scheduled``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol
from uuid import UUID

from sqlmodel import Session, select

from api.exceptions import ConflictError, NotFoundError, ValidationError
from postboard.content.repository import PostRepository
from postboard.db.models import Post, PostStatus
from postboard.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PublishResult:
    """Outcome of one publish attempt."""

    success: bool
    error_message: Optional[str] = None
    published_at: Optional[datetime] = None


class Publisher(Protocol):
    """Delivers a post to its target platforms."""

    def publish(self, post: Post) -> PublishResult:
        ...


class PublishingService:
    """Applies publish outcomes to posts."""

    MAX_WRITE_ATTEMPTS = 5

    def __init__(self, session: Session, publisher: Optional[Publisher] = None):
        self._session = session
        self._posts = PostRepository(session)
        self._publisher = publisher

    def due_posts(self, now: Optional[datetime] = None) -> list[Post]:
        """Scheduled posts whose time has come, oldest first."""
        statement = (
            select(Post)
            .where(
                Post.status == PostStatus.scheduled,
                Post.scheduled_for <= (now or datetime.utcnow()),
            )
            .order_by(Post.scheduled_for, Post.id)
        )
        return list(self._session.exec(statement).all())

    def record_result(self, post_id: UUID, result: PublishResult) -> Post:
        """Move a scheduled post to published or failed.

        Raises:
            NotFoundError: No such post
            ValidationError: The post is not in the scheduled state
            ConflictError: The write kept losing to concurrent writers
        """
        post = self._posts.get(post_id)
        if post is None:
            raise NotFoundError("Post not found")

        for _ in range(self.MAX_WRITE_ATTEMPTS):
            if post.status != PostStatus.scheduled:
                raise ValidationError(
                    f"Only scheduled posts can be published (status is {post.status.value})"
                )

            if result.success:
                values = {
                    "status": PostStatus.published,
                    "published_at": result.published_at or datetime.utcnow(),
                    "error_message": None,
                }
            else:
                values = {
                    "status": PostStatus.failed,
                    "error_message": result.error_message or "Publishing failed",
                }

            if self._posts.compare_and_set(post.id, post.version, values):
                fresh = self._posts.reload(post)
                logger.info(
                    "post_publish_recorded",
                    post_id=str(post_id),
                    status=fresh.status.value,
                )
                return fresh

            post = self._posts.reload(post)
            if post is None:
                raise NotFoundError("Post not found")

        raise ConflictError("Post was modified concurrently, please retry")

    def publish(self, post_id: UUID) -> Post:
        """Run the configured publisher for one post and record the outcome."""
        if self._publisher is None:
            raise RuntimeError("No publisher configured")

        post = self._posts.get(post_id)
        if post is None:
            raise NotFoundError("Post not found")

        try:
            result = self._publisher.publish(post)
        except Exception as e:
            logger.warning("publisher_failed", post_id=str(post_id), error=str(e))
            result = PublishResult(success=False, error_message=str(e))
        return self.record_result(post_id, result)
