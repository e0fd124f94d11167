"""Post store: authoring, scheduling and editing of posts.

Every write goes through a compare-and-set on ``Post.version`` so a
published post can never be modified, even by a request that read it
while it was still scheduled. A write that loses a race re-reads the row
and re-applies its patch.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union
from uuid import UUID

from sqlmodel import Session

from api.exceptions import ConflictError, ImmutableError, NotFoundError, ValidationError
from postboard.content.repository import LOCKED_STATUSES, PostRepository
from postboard.db.models import MediaType, Post, PostStatus
from postboard.logging import get_logger

logger = get_logger(__name__)

# Statuses a client may set directly; published/failed belong to the publisher
CLIENT_STATUSES = {PostStatus.draft, PostStatus.scheduled}

# Legacy platform names map to snapshot ids like fb1/ig1/tt1
PLATFORM_ID_PREFIXES = {
    "facebook": "fb",
    "instagram": "ig",
    "tiktok": "tt",
    "whatsapp": "wa",
}


def utcnow() -> datetime:
    return datetime.utcnow()


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def normalize_hashtags(value: Union[str, Iterable[str], None]) -> list[str]:
    """Split, trim and de-duplicate hashtags, keeping input order.

    Accepts a comma-separated string or a sequence of strings.
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value

    result: list[str] = []
    seen = set()
    for item in items:
        if item is None:
            continue
        tag = str(item).strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def normalize_media_urls(media_type: MediaType, urls: Optional[Iterable[Optional[str]]]) -> list[str]:
    """Text posts carry no media; otherwise blank entries are dropped."""
    if media_type == MediaType.text or not urls:
        return []
    return [url.strip() for url in urls if url and url.strip()]


def parse_media_type(value: Any) -> MediaType:
    try:
        return MediaType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid mediaType: {value}",
            details={"field": "mediaType", "allowed": [m.value for m in MediaType]},
        )


def require_future(value: datetime, now: Optional[datetime] = None) -> datetime:
    scheduled = to_naive_utc(value)
    if scheduled <= (now or utcnow()):
        raise ValidationError(
            "Scheduled time must be in the future",
            details={"field": "scheduledFor"},
        )
    return scheduled


def snapshot_accounts(selected: Optional[Iterable[Any]]) -> list[dict]:
    """Copy selected accounts into plain ``{id, platform, name, type}`` dicts."""
    snapshots = []
    for account in selected or []:
        data = account if isinstance(account, dict) else account.model_dump()
        account_id = str(data.get("id") or "").strip()
        platform = str(data.get("platform") or "").strip()
        if not account_id or not platform:
            raise ValidationError(
                "Each selected account needs an id and a platform",
                details={"field": "selectedAccounts"},
            )
        snapshots.append(
            {
                "id": account_id,
                "platform": platform,
                "name": str(data.get("name") or ""),
                "type": str(data.get("type") or "page"),
            }
        )
    return snapshots


def snapshots_from_platforms(platforms: Optional[Iterable[str]]) -> list[dict]:
    """Build account snapshots from the older list-of-platform-names shape."""
    snapshots = []
    counters: dict[str, int] = {}
    for name in platforms or []:
        key = str(name).strip().lower()
        if not key:
            continue
        prefix = PLATFORM_ID_PREFIXES.get(key, key[:2])
        counters[prefix] = counters.get(prefix, 0) + 1
        snapshots.append(
            {
                "id": f"{prefix}{counters[prefix]}",
                "platform": key,
                "name": f"{key.capitalize()} Page",
                "type": "page",
            }
        )
    return snapshots


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PostService:
    """Service for a user's posts.

    All operations are scoped by ``user_id``; a post owned by someone else
    is reported as not found.
    """

    MAX_WRITE_ATTEMPTS = 5

    def __init__(self, session: Session):
        self._session = session
        self._posts = PostRepository(session)

    # =========================================================================
    # Reads
    # =========================================================================

    def list_posts(self, user_id: UUID) -> list[Post]:
        return self._posts.list_by_user(user_id)

    def get_post(self, post_id: UUID, user_id: UUID) -> Post:
        post = self._posts.get_owned(post_id, user_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    # =========================================================================
    # Writes
    # =========================================================================

    def create_post(self, user_id: UUID, draft: dict[str, Any]) -> Post:
        """Validate and persist a new scheduled post.

        Args:
            user_id: Owner of the post
            draft: Snake-case fields from the request body

        Raises:
            ValidationError: Missing fields, bad mediaType, non-future
                scheduledFor, or no selected account
        """
        required = (
            ("title", "title"),
            ("content", "content"),
            ("media_type", "mediaType"),
            ("scheduled_for", "scheduledFor"),
        )
        missing = [label for key, label in required if _is_blank(draft.get(key))]
        if missing:
            raise ValidationError(
                "Missing required fields: " + ", ".join(missing),
                details={"missing": missing},
            )

        media_type = parse_media_type(draft["media_type"])
        scheduled_for = require_future(draft["scheduled_for"])

        if draft.get("selected_accounts"):
            accounts = snapshot_accounts(draft["selected_accounts"])
        else:
            accounts = snapshots_from_platforms(draft.get("platforms"))
        if not accounts:
            raise ValidationError(
                "At least one account must be selected",
                details={"field": "selectedAccounts"},
            )

        post = Post(
            user_id=user_id,
            title=draft["title"].strip(),
            content=draft["content"],
            hashtags=normalize_hashtags(draft.get("hashtags")),
            cta=draft.get("cta") or "",
            media_type=media_type,
            media_urls=normalize_media_urls(media_type, draft.get("media_urls")),
            scheduled_for=scheduled_for,
            status=PostStatus.scheduled,
            selected_accounts=accounts,
        )
        post = self._posts.add(post)
        logger.info(
            "post_created",
            post_id=str(post.id),
            user_id=str(user_id),
            media_type=media_type.value,
            accounts=len(accounts),
        )
        return post

    def update_post(self, post_id: UUID, user_id: UUID, patch: dict[str, Any]) -> Post:
        """Apply a partial patch to a draft or scheduled post.

        Raises:
            NotFoundError: Absent or owned by another user
            ImmutableError: The post is published or failed
            ValidationError: The patch breaks a field rule
            ConflictError: The write kept losing to concurrent writers
        """
        post = self.get_post(post_id, user_id)

        for attempt in range(self.MAX_WRITE_ATTEMPTS):
            if post.status in LOCKED_STATUSES:
                raise ImmutableError(f"{post.status.value.capitalize()} posts cannot be modified")

            values = self._patch_values(post, patch)
            if not values:
                return post

            if self._posts.compare_and_set(post.id, post.version, values):
                logger.info(
                    "post_updated",
                    post_id=str(post.id),
                    fields=sorted(values),
                    attempt=attempt + 1,
                )
                return self._reload_owned(post, user_id)

            logger.debug("post_update_retry", post_id=str(post.id), attempt=attempt + 1)
            post = self._reload_owned(post, user_id)

        raise ConflictError("Post was modified concurrently, please retry")

    def delete_post(self, post_id: UUID, user_id: UUID) -> None:
        """Delete a draft or scheduled post.

        Raises:
            NotFoundError: Absent or owned by another user
            ImmutableError: The post is published
        """
        post = self.get_post(post_id, user_id)

        for _ in range(self.MAX_WRITE_ATTEMPTS):
            if post.status == PostStatus.published:
                raise ImmutableError()
            if self._posts.delete_if_unchanged(post.id, post.version):
                logger.info("post_deleted", post_id=str(post_id), user_id=str(user_id))
                return
            post = self._reload_owned(post, user_id)

        raise ConflictError("Post was modified concurrently, please retry")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _reload_owned(self, post: Post, user_id: UUID) -> Post:
        fresh = self._posts.reload(post)
        if fresh is None or fresh.user_id != user_id:
            raise NotFoundError("Post not found")
        return fresh

    def _patch_values(self, post: Post, patch: dict[str, Any]) -> dict[str, Any]:
        """Turn a request patch into validated column values for ``post``."""
        values: dict[str, Any] = {}

        for field in ("title", "content"):
            if field in patch:
                if _is_blank(patch[field]):
                    raise ValidationError(f"{field} cannot be empty", details={"field": field})
                values[field] = patch[field].strip() if field == "title" else patch[field]

        if "cta" in patch:
            values["cta"] = patch["cta"] or ""

        if "hashtags" in patch:
            values["hashtags"] = normalize_hashtags(patch["hashtags"])

        media_type = post.media_type
        if "media_type" in patch:
            if _is_blank(patch["media_type"]):
                raise ValidationError("mediaType cannot be empty", details={"field": "mediaType"})
            media_type = parse_media_type(patch["media_type"])
            values["media_type"] = media_type
        if "media_urls" in patch or media_type == MediaType.text:
            urls = patch["media_urls"] if "media_urls" in patch else post.media_urls
            media_urls = normalize_media_urls(media_type, urls)
            if media_urls != post.media_urls or "media_urls" in patch:
                values["media_urls"] = media_urls

        if "scheduled_for" in patch:
            if patch["scheduled_for"] is None:
                raise ValidationError(
                    "scheduledFor cannot be empty", details={"field": "scheduledFor"}
                )
            values["scheduled_for"] = require_future(patch["scheduled_for"])

        if "selected_accounts" in patch:
            accounts = snapshot_accounts(patch["selected_accounts"])
            if not accounts:
                raise ValidationError(
                    "At least one account must be selected",
                    details={"field": "selectedAccounts"},
                )
            values["selected_accounts"] = accounts

        if "status" in patch and patch["status"] is not None:
            try:
                status = PostStatus(str(patch["status"]).strip().lower())
            except ValueError:
                status = None
            if status not in CLIENT_STATUSES:
                raise ValidationError(
                    "Status can only be set to draft or scheduled",
                    details={"field": "status"},
                )
            values["status"] = status

        return values
