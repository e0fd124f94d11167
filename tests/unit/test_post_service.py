"""Tests for the post store: validation, normalization, immutability and
compare-and-set writes."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, select

from api.exceptions import ConflictError, ImmutableError, NotFoundError, ValidationError
from api.services.post_service import (
    PostService,
    normalize_hashtags,
    normalize_media_urls,
    snapshots_from_platforms,
)
from postboard.content.repository import PostRepository
from postboard.db.models import MediaType, Post, PostStatus
from tests.db_utils import make_post


def draft(**overrides):
    data = {
        "title": "Launch",
        "content": "Hello world",
        "media_type": "text",
        "scheduled_for": datetime.utcnow() + timedelta(hours=1),
        "selected_accounts": [{"id": "fb1", "platform": "Facebook", "name": "Page 1"}],
    }
    data.update(overrides)
    return data


def post_count(session) -> int:
    return len(session.exec(select(Post)).all())


class TestNormalization:
    def test_hashtags_from_comma_string(self):
        assert normalize_hashtags(" #a, #b ,, #a,#c ") == ["#a", "#b", "#c"]

    def test_hashtags_from_list(self):
        assert normalize_hashtags(["x", " y ", "", "x", "  "]) == ["x", "y"]

    def test_hashtags_none(self):
        assert normalize_hashtags(None) == []

    def test_text_posts_have_no_media(self):
        assert normalize_media_urls(MediaType.text, ["http://a/1.png"]) == []

    def test_blank_media_urls_dropped(self):
        assert normalize_media_urls(MediaType.image, ["http://a/1.png", "", "  ", None]) == [
            "http://a/1.png"
        ]

    def test_snapshots_from_platform_names(self):
        assert snapshots_from_platforms(["facebook", "Instagram", "facebook"]) == [
            {"id": "fb1", "platform": "facebook", "name": "Facebook Page", "type": "page"},
            {"id": "ig1", "platform": "instagram", "name": "Instagram Page", "type": "page"},
            {"id": "fb2", "platform": "facebook", "name": "Facebook Page", "type": "page"},
        ]


class TestCreatePost:
    def test_create_sets_scheduled(self, test_session, admin_user):
        post = PostService(test_session).create_post(admin_user.id, draft(hashtags="#a,#b"))
        assert post.status == PostStatus.scheduled
        assert post.hashtags == ["#a", "#b"]
        assert post.selected_accounts == [
            {"id": "fb1", "platform": "Facebook", "name": "Page 1", "type": "page"}
        ]
        assert post.version == 1

    def test_text_post_ignores_media_urls(self, test_session, admin_user):
        post = PostService(test_session).create_post(
            admin_user.id, draft(media_urls=["http://x/1.png"])
        )
        assert post.media_urls == []

    def test_image_post_keeps_media_urls(self, test_session, admin_user):
        post = PostService(test_session).create_post(
            admin_user.id, draft(media_type="image", media_urls=["http://x/1.png", ""])
        )
        assert post.media_type == MediaType.image
        assert post.media_urls == ["http://x/1.png"]

    @pytest.mark.parametrize("field", ["title", "content", "media_type", "scheduled_for"])
    def test_missing_required_field(self, test_session, admin_user, field):
        with pytest.raises(ValidationError):
            PostService(test_session).create_post(admin_user.id, draft(**{field: None}))
        assert post_count(test_session) == 0

    def test_blank_title_is_missing(self, test_session, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            PostService(test_session).create_post(admin_user.id, draft(title="   "))
        assert exc_info.value.details["missing"] == ["title"]

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(minutes=-5), timedelta(days=-3)])
    def test_scheduled_for_must_be_future(self, test_session, admin_user, offset):
        with pytest.raises(ValidationError):
            PostService(test_session).create_post(
                admin_user.id, draft(scheduled_for=datetime.utcnow() + offset)
            )
        assert post_count(test_session) == 0

    def test_aware_scheduled_for_is_stored_as_utc(self, test_session, admin_user):
        local = datetime.now(timezone(timedelta(hours=5))) + timedelta(hours=2)
        post = PostService(test_session).create_post(admin_user.id, draft(scheduled_for=local))
        assert post.scheduled_for.tzinfo is None
        assert post.scheduled_for == local.astimezone(timezone.utc).replace(tzinfo=None)

    def test_requires_an_account(self, test_session, admin_user):
        with pytest.raises(ValidationError):
            PostService(test_session).create_post(admin_user.id, draft(selected_accounts=[]))
        assert post_count(test_session) == 0

    def test_invalid_media_type(self, test_session, admin_user):
        with pytest.raises(ValidationError):
            PostService(test_session).create_post(admin_user.id, draft(media_type="podcast"))

    def test_legacy_platforms_list(self, test_session, admin_user):
        post = PostService(test_session).create_post(
            admin_user.id, draft(selected_accounts=None, platforms=["tiktok"])
        )
        assert post.selected_accounts == [
            {"id": "tt1", "platform": "tiktok", "name": "Tiktok Page", "type": "page"}
        ]


class TestReads:
    def test_list_is_ordered_by_schedule(self, test_session, admin_user, other_user):
        later = make_post(test_session, admin_user, title="later", hours_ahead=5)
        sooner = make_post(test_session, admin_user, title="sooner", hours_ahead=1)
        make_post(test_session, other_user, title="theirs", hours_ahead=2)

        posts = PostService(test_session).list_posts(admin_user.id)
        assert [p.id for p in posts] == [sooner.id, later.id]

    def test_foreign_post_is_not_found(self, test_session, admin_user, other_user):
        post = make_post(test_session, other_user)
        with pytest.raises(NotFoundError):
            PostService(test_session).get_post(post.id, admin_user.id)


class TestUpdatePost:
    def test_partial_update(self, test_session, admin_user):
        post = make_post(test_session, admin_user)
        updated = PostService(test_session).update_post(
            post.id, admin_user.id, {"content": "Edited", "hashtags": ["a", "a", "b"]}
        )
        assert updated.content == "Edited"
        assert updated.title == "Launch"
        assert updated.hashtags == ["a", "b"]
        assert updated.version == 2

    def test_switching_to_text_clears_media(self, test_session, admin_user):
        service = PostService(test_session)
        post = service.create_post(
            admin_user.id, draft(media_type="image", media_urls=["http://x/1.png"])
        )
        updated = service.update_post(post.id, admin_user.id, {"media_type": "text"})
        assert updated.media_urls == []

    def test_rejects_past_schedule(self, test_session, admin_user):
        post = make_post(test_session, admin_user)
        with pytest.raises(ValidationError):
            PostService(test_session).update_post(
                post.id, admin_user.id, {"scheduled_for": datetime.utcnow() - timedelta(hours=1)}
            )

    @pytest.mark.parametrize("status", ["published", "failed", "bogus"])
    def test_client_cannot_set_publisher_statuses(self, test_session, admin_user, status):
        post = make_post(test_session, admin_user)
        with pytest.raises(ValidationError):
            PostService(test_session).update_post(post.id, admin_user.id, {"status": status})

    def test_can_move_to_draft(self, test_session, admin_user):
        post = make_post(test_session, admin_user)
        updated = PostService(test_session).update_post(post.id, admin_user.id, {"status": "draft"})
        assert updated.status == PostStatus.draft

    def test_published_post_is_immutable(self, test_session, admin_user):
        post = make_post(test_session, admin_user, status=PostStatus.published)
        with pytest.raises(ImmutableError):
            PostService(test_session).update_post(post.id, admin_user.id, {"title": "New"})

        test_session.expire_all()
        stored = test_session.get(Post, post.id)
        assert stored.title == "Launch"
        assert stored.version == 1

    def test_failed_post_cannot_be_rescheduled(self, test_session, admin_user):
        post = make_post(test_session, admin_user, status=PostStatus.failed)
        with pytest.raises(ImmutableError) as exc_info:
            PostService(test_session).update_post(
                post.id, admin_user.id, {"title": "edited", "status": "scheduled"}
            )
        assert exc_info.value.message == "Failed posts cannot be modified"

        test_session.expire_all()
        stored = test_session.get(Post, post.id)
        assert stored.status == PostStatus.failed
        assert stored.title == "Launch"

    def test_foreign_post_is_not_found(self, test_session, admin_user, other_user):
        post = make_post(test_session, other_user)
        with pytest.raises(NotFoundError):
            PostService(test_session).update_post(post.id, admin_user.id, {"title": "Mine"})


class TestDeletePost:
    def test_delete(self, test_session, admin_user):
        post = make_post(test_session, admin_user)
        PostService(test_session).delete_post(post.id, admin_user.id)
        assert post_count(test_session) == 0

    def test_published_post_cannot_be_deleted(self, test_session, admin_user):
        post = make_post(test_session, admin_user, status=PostStatus.published)
        with pytest.raises(ImmutableError):
            PostService(test_session).delete_post(post.id, admin_user.id)
        assert post_count(test_session) == 1

    def test_foreign_post_is_not_found(self, test_session, admin_user, other_user):
        post = make_post(test_session, other_user)
        with pytest.raises(NotFoundError):
            PostService(test_session).delete_post(post.id, admin_user.id)
        assert post_count(test_session) == 1


class TestCompareAndSet:
    def test_stale_version_misses(self, test_session, admin_user):
        post = make_post(test_session, admin_user)
        repo = PostRepository(test_session)
        assert repo.compare_and_set(post.id, 1, {"title": "first"}) is True
        assert repo.compare_and_set(post.id, 1, {"title": "second"}) is False

        test_session.expire_all()
        assert test_session.get(Post, post.id).title == "first"

    def test_published_row_never_matches(self, test_session, admin_user):
        post = make_post(test_session, admin_user, status=PostStatus.published)
        repo = PostRepository(test_session)
        assert repo.compare_and_set(post.id, post.version, {"title": "x"}) is False
        assert repo.delete_if_unchanged(post.id, post.version) is False

    def test_failed_row_never_takes_a_patch(self, test_session, admin_user):
        post = make_post(test_session, admin_user, status=PostStatus.failed)
        repo = PostRepository(test_session)
        assert repo.compare_and_set(post.id, post.version, {"status": PostStatus.scheduled}) is False

    def test_interleaved_updates_both_land(self, test_engine, test_session, admin_user, monkeypatch):
        """A writer that loses the race re-reads and re-applies its patch."""
        post = make_post(test_session, admin_user)
        original = PostRepository.compare_and_set
        raced = []

        def racing_compare_and_set(self, post_id, expected_version, values):
            if not raced:
                raced.append(True)
                # Another request commits between our read and our write
                with Session(test_engine) as other:
                    PostService(other).update_post(post_id, admin_user.id, {"title": "Other title"})
            return original(self, post_id, expected_version, values)

        monkeypatch.setattr(PostRepository, "compare_and_set", racing_compare_and_set)

        updated = PostService(test_session).update_post(
            post.id, admin_user.id, {"content": "My content"}
        )
        assert updated.title == "Other title"
        assert updated.content == "My content"
        assert updated.version == 3

    def test_publish_during_update_wins(self, test_engine, test_session, admin_user, monkeypatch):
        post = make_post(test_session, admin_user)
        original = PostRepository.compare_and_set

        def publish_first(self, post_id, expected_version, values):
            monkeypatch.setattr(PostRepository, "compare_and_set", original)
            with Session(test_engine) as other:
                row = other.get(Post, post_id)
                row.status = PostStatus.published
                row.version += 1
                other.add(row)
                other.commit()
            return original(self, post_id, expected_version, values)

        monkeypatch.setattr(PostRepository, "compare_and_set", publish_first)

        with pytest.raises(ImmutableError):
            PostService(test_session).update_post(post.id, admin_user.id, {"title": "Too late"})

    def test_gives_up_after_bounded_retries(self, test_session, admin_user, monkeypatch):
        post = make_post(test_session, admin_user)
        monkeypatch.setattr(PostRepository, "compare_and_set", lambda *args: False)
        with pytest.raises(ConflictError):
            PostService(test_session).update_post(post.id, admin_user.id, {"title": "x"})
