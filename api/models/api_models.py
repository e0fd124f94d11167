"""Pydantic models for API requests and responses.

The dashboard client speaks camelCase; every model here serializes with
camelCase aliases and also accepts snake_case field names on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from postboard.db.models import (
    ConversationStatus,
    MediaType,
    MessageDirection,
    PostStatus,
    SocialPlatform,
    UserRole,
)


def _iso_utc(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


# Timestamps are stored as naive UTC and sent with an explicit Z suffix
UtcDatetime = Annotated[datetime, PlainSerializer(_iso_utc, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Auth
# =============================================================================


class LoginRequest(CamelModel):
    email: str
    password: str


class RegisterRequest(CamelModel):
    """Registration payload. Role defaults to editor."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class PasswordChangeRequest(CamelModel):
    current_password: str
    new_password: str


class UserResponse(CamelModel):
    """Public view of a user. The password digest is never included."""

    id: UUID
    username: str
    email: str
    role: UserRole
    is_active: bool
    created_at: UtcDatetime


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    user: UserResponse


# =============================================================================
# Posts
# =============================================================================


class SelectedAccount(CamelModel):
    """Snapshot of a target account embedded in a post."""

    id: str
    platform: str
    name: str = ""
    type: str = "page"


class PostCreateRequest(CamelModel):
    """New post payload.

    Required fields are optional here so that missing ones are reported by
    the post service with a single message naming all of them.
    ``hashtags`` accepts a comma-separated string or a list. ``platforms``
    is the older dashboard shape, a list of platform names used when
    ``selectedAccounts`` is absent.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    hashtags: Union[str, list[str], None] = None
    cta: Optional[str] = None
    media_type: Optional[str] = None
    media_urls: Optional[list[Optional[str]]] = None
    scheduled_for: Optional[datetime] = None
    selected_accounts: Optional[list[SelectedAccount]] = None
    platforms: Optional[list[str]] = None


class PostUpdateRequest(CamelModel):
    """Partial post patch. Only fields present in the body are applied."""

    title: Optional[str] = None
    content: Optional[str] = None
    hashtags: Union[str, list[str], None] = None
    cta: Optional[str] = None
    media_type: Optional[str] = None
    media_urls: Optional[list[Optional[str]]] = None
    scheduled_for: Optional[datetime] = None
    selected_accounts: Optional[list[SelectedAccount]] = None
    status: Optional[str] = None


class PostResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    content: str
    hashtags: list[str]
    cta: str
    media_type: MediaType
    media_urls: list[str]
    scheduled_for: UtcDatetime
    status: PostStatus
    selected_accounts: list[SelectedAccount]
    published_at: Optional[UtcDatetime] = None
    error_message: Optional[str] = None
    created_at: UtcDatetime
    updated_at: Optional[UtcDatetime] = None


class PostEnvelope(CamelModel):
    post: PostResponse


class PostListResponse(CamelModel):
    posts: list[PostResponse]


# =============================================================================
# Social accounts
# =============================================================================


class AccountCreateRequest(CamelModel):
    platform: str
    account_name: str
    account_id: str
    access_token: Optional[str] = None
    page_id: Optional[str] = None
    is_active: bool = True


class AccountUpdateRequest(CamelModel):
    account_name: Optional[str] = None
    is_active: Optional[bool] = None


class AccountResponse(CamelModel):
    """Linked account. The access token itself is never returned."""

    id: UUID
    platform: SocialPlatform
    account_name: str
    account_id: str
    page_id: Optional[str] = None
    is_active: bool
    has_access_token: bool = False
    created_at: UtcDatetime

    @classmethod
    def from_account(cls, account: Any) -> "AccountResponse":
        response = cls.model_validate(account)
        response.has_access_token = bool(account.access_token)
        return response


class AccountEnvelope(CamelModel):
    account: AccountResponse


class AccountListResponse(CamelModel):
    accounts: list[AccountResponse]


# =============================================================================
# Conversations
# =============================================================================


class MessageResponse(CamelModel):
    id: UUID
    text: str
    direction: MessageDirection
    external_message_id: Optional[str] = None
    timestamp: UtcDatetime = Field(validation_alias="sent_at")


class ConversationResponse(CamelModel):
    id: UUID
    external_user_id: str
    platform: SocialPlatform
    status: ConversationStatus
    messages: list[MessageResponse] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: Optional[UtcDatetime] = None


class ConversationEnvelope(CamelModel):
    conversation: ConversationResponse


class ConversationListResponse(CamelModel):
    conversations: list[ConversationResponse]


class MessageCreateRequest(CamelModel):
    text: str


class ConversationStatusRequest(CamelModel):
    status: str


# =============================================================================
# Uploads & health
# =============================================================================


class UploadResponse(BaseModel):
    """Stored media file. Field names match the dashboard's upload widget."""

    fileName: str
    fileUrl: str
    fileSize: int
    mimetype: str


class HealthResponse(BaseModel):
    status: str
    users: int
    posts: int
    accounts: int
    conversations: int
    timestamp: str
