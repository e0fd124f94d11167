"""Initial tables for users, social accounts, posts and conversations.

Revision ID: initial_tables
Revises:
Create Date: 2026-10-17

Adds tables for:
- users: dashboard identities with bcrypt digests
- social_accounts: linked platform accounts per user
- posts: scheduled posts with embedded account snapshots
- conversations / conversation_messages: append-only inbox threads
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "initial_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("username", sa.String, nullable=False),
        sa.Column("email", sa.String, nullable=False),
        sa.Column("password_hash", sa.String, nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "editor", "viewer", name="userrole"),
            nullable=False,
            server_default="editor",
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    platform = sa.Enum(
        "facebook", "instagram", "tiktok", "whatsapp", name="socialplatform"
    )

    op.create_table(
        "social_accounts",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("platform", platform, nullable=False),
        sa.Column("account_name", sa.String, nullable=False),
        sa.Column("account_id", sa.String, nullable=False),
        sa.Column("access_token", sa.String),
        sa.Column("page_id", sa.String),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_social_accounts_id", "social_accounts", ["id"])
    op.create_index("ix_social_accounts_user_id", "social_accounts", ["user_id"])
    op.create_index("ix_social_accounts_account_id", "social_accounts", ["account_id"])
    op.create_index("ix_social_accounts_page_id", "social_accounts", ["page_id"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("content", sa.String, nullable=False),
        sa.Column("hashtags", sa.JSON, nullable=False),
        sa.Column("cta", sa.String, nullable=False, server_default=""),
        sa.Column(
            "media_type",
            sa.Enum("text", "image", "video", "carousel", "reel", name="mediatype"),
            nullable=False,
        ),
        sa.Column("media_urls", sa.JSON, nullable=False),
        sa.Column("scheduled_for", sa.DateTime, nullable=False),
        sa.Column(
            "status",
            sa.Enum("draft", "scheduled", "published", "failed", name="poststatus"),
            nullable=False,
            server_default="scheduled",
        ),
        sa.Column("selected_accounts", sa.JSON, nullable=False),
        sa.Column("published_at", sa.DateTime),
        sa.Column("error_message", sa.String),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_posts_id", "posts", ["id"])
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_scheduled_for", "posts", ["scheduled_for"])

    op.create_table(
        "conversations",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "owner_user_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("external_user_id", sa.String, nullable=False),
        sa.Column("platform", platform, nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "resolved", "archived", name="conversationstatus"),
            nullable=False,
            server_default="active",
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "owner_user_id",
            "external_user_id",
            "platform",
            name="uq_conversations_owner_participant_platform",
        ),
    )
    op.create_index("ix_conversations_id", "conversations", ["id"])
    op.create_index("ix_conversations_owner_user_id", "conversations", ["owner_user_id"])
    op.create_index(
        "ix_conversations_external_user_id", "conversations", ["external_user_id"]
    )

    op.create_table(
        "conversation_messages",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "conversation_id",
            sa.Uuid,
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("text", sa.String, nullable=False),
        sa.Column(
            "direction",
            sa.Enum("received", "sent", name="messagedirection"),
            nullable=False,
        ),
        sa.Column("external_message_id", sa.String),
        sa.Column("sent_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint(
            "conversation_id", "position", name="uq_conversation_messages_position"
        ),
    )
    op.create_index("ix_conversation_messages_id", "conversation_messages", ["id"])
    op.create_index(
        "ix_conversation_messages_conversation_id",
        "conversation_messages",
        ["conversation_id"],
    )


def downgrade() -> None:
    op.drop_table("conversation_messages")
    op.drop_table("conversations")
    op.drop_table("posts")
    op.drop_table("social_accounts")
    op.drop_table("users")
    for enum_name in (
        "messagedirection",
        "conversationstatus",
        "poststatus",
        "mediatype",
        "socialplatform",
        "userrole",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
