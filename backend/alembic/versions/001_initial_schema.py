"""Initial schema - 10 tables + indexes.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    # --- ENUM types ---
    user_role = sa.Enum("admin", "user", name="user_role")
    skill_level = sa.Enum("Beginner", "Intermediate", "Expert", name="skill_level")
    post_status = sa.Enum("draft", "published", "archived", name="post_status")
    comment_status = sa.Enum("pending", "approved", "rejected", name="comment_status")
    journey_type = sa.Enum("education", "work", "project", "achievement", name="journey_type")

    # --- 1. users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="user"),
        _created_at(),
        _updated_at(),
    )

    # --- 2. projects ---
    op.create_table(
        "projects",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("technologies", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("repo_link", sa.String(500), nullable=True),
        sa.Column("live_link", sa.String(500), nullable=True),
        sa.Column("featured", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("image_public_id", sa.String(255), nullable=True),
        _created_at(),
        _updated_at(),
    )

    # --- 3. skills ---
    op.create_table(
        "skills",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("level", skill_level, nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("icon_url", sa.String(500), nullable=True),
        sa.Column("icon_public_id", sa.String(255), nullable=True),
        _created_at(),
        _updated_at(),
    )

    # --- 4. blog_posts ---
    op.create_table(
        "blog_posts",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("excerpt", sa.Text, nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("featured_image", sa.String(500), nullable=True),
        sa.Column("author", sa.String(255), nullable=True),
        sa.Column("reading_time", sa.Integer, nullable=True),
        sa.Column("tags", JSONB, nullable=True),
        sa.Column("featured", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("status", post_status, nullable=False, server_default="draft"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )

    # --- 5. blog_comments ---
    op.create_table(
        "blog_comments",
        _id(),
        sa.Column("post_id", UUID(as_uuid=True), sa.ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("comment", sa.Text, nullable=False),
        sa.Column("status", comment_status, nullable=False, server_default="pending"),
        _created_at(),
    )

    # --- 6. journey_items ---
    op.create_table(
        "journey_items",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("type", journey_type, nullable=False),
        _created_at(),
        _updated_at(),
    )

    # --- 7. contact_messages ---
    op.create_table(
        "contact_messages",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        _created_at(),
    )

    # --- 8. chat_conversations / chat_stats ---
    op.create_table(
        "chat_conversations",
        _id(),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("user_message", sa.Text, nullable=False),
        sa.Column("bot_response", sa.Text, nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        _created_at(),
    )
    op.create_table(
        "chat_stats",
        _id(),
        sa.Column("date", sa.Date, unique=True, nullable=False),
        sa.Column("total_messages", sa.Integer, nullable=False, server_default="0"),
        sa.Column("unique_sessions", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
    )

    # --- 9. visitor_analytics ---
    op.create_table(
        "visitor_analytics",
        _id(),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("page_url", sa.String(500), nullable=True),
        sa.Column("referrer", sa.String(500), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("device_type", sa.String(50), nullable=True),
        sa.Column("browser", sa.String(100), nullable=True),
        sa.Column("session_id", sa.String(255), nullable=True),
        _created_at(),
    )

    # --- 10. github_stats ---
    op.create_table(
        "github_stats",
        _id(),
        sa.Column("username", sa.String(255), unique=True, nullable=False),
        sa.Column("public_repos", sa.Integer, nullable=False, server_default="0"),
        sa.Column("followers", sa.Integer, nullable=False, server_default="0"),
        sa.Column("following", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_stars", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_forks", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_commits", sa.Integer, nullable=False, server_default="0"),
        sa.Column("languages", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("top_repos", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("recent_activity", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )

    # --- Indexes ---
    op.create_index("ix_blog_posts_slug", "blog_posts", ["slug"])
    op.create_index("ix_blog_posts_category", "blog_posts", ["category"])
    op.create_index("ix_blog_posts_status_published", "blog_posts", ["status", sa.text("published_at DESC")])
    op.create_index("ix_blog_comments_post_id", "blog_comments", ["post_id"])
    op.create_index("ix_chat_conversations_session_id", "chat_conversations", ["session_id"])
    op.create_index("ix_chat_conversations_created_at", "chat_conversations", ["created_at"])
    op.create_index("ix_visitor_analytics_session_id", "visitor_analytics", ["session_id"])
    op.create_index("ix_visitor_analytics_created_at", "visitor_analytics", ["created_at"])


def downgrade() -> None:
    for table in (
        "github_stats",
        "visitor_analytics",
        "chat_stats",
        "chat_conversations",
        "contact_messages",
        "journey_items",
        "blog_comments",
        "blog_posts",
        "skills",
        "projects",
        "users",
    ):
        op.drop_table(table)
    for enum_name in ("journey_type", "comment_status", "post_status", "skill_level", "user_role"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
