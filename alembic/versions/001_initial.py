"""Initial catalog and search schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Users (producers and artists)
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="both"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"])

    # Beat catalog
    op.create_table(
        "beats",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("producer_id", sa.String(36), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("bpm", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(10), nullable=False),
        sa.Column("genre", sa.String(50), nullable=False),
        sa.Column("mood", sa.String(50), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("play_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_exclusive", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("price >= 0", name="ck_beats_price_non_negative"),
        sa.CheckConstraint("bpm > 0", name="ck_beats_bpm_positive"),
        sa.ForeignKeyConstraint(["producer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_beats_producer_id"), "beats", ["producer_id"])
    op.create_index(op.f("ix_beats_genre"), "beats", ["genre"])
    op.create_index(op.f("ix_beats_mood"), "beats", ["mood"])
    op.create_index(op.f("ix_beats_play_count"), "beats", ["play_count"])
    op.create_index(op.f("ix_beats_is_free"), "beats", ["is_free"])
    op.create_index(op.f("ix_beats_is_active"), "beats", ["is_active"])
    op.create_index(op.f("ix_beats_created_at"), "beats", ["created_at"])
    op.create_index("ix_beats_active_genre", "beats", ["is_active", "genre"])
    op.create_index("ix_beats_active_created", "beats", ["is_active", "created_at"])
    op.create_index("ix_beats_producer_active", "beats", ["producer_id", "is_active"])

    op.create_table(
        "beat_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("beat_id", sa.String(36), nullable=False),
        sa.Column("tag", sa.String(50), nullable=False),
        sa.ForeignKeyConstraint(["beat_id"], ["beats.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("beat_id", "tag", name="uq_beat_tags_beat_tag"),
    )
    op.create_index(op.f("ix_beat_tags_beat_id"), "beat_tags", ["beat_id"])
    op.create_index(op.f("ix_beat_tags_tag"), "beat_tags", ["tag"])

    # Past queries for autocomplete / related searches
    op.create_table(
        "search_suggestions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("query", sa.String(255), nullable=False),
        sa.Column("category", sa.String(20), nullable=False, server_default="beat"),
        sa.Column("popularity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("result_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_used", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("query", "category", name="uq_search_suggestions_query_category"),
    )
    op.create_index(op.f("ix_search_suggestions_query"), "search_suggestions", ["query"])
    op.create_index(op.f("ix_search_suggestions_category"), "search_suggestions", ["category"])
    op.create_index(
        op.f("ix_search_suggestions_popularity"), "search_suggestions", ["popularity"]
    )

    op.create_table(
        "search_analytics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("query", sa.String(255), nullable=False, server_default=""),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("result_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("search_type", sa.String(10), nullable=False),
        sa.Column("filters_json", sa.Text(), nullable=False),
        sa.Column("response_time_ms", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_search_analytics_created_at"), "search_analytics", ["created_at"])
    op.create_index(op.f("ix_search_analytics_user_id"), "search_analytics", ["user_id"])

    # Read-through result cache
    op.create_table(
        "search_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("cache_key", sa.String(255), nullable=False),
        sa.Column("results_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_search_cache_cache_key"), "search_cache", ["cache_key"], unique=True)
    op.create_index(op.f("ix_search_cache_expires_at"), "search_cache", ["expires_at"])


def downgrade() -> None:
    op.drop_table("search_cache")
    op.drop_table("search_analytics")
    op.drop_table("search_suggestions")
    op.drop_table("beat_tags")
    op.drop_table("beats")
    op.drop_table("users")
