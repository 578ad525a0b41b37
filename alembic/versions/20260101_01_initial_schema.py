"""
Initial schema: identity, shared lists, personal watchlist/watched state.

- users / magic_links (anonymous-first identity, digest-only sign-in links)
- lists / list_members / list_items (one owner per list via partial unique index)
- watchlists / watched_movies / watched_episodes (presence rows)
- series_cache (per-show episode counts)
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20260101_01_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _media_type(name: str = "media_type") -> sa.Enum:
    return sa.Enum("movie", "tv", name=name, native_enum=False, length=8)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable)


def upgrade() -> None:
    # --- Identity ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("display_name", sa.String(length=120), nullable=True),
        sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("is_anonymous OR email IS NOT NULL", name="ck_users_authenticated_has_email"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "magic_links",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("token_digest", sa.String(length=64), nullable=False),
        _ts("created_at"),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_magic_links"),
        sa.UniqueConstraint("token_digest", name="uq_magic_links_token_digest"),
    )
    op.create_index("ix_magic_links_email_created", "magic_links", ["email", "created_at"])

    # --- Shared lists ---
    op.create_table(
        "lists",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], name="fk_lists_owner_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_lists"),
    )
    op.create_index("ix_lists_owner_id", "lists", ["owner_id"])

    op.create_table(
        "list_members",
        sa.Column("list_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.Enum("owner", "editor", "viewer", name="list_role", native_enum=False, length=16), nullable=False),
        sa.Column("member_name", sa.String(length=120), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["list_id"], ["lists.id"], name="fk_list_members_list_id_lists", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_list_members_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("list_id", "user_id", name="pk_list_members"),
    )
    op.create_index("ix_list_members_user_id", "list_members", ["user_id"])
    op.create_index(
        "uq_list_members_one_owner",
        "list_members",
        ["list_id"],
        unique=True,
        postgresql_where=sa.text("role = 'owner'"),
        sqlite_where=sa.text("role = 'owner'"),
    )

    op.create_table(
        "list_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("list_id", sa.Uuid(), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("content_type", _media_type(), nullable=False),
        sa.Column("added_by", sa.Uuid(), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["list_id"], ["lists.id"], name="fk_list_items_list_id_lists", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["added_by"], ["users.id"], name="fk_list_items_added_by_users", ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id", name="pk_list_items"),
    )
    op.create_index("ix_list_items_list_id", "list_items", ["list_id"])
    op.create_index("ix_list_items_content", "list_items", ["content_id", "content_type"])

    # --- Personal watchlist / watched ---
    op.create_table(
        "watchlists",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tmdb_id", sa.Integer(), nullable=False),
        sa.Column("media_type", _media_type(), nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_watchlists_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "tmdb_id", "media_type", name="pk_watchlists"),
    )

    op.create_table(
        "watched_movies",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tmdb_id", sa.Integer(), nullable=False),
        sa.Column("media_type", _media_type(), server_default="movie", nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_watched_movies_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "tmdb_id", name="pk_watched_movies"),
    )

    op.create_table(
        "watched_episodes",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tmdb_episode_id", sa.Integer(), nullable=False),
        sa.Column("tmdb_show_id", sa.Integer(), nullable=False),
        sa.Column("season_number", sa.Integer(), nullable=False),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_watched_episodes_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "tmdb_episode_id", name="pk_watched_episodes"),
    )
    op.create_index("ix_watched_episodes_user_show", "watched_episodes", ["user_id", "tmdb_show_id"])

    op.create_table(
        "series_cache",
        sa.Column("tmdb_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("total_episodes", sa.Integer(), nullable=False),
        sa.Column("number_of_seasons", sa.Integer(), nullable=False),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("tmdb_id", name="pk_series_cache"),
    )


def downgrade() -> None:
    op.drop_table("series_cache")
    op.drop_index("ix_watched_episodes_user_show", table_name="watched_episodes")
    op.drop_table("watched_episodes")
    op.drop_table("watched_movies")
    op.drop_table("watchlists")
    op.drop_index("ix_list_items_content", table_name="list_items")
    op.drop_index("ix_list_items_list_id", table_name="list_items")
    op.drop_table("list_items")
    op.drop_index("uq_list_members_one_owner", table_name="list_members")
    op.drop_index("ix_list_members_user_id", table_name="list_members")
    op.drop_table("list_members")
    op.drop_index("ix_lists_owner_id", table_name="lists")
    op.drop_table("lists")
    op.drop_index("ix_magic_links_email_created", table_name="magic_links")
    op.drop_table("magic_links")
    op.drop_table("users")
