"""
Initial catalog schema.

- Content collections: movies, sinhala_movies, korean_dramas (shared shape)
- tv_episodes hanging off TV-show rows in movies
- profiles, watchlists, contact_messages
- external_updates seen-log for the update monitor
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20260101_01_initial_catalog"
down_revision = None
branch_labels = None
depends_on = None

CONTENT_TABLES = ("movies", "sinhala_movies", "korean_dramas")
OTHER_TABLES = ("tv_episodes", "profiles", "watchlists", "contact_messages", "external_updates")


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _content_columns() -> list:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("language", sa.String(length=64), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("imdb_rating", sa.Float(), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("backdrop_url", sa.Text(), nullable=True),
        sa.Column("trailer", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("download_url", sa.Text(), nullable=True),
        sa.Column("actors", sa.Text(), nullable=True),
        sa.Column("cast_details", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("director", sa.String(length=255), nullable=True),
        sa.Column("country", sa.String(length=128), nullable=True),
        sa.Column("duration", sa.String(length=64), nullable=True),
        sa.Column("subtitle_author", sa.String(length=255), nullable=True),
        sa.Column("subtitle_site", sa.String(length=255), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    ]


def upgrade() -> None:
    # --- Content collections ---
    for table in CONTENT_TABLES:
        op.create_table(table, *_content_columns(), sa.PrimaryKeyConstraint("id", name=f"pk_{table}"))
        op.create_index(f"ix_{table}_year", table, ["year"])
        op.create_index(f"ix_{table}_created_at", table, ["created_at"])
    op.create_index("ix_movies_type_created_at", "movies", ["type", "created_at"])

    # --- Episodes ---
    op.create_table(
        "tv_episodes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("show_id", sa.Uuid(), nullable=False),
        sa.Column("season_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("subtitle_url", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_tv_episodes"),
        sa.ForeignKeyConstraint(["show_id"], ["movies.id"], name="fk_tv_episodes_show_id_movies", ondelete="CASCADE"),
        sa.UniqueConstraint("show_id", "season_number", "episode_number", name="uq_tv_episodes_show_season_episode"),
    )
    op.create_index("ix_tv_episodes_show_id", "tv_episodes", ["show_id"])

    # --- Viewers ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
    )
    op.create_table(
        "watchlists",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("movie_id", sa.Uuid(), nullable=False),
        sa.Column("collection", sa.String(length=32), nullable=False, server_default="movies"),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_watchlists"),
        sa.UniqueConstraint("user_id", "movie_id", name="uq_watchlists_user_movie"),
    )
    op.create_index("ix_watchlists_user_id", "watchlists", ["user_id"])
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_contact_messages"),
    )

    # --- Update monitor seen-log ---
    op.create_table(
        "external_updates",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("site_name", sa.String(length=128), nullable=False),
        sa.Column("guid", sa.String(length=1024), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("link", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_external_updates"),
        sa.UniqueConstraint("guid", name="uq_external_updates_guid"),
    )

    for table in OTHER_TABLES:
        op.create_index(f"ix_{table}_created_at", table, ["created_at"])


def downgrade() -> None:
    for table in OTHER_TABLES:
        op.drop_index(f"ix_{table}_created_at", table_name=table)
    op.drop_table("external_updates")
    op.drop_table("contact_messages")
    op.drop_index("ix_watchlists_user_id", table_name="watchlists")
    op.drop_table("watchlists")
    op.drop_table("profiles")
    op.drop_index("ix_tv_episodes_show_id", table_name="tv_episodes")
    op.drop_table("tv_episodes")
    op.drop_index("ix_movies_type_created_at", table_name="movies")
    for table in reversed(CONTENT_TABLES):
        op.drop_index(f"ix_{table}_created_at", table_name=table)
        op.drop_index(f"ix_{table}_year", table_name=table)
        op.drop_table(table)
