"""initial schema - catalog, listening log, playlists, weekly statistics

Revision ID: a1c4e7f20b01
Revises:
Create Date: 2026-10-05 10:00:00.000000

Hey future me - this is the WHOLE starting schema in one go!

Tables:
- users: listeners, artists and admins (role is a string tag)
- albums / tracks: the catalog, soft-deleted via is_deleted
- listening_events: append-only (user, track, listened_at) log
- playlists / playlist_tracks: user and system-generated playlists
- weekly_statistics: one row per (track, week_start_date)

Constraints worth knowing:
- playlist_tracks primary key (playlist_id, track_id): a track at most once per playlist
- uq_playlist_tracks_position: positions unique per playlist
- uq_weekly_statistics_track_week: the upsert key of the weekly rollup
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic
revision: str = "a1c4e7f20b01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables and indexes."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("playlists_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "albums",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "artist_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_albums_artist_id", "albums", ["artist_id"])

    op.create_table(
        "tracks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "artist_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "album_id",
            sa.String(36),
            sa.ForeignKey("albums.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("genre", sa.String(50), nullable=False),
        sa.Column("duration_seconds", sa.Integer, nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tracks_title", "tracks", ["title"])
    op.create_index("ix_tracks_genre", "tracks", ["genre"])
    op.create_index("ix_tracks_is_deleted", "tracks", ["is_deleted"])
    op.create_index("ix_tracks_artist_deleted", "tracks", ["artist_id", "is_deleted"])
    op.create_index("ix_tracks_genre_deleted", "tracks", ["genre", "is_deleted"])

    op.create_table(
        "listening_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "track_id",
            sa.String(36),
            sa.ForeignKey("tracks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("listened_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_listening_events_listened_at", "listening_events", ["listened_at"]
    )
    op.create_index(
        "ix_listening_events_user_time", "listening_events", ["user_id", "listened_at"]
    )
    op.create_index(
        "ix_listening_events_track_time",
        "listening_events",
        ["track_id", "listened_at"],
    )

    op.create_table(
        "playlists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "owner_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "is_system_generated", sa.Boolean, nullable=False, server_default="0"
        ),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_playlists_owner_system",
        "playlists",
        ["owner_id", "is_system_generated", "is_deleted"],
    )

    op.create_table(
        "playlist_tracks",
        sa.Column(
            "playlist_id",
            sa.String(36),
            sa.ForeignKey("playlists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "track_id",
            sa.String(36),
            sa.ForeignKey("tracks.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "playlist_id", "position", name="uq_playlist_tracks_position"
        ),
    )

    op.create_table(
        "weekly_statistics",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "track_id",
            sa.String(36),
            sa.ForeignKey("tracks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("week_start_date", sa.Date, nullable=False),
        sa.Column("week_end_date", sa.Date, nullable=False),
        sa.Column("listen_count", sa.Integer, nullable=False),
        sa.Column("unique_listener_count", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "track_id", "week_start_date", name="uq_weekly_statistics_track_week"
        ),
        sa.CheckConstraint("listen_count >= 0", name="ck_weekly_statistics_listens"),
        sa.CheckConstraint(
            "unique_listener_count >= 0", name="ck_weekly_statistics_listeners"
        ),
    )
    op.create_index(
        "ix_weekly_statistics_week_start_date",
        "weekly_statistics",
        ["week_start_date"],
    )


def downgrade() -> None:
    """Drop all tables, dependents first."""
    op.drop_index("ix_weekly_statistics_week_start_date", table_name="weekly_statistics")
    op.drop_table("weekly_statistics")
    op.drop_table("playlist_tracks")
    op.drop_index("ix_playlists_owner_system", table_name="playlists")
    op.drop_table("playlists")
    op.drop_index("ix_listening_events_track_time", table_name="listening_events")
    op.drop_index("ix_listening_events_user_time", table_name="listening_events")
    op.drop_index("ix_listening_events_listened_at", table_name="listening_events")
    op.drop_table("listening_events")
    op.drop_index("ix_tracks_genre_deleted", table_name="tracks")
    op.drop_index("ix_tracks_artist_deleted", table_name="tracks")
    op.drop_index("ix_tracks_is_deleted", table_name="tracks")
    op.drop_index("ix_tracks_genre", table_name="tracks")
    op.drop_index("ix_tracks_title", table_name="tracks")
    op.drop_table("tracks")
    op.drop_index("ix_albums_artist_id", table_name="albums")
    op.drop_table("albums")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
