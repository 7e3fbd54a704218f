"""SQLAlchemy ORM models for TuneCraft."""

import uuid
from datetime import UTC, date, datetime

import sqlalchemy as sa
from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# Hey future me, utc_now() ensures ALL timestamps are UTC! Never store naive local time -
# the weekly window and the 3 month lookback are both computed in UTC.
def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! UTC datetimes come back naive.
# Use this before comparing DB values with datetime.now(UTC).
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, UserModel holds listeners, artists AND admins - role is a plain string tag
# ('LISTENER', 'ARTIST', 'ADMIN'), not a table per role. is_deleted is the soft-delete
# flag: rows are never removed, every repository query filters on it.
class UserModel(Base):
    """SQLAlchemy model for User entity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="LISTENER", index=True
    )
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    playlists_generated_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    is_deleted: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    tracks: Mapped[list["TrackModel"]] = relationship(
        "TrackModel", back_populates="artist"
    )


class AlbumModel(Base):
    """SQLAlchemy model for Album entity."""

    __tablename__ = "albums"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    artist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_deleted: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    artist: Mapped["UserModel"] = relationship("UserModel")


class TrackModel(Base):
    """SQLAlchemy model for Track entity."""

    __tablename__ = "tracks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    artist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    album_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("albums.id", ondelete="SET NULL"), nullable=True
    )
    # Genre enum name ('ROCK', 'HIP_HOP', ...), one per track
    genre: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    artist: Mapped["UserModel"] = relationship("UserModel", back_populates="tracks")
    album: Mapped["AlbumModel | None"] = relationship("AlbumModel")

    __table_args__ = (
        Index("ix_tracks_artist_deleted", "artist_id", "is_deleted"),
        Index("ix_tracks_genre_deleted", "genre", "is_deleted"),
    )


# Hey future me, the listening log is APPEND-ONLY! No updated_at, no is_deleted, nothing ever
# edits these rows. Both derived outputs (playlists, weekly stats) are recomputed from it.
# The composite indexes match the two hot queries: per-user lookback and per-track window.
class ListeningEventModel(Base):
    """SQLAlchemy model for ListeningEvent entity."""

    __tablename__ = "listening_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    track_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False
    )
    listened_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )

    # Never loaded. Declared so one flush inserts the user and track before their events.
    user: Mapped["UserModel"] = relationship("UserModel")
    track: Mapped["TrackModel"] = relationship("TrackModel")

    __table_args__ = (
        Index("ix_listening_events_user_time", "user_id", "listened_at"),
        Index("ix_listening_events_track_time", "track_id", "listened_at"),
    )


class PlaylistModel(Base):
    """SQLAlchemy model for Playlist entity."""

    __tablename__ = "playlists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_system_generated: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    owner: Mapped["UserModel"] = relationship("UserModel")
    playlist_tracks: Mapped[list["PlaylistTrackModel"]] = relationship(
        "PlaylistTrackModel",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistTrackModel.position",
    )

    __table_args__ = (
        Index(
            "ix_playlists_owner_system",
            "owner_id",
            "is_system_generated",
            "is_deleted",
        ),
    )


# Listen, the composite primary key (playlist_id, track_id) IS the "no track twice"
# invariant at the DB level, and uq_playlist_tracks_position keeps positions unique even
# if two regenerations race on the same user.
class PlaylistTrackModel(Base):
    """Association table for Playlist-Track relationship."""

    __tablename__ = "playlist_tracks"

    playlist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tracks.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    playlist: Mapped["PlaylistModel"] = relationship(
        "PlaylistModel", back_populates="playlist_tracks"
    )
    track: Mapped["TrackModel"] = relationship("TrackModel")

    __table_args__ = (
        UniqueConstraint("playlist_id", "position", name="uq_playlist_tracks_position"),
    )


class WeeklyStatisticModel(Base):
    """SQLAlchemy model for WeeklyStatistic entity.

    One row per (track_id, week_start_date). Counts are overwritten on every
    aggregation run for the week, never incremented.
    """

    __tablename__ = "weekly_statistics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    track_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False
    )
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    week_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    listen_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_listener_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    track: Mapped["TrackModel"] = relationship("TrackModel")

    __table_args__ = (
        UniqueConstraint(
            "track_id", "week_start_date", name="uq_weekly_statistics_track_week"
        ),
        sa.CheckConstraint("listen_count >= 0", name="ck_weekly_statistics_listens"),
        sa.CheckConstraint(
            "unique_listener_count >= 0", name="ck_weekly_statistics_listeners"
        ),
    )
