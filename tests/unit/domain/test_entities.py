"""Tests for domain entities."""

from datetime import date

import pytest

from tunecraft.domain.entities import (
    Genre,
    Playlist,
    PlaylistEntry,
    Track,
    User,
    UserRole,
    WeeklyStatistic,
)
from tunecraft.domain.exceptions import (
    DuplicateEntityException,
    NotAnArtistException,
    PreconditionFailedException,
)
from tunecraft.domain.value_objects import PlaylistId, TrackId, UserId


class TestGenre:
    """Test the genre enumeration."""

    def test_in_display_order_follows_declaration(self) -> None:
        """Genres come back in enum order, not input order."""
        genres = {Genre.OTHER, Genre.ROCK, Genre.POP, Genre.JAZZ}
        assert Genre.in_display_order(genres) == [
            Genre.POP,
            Genre.ROCK,
            Genre.JAZZ,
            Genre.OTHER,
        ]

    def test_in_display_order_empty(self) -> None:
        assert Genre.in_display_order([]) == []

    def test_value_is_name(self) -> None:
        assert Genre("HIP_HOP") is Genre.HIP_HOP


class TestUser:
    """Test role helpers on User."""

    def test_artist_has_artist_role(self) -> None:
        user = User(id=UserId.generate(), username="band", role=UserRole.ARTIST)
        assert user.is_artist
        assert user.has_role(UserRole.ARTIST)
        user.require_artist()

    def test_listener_is_not_artist(self) -> None:
        """require_artist() raises a precondition failure for other roles."""
        user = User(id=UserId.generate(), username="fan")
        assert not user.is_artist

        with pytest.raises(NotAnArtistException) as exc_info:
            user.require_artist()

        assert isinstance(exc_info.value, PreconditionFailedException)
        assert exc_info.value.role == "LISTENER"

    def test_empty_username_rejected(self) -> None:
        with pytest.raises(ValueError):
            User(id=UserId.generate(), username="  ")


class TestTrack:
    """Test Track validation and soft delete."""

    def test_soft_delete(self) -> None:
        track = Track(
            id=TrackId.generate(), title="Song", artist_id=UserId.generate(), genre=Genre.POP
        )
        before = track.updated_at

        track.soft_delete()

        assert track.is_deleted
        assert track.updated_at >= before

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(ValueError):
            Track(
                id=TrackId.generate(),
                title="Song",
                artist_id=UserId.generate(),
                genre=Genre.POP,
                duration_seconds=-1,
            )


class TestPlaylist:
    """Test playlist entry handling."""

    def test_genre_mix_naming(self) -> None:
        """System mixes are named after the genre and flagged as generated."""
        owner = UserId.generate()
        playlist = Playlist.genre_mix(Genre.ROCK, owner)

        assert playlist.name == "ROCK Mix for You"
        assert playlist.description == "Based on your listening history"
        assert playlist.is_system_generated
        assert playlist.owner_id == owner
        assert playlist.entries == []

    def test_add_track_assigns_increasing_positions(self) -> None:
        playlist = Playlist(id=PlaylistId.generate(), name="Mine", owner_id=UserId.generate())
        first, second = TrackId.generate(), TrackId.generate()

        assert playlist.add_track(first).position == 1
        assert playlist.add_track(second).position == 2
        assert playlist.track_ids == [first, second]
        assert playlist.track_count() == 2

    def test_add_track_rejects_duplicate(self) -> None:
        """The same track can't be added twice."""
        playlist = Playlist(id=PlaylistId.generate(), name="Mine", owner_id=UserId.generate())
        track_id = TrackId.generate()
        playlist.add_track(track_id)

        with pytest.raises(DuplicateEntityException):
            playlist.add_track(track_id)

        assert playlist.track_count() == 1

    def test_next_position_after_gap(self) -> None:
        """Next position is max + 1 even when positions have gaps."""
        playlist = Playlist(
            id=PlaylistId.generate(),
            name="Mine",
            owner_id=UserId.generate(),
            entries=[
                PlaylistEntry(track_id=TrackId.generate(), position=1),
                PlaylistEntry(track_id=TrackId.generate(), position=5),
            ],
        )
        assert playlist.next_position() == 6

    def test_entry_position_starts_at_one(self) -> None:
        with pytest.raises(ValueError):
            PlaylistEntry(track_id=TrackId.generate(), position=0)


class TestWeeklyStatistic:
    """Test WeeklyStatistic count validation."""

    def test_replace_counts_overwrites(self) -> None:
        stat = WeeklyStatistic(
            track_id=TrackId.generate(),
            week_start=date(2024, 5, 13),
            week_end=date(2024, 5, 19),
            listen_count=5,
            unique_listener_count=2,
        )

        stat.replace_counts(3, 1)

        assert (stat.listen_count, stat.unique_listener_count) == (3, 1)

    @pytest.mark.parametrize(("listens", "listeners"), [(-1, 0), (0, -1), (2, 3)])
    def test_invalid_counts_rejected(self, listens: int, listeners: int) -> None:
        with pytest.raises(ValueError):
            WeeklyStatistic(
                track_id=TrackId.generate(),
                week_start=date(2024, 5, 13),
                week_end=date(2024, 5, 19),
                listen_count=listens,
                unique_listener_count=listeners,
            )
