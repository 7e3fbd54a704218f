"""Tests for artist similarity and artist profiles."""

import pytest

from tunecraft.application.services.artist_similarity_service import (
    ArtistSimilarityService,
    score_similar_artists,
)
from tunecraft.config import RecommendationSettings
from tunecraft.domain.entities import Genre, User, UserRole
from tunecraft.domain.exceptions import EntityNotFoundException, NotAnArtistException
from tunecraft.domain.ports import UnitOfWorkFactory
from tunecraft.domain.value_objects import UserId


def _artist(username: str) -> User:
    return User(id=UserId.generate(), username=username, role=UserRole.ARTIST)


class TestScoreSimilarArtists:
    """Test the pure scoring helper."""

    def test_ranks_by_shared_count_then_username(self) -> None:
        target = _artist("target")
        zed, amy, bob = _artist("zed"), _artist("amy"), _artist("bob")
        candidates = [
            (zed, frozenset({Genre.ROCK, Genre.POP})),
            (bob, frozenset({Genre.JAZZ})),
            (amy, frozenset({Genre.ROCK})),
        ]

        result = score_similar_artists(
            target.id, frozenset({Genre.ROCK, Genre.POP, Genre.JAZZ}), candidates
        )

        assert [s.username for s in result] == ["zed", "amy", "bob"]
        assert result[0].shared_genres == [Genre.POP, Genre.ROCK]
        assert result[0].shared_count == 2

    def test_drops_empty_overlap_and_target(self) -> None:
        target = _artist("target")
        other = _artist("other")
        candidates = [
            (target, frozenset({Genre.ROCK})),
            (other, frozenset({Genre.METAL})),
        ]

        assert score_similar_artists(target.id, frozenset({Genre.ROCK}), candidates) == []

    def test_limit(self) -> None:
        target = _artist("target")
        candidates = [(_artist(f"a{i:02d}"), frozenset({Genre.POP})) for i in range(15)]

        result = score_similar_artists(target.id, frozenset({Genre.POP}), candidates, limit=10)

        assert len(result) == 10
        assert result[0].username == "a00"


class TestArtistSimilarityService:
    """Test similarity lookups against the catalog."""

    @pytest.fixture
    def service(self, uow_factory: UnitOfWorkFactory) -> ArtistSimilarityService:
        return ArtistSimilarityService(uow_factory)

    async def test_similar_artists(self, service: ArtistSimilarityService, catalog) -> None:
        target = await catalog.artist("target")
        for genre in (Genre.ROCK, Genre.POP, Genre.JAZZ):
            await catalog.track(target, genre)
        close = await catalog.artist("close")
        await catalog.track(close, Genre.ROCK)
        await catalog.track(close, Genre.POP)
        far = await catalog.artist("far")
        await catalog.track(far, Genre.JAZZ)
        stranger = await catalog.artist("stranger")
        await catalog.track(stranger, Genre.METAL)

        result = await service.get_similar_artists(target.id)

        assert [s.id for s in result] == [close.id, far.id]
        assert result[0].shared_genres == [Genre.POP, Genre.ROCK]
        assert target.id not in [s.id for s in result]

    async def test_ignores_listeners_deleted_artists_and_deleted_tracks(
        self, service: ArtistSimilarityService, catalog
    ) -> None:
        target = await catalog.artist("target")
        await catalog.track(target, Genre.ROCK)
        listener = await catalog.user("listener")
        await catalog.track(listener, Genre.ROCK)
        gone = await catalog.artist("gone", is_deleted=True)
        await catalog.track(gone, Genre.ROCK)
        retired = await catalog.artist("retired")
        await catalog.track(retired, Genre.ROCK, is_deleted=True)

        assert await service.get_similar_artists(target.id) == []

    async def test_limit_from_settings(self, uow_factory: UnitOfWorkFactory, catalog) -> None:
        service = ArtistSimilarityService(
            uow_factory, RecommendationSettings(similar_artists_limit=2)
        )
        target = await catalog.artist("target")
        await catalog.track(target, Genre.POP)
        for name in ("c", "a", "b"):
            artist = await catalog.artist(name)
            await catalog.track(artist, Genre.POP)

        result = await service.get_similar_artists(target.id)

        assert [s.username for s in result] == ["a", "b"]

    async def test_artist_without_tracks(self, service: ArtistSimilarityService, catalog) -> None:
        target = await catalog.artist("target")
        other = await catalog.artist("other")
        await catalog.track(other, Genre.POP)

        assert await service.get_similar_artists(target.id) == []

    async def test_unknown_artist(self, service: ArtistSimilarityService) -> None:
        with pytest.raises(EntityNotFoundException):
            await service.get_similar_artists(UserId.generate())

    async def test_deleted_artist(self, service: ArtistSimilarityService, catalog) -> None:
        gone = await catalog.artist("gone", is_deleted=True)
        with pytest.raises(EntityNotFoundException):
            await service.get_similar_artists(gone.id)

    async def test_listener_is_not_an_artist(
        self, service: ArtistSimilarityService, catalog
    ) -> None:
        listener = await catalog.user("listener")
        with pytest.raises(NotAnArtistException):
            await service.get_similar_artists(listener.id)


class TestArtistProfile:
    """Test the artist profile view."""

    @pytest.fixture
    def service(self, uow_factory: UnitOfWorkFactory) -> ArtistSimilarityService:
        return ArtistSimilarityService(uow_factory)

    async def test_profile(self, service: ArtistSimilarityService, catalog) -> None:
        artist = await catalog.user(
            "band", role=UserRole.ARTIST, first_name="Ada", last_name="Lovelace"
        )
        await catalog.album(artist, "First")
        await catalog.album(artist, "Second")
        await catalog.album(artist, "Scrapped", is_deleted=True)
        tracks = await catalog.tracks(artist, Genre.ROCK, 11)
        await catalog.track(artist, Genre.POP)
        await catalog.track(artist, Genre.JAZZ, is_deleted=True)
        peer = await catalog.artist("peer")
        await catalog.track(peer, Genre.POP)

        profile = await service.get_artist_profile(artist.id)

        assert profile.username == "band"
        assert (profile.first_name, profile.last_name) == ("Ada", "Lovelace")
        assert profile.album_count == 2
        assert profile.track_count == 12
        assert profile.genres == [Genre.POP, Genre.ROCK]
        assert [t.id for t in profile.top_tracks] == [t.id for t in tracks[:10]]
        assert [s.username for s in profile.similar_artists] == ["peer"]

    async def test_profile_requires_artist(
        self, service: ArtistSimilarityService, catalog
    ) -> None:
        listener = await catalog.user("listener")
        with pytest.raises(NotAnArtistException):
            await service.get_artist_profile(listener.id)
