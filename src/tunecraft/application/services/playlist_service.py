"""Playlist service for user playlist edits.

Hey future me - this is the ONLY way tracks get into a user playlist after creation.
System-generated mixes are read-only for users: the recommendation engine owns them and
would wipe any manual change on its next run anyway.
"""

import logging

from tunecraft.domain.entities import Playlist, PlaylistEntry
from tunecraft.domain.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    DuplicateEntityException,
    EntityNotFoundException,
)
from tunecraft.domain.ports import UnitOfWorkFactory
from tunecraft.domain.value_objects import PlaylistId, TrackId, UserId

logger = logging.getLogger(__name__)


class PlaylistService:
    """Service for playlist management operations."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        """Initialize playlist service.

        Args:
            uow_factory: Creates a fresh unit of work per call
        """
        self._uow_factory = uow_factory

    async def get_playlist(self, playlist_id: PlaylistId) -> Playlist:
        """Get a playlist with its entries.

        Raises:
            EntityNotFoundException: If the playlist is missing or deleted
        """
        async with self._uow_factory() as uow:
            playlist = await uow.playlists.get_by_id(playlist_id)
        if playlist is None:
            raise EntityNotFoundException("Playlist", playlist_id)
        return playlist

    async def list_playlists(self, owner_id: UserId) -> list[Playlist]:
        """List the non-deleted playlists of a user, system mixes included."""
        async with self._uow_factory() as uow:
            return await uow.playlists.list_by_owner(owner_id)

    async def add_track_to_playlist(
        self, playlist_id: PlaylistId, track_id: TrackId, user_id: UserId
    ) -> PlaylistEntry:
        """Append a track to the end of a user-owned playlist.

        Args:
            playlist_id: Target playlist
            track_id: Track to append
            user_id: User performing the edit

        Returns:
            The new entry (position = current max position + 1)

        Raises:
            EntityNotFoundException: If the playlist or the track is missing or deleted
            AuthorizationError: If the user does not own the playlist
            BusinessRuleViolation: If the playlist is system-generated
            DuplicateEntityException: If the track is already in the playlist
        """
        async with self._uow_factory() as uow:
            playlist = await uow.playlists.get_by_id(playlist_id)
            if playlist is None:
                raise EntityNotFoundException("Playlist", playlist_id)
            if playlist.owner_id != user_id:
                raise AuthorizationError("You can only modify your own playlists")
            if playlist.is_system_generated:
                raise BusinessRuleViolation("Cannot modify system-generated playlists")

            track = await uow.tracks.get_by_id(track_id)
            if track is None:
                raise EntityNotFoundException("Track", track_id)
            if playlist.contains(track.id):
                raise DuplicateEntityException(
                    "PlaylistTrack", f"{playlist.id}/{track.id}"
                )

            position = await uow.playlists.get_max_position(playlist.id) + 1
            entry = await uow.playlists.add_track(playlist.id, track.id, position)

        logger.info(
            "Added track %s to playlist %s at position %d",
            track.id,
            playlist.name,
            entry.position,
        )
        return entry
