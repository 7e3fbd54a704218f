"""Listening history recording."""

import logging
from datetime import UTC, datetime

from tunecraft.domain.entities import ListeningEvent
from tunecraft.domain.exceptions import EntityNotFoundException
from tunecraft.domain.ports import UnitOfWorkFactory
from tunecraft.domain.value_objects import TrackId, UserId, to_utc

logger = logging.getLogger(__name__)


class ListeningService:
    """Appends listening events to the log."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def record_listen(
        self,
        user_id: UserId,
        track_id: TrackId,
        listened_at: datetime | None = None,
    ) -> ListeningEvent:
        """Record that a user played a track.

        Raises:
            EntityNotFoundException: If the user or the track is missing or deleted
        """
        async with self._uow_factory() as uow:
            if await uow.users.get_by_id(user_id) is None:
                raise EntityNotFoundException("User", user_id)
            if await uow.tracks.get_by_id(track_id) is None:
                raise EntityNotFoundException("Track", track_id)

            event = ListeningEvent(
                user_id=user_id,
                track_id=track_id,
                listened_at=to_utc(listened_at or datetime.now(UTC)),
            )
            await uow.listening_events.add(event)

        logger.debug("Recorded listen of track %s by user %s", track_id, user_id)
        return event
