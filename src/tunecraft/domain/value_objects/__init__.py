"""Value objects for the domain layer."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4

from tunecraft.domain.exceptions import ValidationError
from tunecraft.domain.value_objects.week_window import (
    WeekWindow,
    subtract_months,
    to_utc,
)


# Hey future me, every entity gets a TYPED id! UserId and TrackId both wrap a UUID but they
# never compare equal to each other (dataclass eq checks the class too), so passing a
# TrackId where a UserId is expected shows up in tests instead of silently matching.
@dataclass(frozen=True)
class EntityId:
    """Base class for UUID-backed entity identifiers."""

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a new random identifier."""
        return cls(uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Parse an identifier from its string form."""
        try:
            return cls(UUID(str(value)))
        except ValueError as e:
            raise ValidationError(f"Invalid {cls.__name__}: {value}") from e

    def __str__(self) -> str:
        return str(self.value)


class UserId(EntityId):
    """Identifier of a user (listeners, artists and admins share one id space)."""


class AlbumId(EntityId):
    """Identifier of an album."""


class TrackId(EntityId):
    """Identifier of a track."""


class PlaylistId(EntityId):
    """Identifier of a playlist."""


__all__ = [
    "AlbumId",
    "EntityId",
    "PlaylistId",
    "TrackId",
    "UserId",
    "WeekWindow",
    "subtract_months",
    "to_utc",
]
