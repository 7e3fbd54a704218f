"""Infrastructure persistence layer."""

from .database import Database
from .models import (
    AlbumModel,
    Base,
    ListeningEventModel,
    PlaylistModel,
    PlaylistTrackModel,
    TrackModel,
    UserModel,
    WeeklyStatisticModel,
)
from .repositories import (
    AlbumRepository,
    ListeningEventRepository,
    PlaylistRepository,
    TrackRepository,
    UserRepository,
    WeeklyStatisticRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    # Database
    "Database",
    "Base",
    "SqlAlchemyUnitOfWork",
    # Models
    "UserModel",
    "AlbumModel",
    "TrackModel",
    "ListeningEventModel",
    "PlaylistModel",
    "PlaylistTrackModel",
    "WeeklyStatisticModel",
    # Repositories
    "UserRepository",
    "AlbumRepository",
    "TrackRepository",
    "ListeningEventRepository",
    "PlaylistRepository",
    "WeeklyStatisticRepository",
]
