"""Application services."""

from tunecraft.application.services.artist_similarity_service import (
    ArtistSimilarityService,
    score_similar_artists,
)
from tunecraft.application.services.genre_affinity_service import (
    GenreAffinityCalculator,
    GenreAffinityService,
    rank_genres,
)
from tunecraft.application.services.listening_service import ListeningService
from tunecraft.application.services.playlist_service import PlaylistService
from tunecraft.application.services.recommendation_service import (
    PlaylistRecommendationService,
)
from tunecraft.application.services.weekly_statistics_service import (
    WeeklyStatisticsService,
    compute_weekly_statistics,
)

__all__ = [
    "ArtistSimilarityService",
    "GenreAffinityCalculator",
    "GenreAffinityService",
    "ListeningService",
    "PlaylistRecommendationService",
    "PlaylistService",
    "WeeklyStatisticsService",
    "compute_weekly_statistics",
    "rank_genres",
    "score_similar_artists",
]
