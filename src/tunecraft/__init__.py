"""TuneCraft - genre-affinity playlists and weekly listening statistics."""

__version__ = "0.1.0"
