"""Playlists domain - stored server playlists and saved streams."""

from .saved import SavedPlaylists
from .streams import StreamsCollection

__all__ = ["SavedPlaylists", "StreamsCollection"]
