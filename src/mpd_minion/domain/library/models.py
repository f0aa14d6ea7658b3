"""
Music library domain models.

Contains the song and album records built from the server's bulk dump, plus
the stream and placeholder records that can appear on the queue.
"""

import posixpath
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"
NO_GENRE = "No Genre"


class Song(NamedTuple):
    """A song known to the server, keyed by its unique path.

    Missing tags are replaced when the song is parsed: the title falls back to
    the file name and artist/album/genre to their "Unknown" placeholders.
    """
    path: str
    title: str
    artist: str = UNKNOWN_ARTIST
    album: str = UNKNOWN_ALBUM
    genre: str = NO_GENRE
    length: Optional[int] = None  # in seconds
    track: Optional[int] = None
    date: Optional[str] = None  # normalized: YYYY, YYYY-MM or YYYY-MM-DD

    @property
    def filename(self) -> str:
        return posixpath.basename(self.path)

    @property
    def year(self) -> Optional[int]:
        """Integer year from the normalized date, as older schemas stored it."""
        if self.date is None:
            return None
        return int(self.date[:4])


@dataclass(frozen=True)
class Album:
    """An album derived from song tags.

    Identity is (artist, title) only. ``date`` is the latest normalized date
    among the album's songs and only affects display and chronological sorting.
    """

    artist: str
    title: str
    date: Optional[str] = field(default=None, compare=False)

    @property
    def year(self) -> Optional[int]:
        return int(self.date[:4]) if self.date else None


class Stream(NamedTuple):
    """A user-saved internet stream (URL-backed playable)."""
    path: str  # stream URL
    name: str


class UnknownPlayable(NamedTuple):
    """A queue or playlist entry that is neither a library song nor a known stream."""
    path: str

    @property
    def title(self) -> str:
        return self.path
