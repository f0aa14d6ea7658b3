"""
In-memory collection index built from the server's bulk dump.

A refresh parses ``listallinfo`` into songs and derives the artist, genre and
album indices in one pass each. The whole index is built off to the side and
swapped in with a single assignment, so a reader holding ``snapshot`` keeps a
consistent view while a refresh runs. A failed refresh swaps in the empty
index; partial results are never kept.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from loguru import logger

from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import Connection

from .dates import DateNormalizer
from .models import Album, Song, Stream, UnknownPlayable
from .parsing import song_from_block, split_song_blocks
from .tree import DirectoryTree, build_directory_tree

AlbumSortKey = Callable[[Album], tuple]
Playable = Union[Song, Stream, UnknownPlayable]


def album_by_date_key(album: Album) -> tuple:
    """Artist, then dated albums oldest first, then undated, then title."""
    return (album.artist, album.date is None, album.date or "", album.title)


def album_by_title_key(album: Album) -> tuple:
    return (album.artist, album.title)


ALBUM_SORT_RULES: Dict[str, AlbumSortKey] = {
    "chronological": album_by_date_key,
    "title": album_by_title_key,
}


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


@dataclass(frozen=True)
class IndexSnapshot:
    """One complete, read-only generation of the collection index."""

    songs_by_path: Mapping[str, Song] = field(default_factory=lambda: _frozen({}))
    artists: Tuple[str, ...] = ()
    genres: Tuple[str, ...] = ()
    albums: Tuple[Album, ...] = ()
    albums_by_artist: Mapping[str, Tuple[Album, ...]] = field(default_factory=lambda: _frozen({}))
    albums_by_genre: Mapping[str, Tuple[Album, ...]] = field(default_factory=lambda: _frozen({}))
    songs_by_album: Mapping[Album, Tuple[str, ...]] = field(default_factory=lambda: _frozen({}))
    album_by_path: Mapping[str, Album] = field(default_factory=lambda: _frozen({}))


EMPTY_INDEX = IndexSnapshot()


def build_index(songs: List[Song], sort_key: AlbumSortKey = album_by_date_key) -> IndexSnapshot:
    """Derive every index from a list of songs.

    When a path appears twice the first song wins.
    """
    songs_by_path: Dict[str, Song] = {}
    for song in sorted(songs, key=lambda s: s.path):
        if song.path in songs_by_path:
            logger.warning(f"Duplicate path in listing, keeping first: {song.path}")
            continue
        songs_by_path[song.path] = song

    artists = tuple(sorted({song.artist for song in songs_by_path.values()}))
    genres = tuple(sorted({song.genre for song in songs_by_path.values()}))

    # album records carry the latest date seen among their songs
    album_dates: Dict[Tuple[str, str], Optional[str]] = {}
    for song in songs_by_path.values():
        key = (song.artist, song.album)
        latest = album_dates.get(key)
        if latest is None or (song.date is not None and song.date > latest):
            album_dates[key] = song.date
    album_records = {key: Album(key[0], key[1], date) for key, date in album_dates.items()}

    def sorted_albums(albums) -> Tuple[Album, ...]:
        return tuple(sorted(albums, key=sort_key))

    by_artist: Dict[str, set] = {}
    for song in songs_by_path.values():
        by_artist.setdefault(song.artist, set()).add(album_records[(song.artist, song.album)])

    by_genre: Dict[str, set] = {}
    for song in songs_by_path.values():
        by_genre.setdefault(song.genre, set()).add(album_records[(song.artist, song.album)])

    paths_by_album: Dict[Album, List[str]] = {}
    for song in songs_by_path.values():
        paths_by_album.setdefault(album_records[(song.artist, song.album)], []).append(song.path)

    album_by_path = {
        path: album for album, paths in paths_by_album.items() for path in paths
    }

    return IndexSnapshot(
        songs_by_path=_frozen(songs_by_path),
        artists=artists,
        genres=genres,
        albums=sorted_albums(album_records.values()),
        albums_by_artist=_frozen({k: sorted_albums(v) for k, v in sorted(by_artist.items())}),
        albums_by_genre=_frozen({k: sorted_albums(v) for k, v in sorted(by_genre.items())}),
        songs_by_album=_frozen({album: tuple(paths) for album, paths in paths_by_album.items()}),
        album_by_path=_frozen(album_by_path),
    )


class Database:
    """The collection index for one server session.

    Args:
        album_sort: Name of the album ordering in ALBUM_SORT_RULES.
        date_normalizer: Normalizer applied to Date tags.
        strict_dump: Fail the refresh when the listing has lines before its
            first "file" line instead of skipping them.
    """

    def __init__(
        self,
        album_sort: str = "chronological",
        date_normalizer: Optional[DateNormalizer] = None,
        strict_dump: bool = False,
    ):
        if album_sort not in ALBUM_SORT_RULES:
            raise ValueError(
                f"Unknown album sort {album_sort!r}. Valid values are: {sorted(ALBUM_SORT_RULES)}"
            )
        self.album_sort = album_sort
        self.date_normalizer = date_normalizer or DateNormalizer()
        self.strict_dump = strict_dump
        self.snapshot: IndexSnapshot = EMPTY_INDEX
        self._tree: Optional[Tuple[IndexSnapshot, DirectoryTree]] = None

    def refresh(self, connection: Connection) -> bool:
        """Rebuild every index from a fresh bulk dump.

        Returns:
            True on success. On failure the index is empty and False is returned.
        """
        if not connection.is_connected:
            logger.debug("Skipping database refresh: not connected")
            self.clear()
            return False

        response = commands.list_all_info(connection)
        if response is None or not response.is_ok:
            status = response.status if response is not None else "no response"
            logger.warning(f"Database refresh failed: {status}")
            self.clear()
            return False

        parsed = split_song_blocks(response.lines)
        if parsed.dropped_lines:
            if self.strict_dump:
                logger.warning(
                    f"Database refresh failed: {parsed.dropped_lines} lines before first file entry"
                )
                self.clear()
                return False
            logger.warning(f"Skipped {parsed.dropped_lines} lines before first file entry")

        songs = [song_from_block(block, self.date_normalizer) for block in parsed.blocks]
        self.snapshot = build_index(songs, ALBUM_SORT_RULES[self.album_sort])
        logger.info(
            f"Database refreshed: {len(self.snapshot.songs_by_path)} songs, "
            f"{len(self.snapshot.artists)} artists, {len(self.snapshot.albums)} albums"
        )
        return True

    def clear(self) -> None:
        self.snapshot = EMPTY_INDEX

    @property
    def is_empty(self) -> bool:
        return not self.snapshot.songs_by_path

    @property
    def artists(self) -> Tuple[str, ...]:
        return self.snapshot.artists

    @property
    def genres(self) -> Tuple[str, ...]:
        return self.snapshot.genres

    @property
    def albums(self) -> Tuple[Album, ...]:
        return self.snapshot.albums

    @property
    def songs(self) -> List[Song]:
        """All songs in path order."""
        return list(self.snapshot.songs_by_path.values())

    @property
    def song_count(self) -> int:
        return len(self.snapshot.songs_by_path)

    def albums_by_artist(self, artist: str) -> Tuple[Album, ...]:
        return self.snapshot.albums_by_artist.get(artist, ())

    def albums_by_genre(self, genre: str) -> Tuple[Album, ...]:
        return self.snapshot.albums_by_genre.get(genre, ())

    def paths_by_album(self, album: Album) -> Tuple[str, ...]:
        return self.snapshot.songs_by_album.get(album, ())

    def songs_by_album(self, album: Album) -> List[Song]:
        snapshot = self.snapshot
        return [snapshot.songs_by_path[path] for path in snapshot.songs_by_album.get(album, ())]

    def song_by_path(self, path: str) -> Optional[Song]:
        return self.snapshot.songs_by_path.get(path)

    def album_of(self, song: Union[Song, str]) -> Optional[Album]:
        path = song if isinstance(song, str) else song.path
        return self.snapshot.album_by_path.get(path)

    def directory_tree(self) -> DirectoryTree:
        """Directory projection of the current snapshot, built once per snapshot."""
        snapshot = self.snapshot
        if self._tree is None or self._tree[0] is not snapshot:
            self._tree = (snapshot, build_directory_tree(snapshot.songs_by_path))
        return self._tree[1]

    def playable_by_path(self, path: str, streams=None) -> Playable:
        """Resolve a queue or playlist path: library song, then saved stream, then unknown."""
        song = self.song_by_path(path)
        if song is not None:
            return song
        if streams is not None:
            stream = streams.stream_by_path(path)
            if stream is not None:
                return stream
        return UnknownPlayable(path)
