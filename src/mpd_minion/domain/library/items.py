"""
Collection items for generic list display.

A CollectionItem is exactly one of the variants below; each carries only the
fields its kind needs.
"""

from dataclasses import dataclass
from typing import Union

from .models import Album, Song, Stream, UnknownPlayable


@dataclass(frozen=True)
class ArtistItem:
    name: str


@dataclass(frozen=True)
class GenreItem:
    name: str


@dataclass(frozen=True)
class AlbumItem:
    album: Album


@dataclass(frozen=True)
class SongItem:
    song: Song


@dataclass(frozen=True)
class StreamItem:
    stream: Stream


CollectionItem = Union[ArtistItem, GenreItem, AlbumItem, SongItem, StreamItem]


def format_length(seconds) -> str:
    if seconds is None:
        return ""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def display_text(item: CollectionItem) -> str:
    """One-line label for any collection item."""
    match item:
        case ArtistItem(name=name) | GenreItem(name=name):
            return name
        case AlbumItem(album=album):
            if album.year is not None:
                return f"{album.title} ({album.year})"
            return album.title
        case SongItem(song=song):
            return f"{song.artist}: {song.title}"
        case StreamItem(stream=stream):
            return stream.name
        case _:
            raise TypeError(f"Not a collection item: {item!r}")


def item_for_playable(playable: Union[Song, Stream, UnknownPlayable]) -> CollectionItem:
    """Wrap a resolved queue entry; unknown entries display as bare streams."""
    match playable:
        case Song():
            return SongItem(playable)
        case Stream():
            return StreamItem(playable)
        case UnknownPlayable(path=path):
            return StreamItem(Stream(path=path, name=path))
        case _:
            raise TypeError(f"Not a playable: {playable!r}")
