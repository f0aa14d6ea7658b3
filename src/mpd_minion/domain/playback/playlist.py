"""
The server's play queue, kept in sync by diffing the playlist version.

The server bumps its playlist version on every queue change, so the queue
is refetched only when the version reported by status differs from the one
last applied.
"""

from typing import Callable, List, NamedTuple, Optional, Union

from loguru import logger

from mpd_minion.domain.library.models import Song, Stream, UnknownPlayable
from mpd_minion.domain.library.parsing import split_song_blocks
from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import Connection

from .status import ServerStatus

Playable = Union[Song, Stream, UnknownPlayable]
PlayableResolver = Callable[[str], Playable]


class PlaylistItem(NamedTuple):
    """One queue entry. ``id`` is stable across moves, ``position`` is not."""
    id: int
    position: int
    playable: Playable
    is_current: bool = False


def describe_playable(playable: Playable) -> str:
    if isinstance(playable, Song):
        text = f"{playable.artist}: {playable.title} ({playable.album}"
        if playable.year is not None:
            text += f", {playable.year}"
        return text + ")"
    if isinstance(playable, Stream):
        return playable.name
    return playable.path


def play_status_description(status: ServerStatus, current: Optional[PlaylistItem]) -> str:
    if not status.ok:
        return ""
    if current is None or status.is_stopped:
        return "Stopped."
    prefix = "Playing " if status.is_playing else "Paused - "
    return prefix + describe_playable(current.playable) + "."


def _to_int(value: Optional[str]) -> int:
    try:
        return int(value) if value is not None else -1
    except ValueError:
        return -1


class Playlist:
    """Mirror of the server queue."""

    def __init__(self):
        self.items: List[PlaylistItem] = []
        self.version = -1
        self.play_status_description = ""

    @property
    def current_item(self) -> Optional[PlaylistItem]:
        return next((item for item in self.items if item.is_current), None)

    def clear(self) -> None:
        self.items = []
        self.version = -1
        self.play_status_description = ""

    def update(self, connection: Connection, status: ServerStatus, resolver: PlayableResolver) -> bool:
        """Refetch the queue if its version changed, then mark the current entry.

        Returns:
            True if the queue was refetched.
        """
        if not status.ok:
            self.clear()
            return False

        refetched = False
        if status.playlist_version != self.version:
            fetched = self._fetch(connection, resolver)
            if fetched is None:
                # version stays unknown so the next poll retries
                self.items, self.version = [], -1
            else:
                self.items, self.version = fetched, status.playlist_version
            refetched = True

        self._mark_current(status)
        return refetched

    def _fetch(self, connection: Connection, resolver: PlayableResolver) -> Optional[List[PlaylistItem]]:
        response = commands.playlist_info(connection)
        if response is None or not response.is_ok:
            logger.warning("Fetching the play queue failed")
            return None

        items = []
        for block in split_song_blocks(response.lines).blocks:
            item_id, position = _to_int(block.get("Id")), _to_int(block.get("Pos"))
            if item_id < 0 or position < 0:
                logger.debug(f"Skipping queue entry without id/position: {block['file']}")
                continue
            items.append(PlaylistItem(item_id, position, resolver(block["file"])))
        items.sort(key=lambda item: item.position)
        logger.debug(f"Play queue refetched: {len(items)} entries")
        return items

    def _mark_current(self, status: ServerStatus) -> None:
        # "song:" in status is a queue position, not an index into items
        position = status.current_song_index
        playing_or_paused = status.is_playing or status.is_paused
        self.items = [
            item._replace(is_current=playing_or_paused and position >= 0 and item.position == position)
            for item in self.items
        ]
        self.play_status_description = play_status_description(status, self.current_item)
