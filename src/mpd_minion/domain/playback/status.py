"""
Server playback status polled from ``status`` and ``stats``.
Functional approach: update_status returns a new ServerStatus.
"""

from typing import NamedTuple, Optional

from loguru import logger

from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import Connection
from mpd_minion.domain.protocol.response import Response


class ServerStatus(NamedTuple):
    """Immutable snapshot of the server's playback state."""

    ok: bool = False
    state: str = ""  # 'play' | 'pause' | 'stop'
    volume: Optional[int] = None  # 0-100, None when the server has no mixer
    playlist_version: int = -1
    current_song_index: int = -1
    play_position: int = 0
    song_length: int = 0
    random: bool = False
    repeat: bool = False
    database_update_time: int = -1

    @property
    def is_playing(self) -> bool:
        return self.state == "play"

    @property
    def is_paused(self) -> bool:
        return self.state == "pause"

    @property
    def is_stopped(self) -> bool:
        return self.state == "stop"


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_status(response: Response, previous: ServerStatus) -> ServerStatus:
    """Build a status from a ``status`` response.

    Fields the server leaves out fall back to "nothing playing" values.
    """
    state = previous.state
    volume = None
    playlist_version = -1
    current_song_index = -1
    play_position = 0
    song_length = 1
    random = False
    repeat = False

    for line in response:
        if line.value is None:
            continue
        if line.name == "state":
            state = line.value
        elif line.name == "volume":
            parsed = _to_int(line.value)
            volume = parsed if parsed is not None and 0 <= parsed <= 100 else None
        elif line.name == "playlist":
            parsed = _to_int(line.value)
            playlist_version = parsed if parsed is not None else -1
        elif line.name == "song":
            parsed = _to_int(line.value)
            current_song_index = parsed if parsed is not None else -1
        elif line.name == "time":
            pieces = line.value.split(":")
            if len(pieces) == 2:
                position, length = _to_int(pieces[0]), _to_int(pieces[1])
                if position is not None and length is not None:
                    play_position, song_length = position, length
        elif line.name == "random":
            random = line.value == "1"
        elif line.name == "repeat":
            repeat = line.value == "1"

    return previous._replace(
        ok=True,
        state=state,
        volume=volume,
        playlist_version=playlist_version,
        current_song_index=current_song_index,
        play_position=play_position,
        song_length=song_length,
        random=random,
        repeat=repeat,
    )


def update_status(connection: Connection, previous: ServerStatus) -> ServerStatus:
    """Poll ``status`` and ``stats``. Any failure resets to the default status."""
    if not connection.is_connected:
        return ServerStatus()

    response = commands.status(connection)
    if response is None or not response.is_ok:
        if previous.ok:
            logger.warning(f"Status poll failed: {response.status if response else 'no response'}")
        return ServerStatus()
    status = parse_status(response, previous)

    response = commands.stats(connection)
    if response is None or not response.is_ok:
        logger.warning("Stats poll failed")
        return ServerStatus()
    update_time = _to_int(response.first("db_update"))
    return status._replace(database_update_time=update_time if update_time is not None else -1)
