"""
Stored playlists kept on the server.
"""

from typing import Callable, Dict, List, Tuple

from loguru import logger

from mpd_minion.domain.playback.playlist import Playable
from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import Connection


class SavedPlaylists:
    """Names and resolved contents of the server's stored playlists."""

    def __init__(self):
        self._playlists: Dict[str, Tuple[Playable, ...]] = {}

    @property
    def names(self) -> List[str]:
        return sorted(self._playlists)

    def contents(self, name: str) -> Tuple[Playable, ...]:
        return self._playlists.get(name, ())

    def clear(self) -> None:
        self._playlists = {}

    def refresh(self, connection: Connection, resolver: Callable[[str], Playable]) -> bool:
        """Reload every stored playlist, resolving entries through ``resolver``.

        A playlist whose listing fails is kept with no entries.
        """
        if not connection.is_connected:
            self.clear()
            return False

        response = commands.list_playlists(connection)
        if response is None or not response.is_ok:
            logger.warning("Listing stored playlists failed")
            self.clear()
            return False

        playlists: Dict[str, Tuple[Playable, ...]] = {}
        for name in sorted(set(response.values("playlist"))):
            listing = commands.list_playlist(connection, name)
            if listing is None or not listing.is_ok:
                logger.warning(f"Listing stored playlist {name!r} failed")
                playlists[name] = ()
                continue
            playlists[name] = tuple(resolver(path) for path in listing.values("file"))

        self._playlists = playlists
        logger.debug(f"Loaded {len(playlists)} stored playlists")
        return True
