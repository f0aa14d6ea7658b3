"""Session context for explicit state passing.

This module provides the SessionContext dataclass that holds everything one
server session needs: configuration, the connection, the collection index
and the polled server state. It is passed explicitly to every function that
needs it instead of being reachable through module-level singletons.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

from rich.console import Console

from mpd_minion.core.config import Config
from mpd_minion.domain.library.database import Database, Playable
from mpd_minion.domain.library.dates import DateNormalizer
from mpd_minion.domain.playback.outputs import OutputCollection
from mpd_minion.domain.playback.playlist import Playlist
from mpd_minion.domain.playback.status import ServerStatus
from mpd_minion.domain.playlists.saved import SavedPlaylists
from mpd_minion.domain.playlists.streams import StreamsCollection
from mpd_minion.domain.protocol.connection import Connection
from mpd_minion.domain.protocol.transport import SocketTransport, Transport


@dataclass
class SessionContext:
    """Application context passed to all session functions.

    ``status`` is an immutable snapshot replaced via ``with_status``; the
    other components are owned by this session and updated in place by
    their own refresh/update methods.

    Attributes:
        config: Application configuration
        connection: Connection to the server
        database: Collection index
        status: Last polled server status
        playlist: Mirror of the play queue
        outputs: Audio outputs
        saved_playlists: Stored playlists on the server
        streams: User-saved streams
        console: Rich Console for formatted output
    """

    config: Config
    connection: Connection
    database: Database
    status: ServerStatus
    playlist: Playlist
    outputs: OutputCollection
    saved_playlists: SavedPlaylists
    streams: StreamsCollection
    console: Optional[Console] = None

    @classmethod
    def create(
        cls,
        config: Config,
        console: Optional[Console] = None,
        transport_factory: Optional[Callable[[], Transport]] = None,
    ) -> "SessionContext":
        """Create a disconnected session for the configured server.

        Args:
            config: Application configuration
            console: Optional Rich Console instance
            transport_factory: Builds the transport for each connect attempt
                (defaults to a TCP socket)

        Returns:
            New SessionContext with empty collection and default status
        """
        if transport_factory is None:
            timeout = config.server.network_timeout

            def transport_factory() -> Transport:
                return SocketTransport(timeout=timeout)

        connection = Connection(transport_factory)
        connection.set_host(config.server.host, config.server.port)

        database = Database(
            album_sort=config.library.album_sort_mode,
            date_normalizer=DateNormalizer(config.library.date_formats),
            strict_dump=config.library.strict_dump,
        )

        return cls(
            config=config,
            connection=connection,
            database=database,
            status=ServerStatus(),
            playlist=Playlist(),
            outputs=OutputCollection(),
            saved_playlists=SavedPlaylists(),
            streams=StreamsCollection(),
            console=console,
        )

    def with_status(self, status: ServerStatus) -> "SessionContext":
        """Return new context with updated server status.

        Args:
            status: New status snapshot

        Returns:
            New SessionContext with updated status, other fields unchanged
        """
        return replace(self, status=status)

    def resolve_playable(self, path: str) -> Playable:
        """Resolve a queue path to a library song, a saved stream or an unknown entry."""
        return self.database.playable_by_path(path, self.streams)
