"""Shared fixtures: a scripted in-memory server behind a fake transport."""

from typing import Callable, Dict, List, Optional

import pytest

from mpd_minion.core.config import Config
from mpd_minion.domain.protocol.connection import Connection
from mpd_minion.domain.protocol.transport import Transport

BANNER = "OK MPD 0.23.5"


def ok(*lines: str) -> List[str]:
    """Response lines followed by the OK status line."""
    return list(lines) + ["OK"]


LIBRARY_DUMP = ok(
    "directory: Artist A",
    "directory: Artist A/First",
    "file: Artist A/First/01 Intro.mp3",
    "Last-Modified: 2020-01-01T00:00:00Z",
    "Time: 61",
    "Artist: Artist A",
    "Album: First",
    "Title: Intro",
    "Genre: Rock",
    "Date: 2001-05-06",
    "Track: 1/10",
    "file: Artist A/First/02 Song.mp3",
    "Time: 200",
    "Artist: Artist A",
    "Album: First",
    "Title: Song",
    "Genre: Rock",
    "Date: 2001",
    "Track: 2",
    "directory: Artist A/Second",
    "file: Artist A/Second/01 Later.flac",
    "Artist: Artist A",
    "Album: Second",
    "Title: Later",
    "Genre: Jazz",
    "Date: 1999",
    "file: Artist B/Only/untitled.ogg",
    "Artist: Artist B",
    "Album: Only",
    "Genre: Rock",
    "file: loose.mp3",
)

DEFAULT_RESPONSES: Dict[str, List[str]] = {
    "listallinfo": LIBRARY_DUMP,
    "status": ok(
        "volume: 80",
        "repeat: 0",
        "random: 1",
        "playlist: 7",
        "playlistlength: 3",
        "state: play",
        "song: 1",
        "songid: 12",
        "time: 30:200",
    ),
    "stats": ok("artists: 3", "albums: 4", "songs: 5", "db_update: 1700000000"),
    "playlistinfo": ok(
        "file: Artist A/First/01 Intro.mp3",
        "Pos: 0",
        "Id: 11",
        "file: Artist A/First/02 Song.mp3",
        "Title: Song",
        "Pos: 1",
        "Id: 12",
        "file: http://radio.example/stream",
        "Pos: 2",
        "Id: 13",
    ),
    "listplaylists": ok(
        "playlist: Favourites",
        "Last-Modified: 2024-01-01T00:00:00Z",
        "playlist: Empty",
        "Last-Modified: 2024-01-02T00:00:00Z",
    ),
    'listplaylist "Favourites"': ok("file: loose.mp3", "file: missing.mp3"),
    'listplaylist "Empty"': ok(),
    "outputs": ok(
        "outputid: 0",
        "outputname: Speakers",
        "outputenabled: 1",
        "outputid: 1",
        "outputname: Headphones",
        "plugin: pulse",
        "outputenabled: 0",
    ),
}


class FakeServer:
    """Answers command lines from a table of canned responses.

    Values are lists of lines (status line last) or callables taking the
    command and returning such a list. Unknown commands get an ACK.
    """

    def __init__(self, responses: Optional[Dict[str, object]] = None, banner: str = BANNER):
        self.responses: Dict[str, object] = dict(responses or {})
        self.banner = banner
        self.received: List[str] = []
        self.transports: List["FakeTransport"] = []

    def reply(self, command: str) -> bytes:
        self.received.append(command)
        if command == "close":
            return b""
        lines = self.responses.get(command)
        if lines is None:
            name = command.split(" ", 1)[0]
            lines = [f'ACK [5@0] {{{name}}} unknown command "{name}"']
        elif callable(lines):
            lines = lines(command)
        return "".join(line + "\n" for line in lines).encode("utf-8")


class FakeTransport(Transport):
    """In-memory transport wired to a FakeServer."""

    def __init__(self, server: FakeServer, ready: bool = True):
        self.server = server
        self.ready = ready
        self.incoming = bytearray()
        self.closed = False
        self.connect_error: Optional[OSError] = None
        self.finish_error: Optional[OSError] = None
        self.send_error: Optional[OSError] = None
        self.recv_error: Optional[OSError] = None
        self.recv_calls = 0
        self.max_chunk = 7  # small reads exercise line reassembly

    def start_connect(self, host: str, port: int) -> None:
        if self.connect_error is not None:
            raise self.connect_error

    def connect_ready(self) -> bool:
        return self.ready

    def finish_connect(self) -> None:
        if self.finish_error is not None:
            raise self.finish_error
        if self.server.banner is not None:
            self.incoming.extend((self.server.banner + "\n").encode("utf-8"))

    def send(self, data: bytes) -> None:
        if self.send_error is not None:
            raise self.send_error
        for line in data.decode("utf-8").splitlines():
            self.incoming.extend(self.server.reply(line))

    def recv(self, size: int) -> bytes:
        self.recv_calls += 1
        if self.recv_error is not None:
            raise self.recv_error
        chunk = bytes(self.incoming[: min(size, self.max_chunk)])
        del self.incoming[: len(chunk)]
        return chunk

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_server() -> FakeServer:
    """A server holding the canned library, queue, playlists and outputs."""
    return FakeServer(DEFAULT_RESPONSES)


@pytest.fixture
def transport_factory(fake_server: FakeServer) -> Callable[[], FakeTransport]:
    """Factory that records every transport it builds on the server."""

    def factory() -> FakeTransport:
        transport = FakeTransport(fake_server)
        fake_server.transports.append(transport)
        return transport

    return factory


@pytest.fixture
def make_connection(transport_factory) -> Callable[[], Connection]:
    """Build a connection and run it through the connect handshake."""

    def build() -> Connection:
        connection = Connection(transport_factory)
        connection.set_host("music.local", 6600)
        connection.start_connecting()
        assert connection.is_ready_to_connect
        connection.finish_connecting()
        return connection

    return build


@pytest.fixture
def connection(make_connection) -> Connection:
    """A connected Connection to the fake server."""
    return make_connection()


@pytest.fixture
def config() -> Config:
    """Default configuration pointed at the fake server."""
    config = Config()
    config.server.host = "music.local"
    config.server.reconnect_interval = 0.0
    return config
