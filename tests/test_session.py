"""Tests for session polling and the connection lifecycle."""

import errno
from itertools import count

import pytest

from mpd_minion import session
from mpd_minion.context import SessionContext
from mpd_minion.core.config import Config
from mpd_minion.domain.protocol.connection import ConnectionState


@pytest.fixture
def ctx(config: Config, transport_factory) -> SessionContext:
    return SessionContext.create(config, transport_factory=transport_factory)


def connected(ctx: SessionContext) -> SessionContext:
    ctx = session.tick(ctx)
    return session.tick(ctx)


class TestTick:
    """Tests for session.tick."""

    def test_first_tick_starts_connecting(self, ctx: SessionContext) -> None:
        """Test a fresh session begins connecting."""
        ctx = session.tick(ctx)
        assert ctx.connection.state is ConnectionState.CONNECTING

    def test_connect_loads_everything(self, ctx: SessionContext, fake_server) -> None:
        """Test finishing the handshake loads library, playlists, outputs and status."""
        ctx = connected(ctx)
        assert ctx.connection.is_connected
        assert ctx.database.song_count == 5
        assert ctx.saved_playlists.names == ["Empty", "Favourites"]
        assert len(ctx.outputs.items) == 2
        assert ctx.status.ok and ctx.status.is_playing
        assert ctx.playlist.current_item.id == 12
        assert fake_server.received[0] == "listallinfo"

    def test_password_sent_first(self, config: Config, transport_factory, fake_server) -> None:
        """Test a configured password is sent right after the handshake."""
        config.server.password = 'se"cret'
        fake_server.responses['password "se\\"cret"'] = ["OK"]
        ctx = connected(SessionContext.create(config, transport_factory=transport_factory))
        assert fake_server.received[0] == 'password "se\\"cret"'
        assert ctx.database.song_count == 5

    def test_steady_state_poll(self, ctx: SessionContext, fake_server) -> None:
        """Test an unchanged server is only polled for status."""
        ctx = connected(ctx)
        fake_server.received.clear()
        ctx = session.tick(ctx)
        assert fake_server.received == ["status", "stats", "outputs"]

    def test_database_update_triggers_refresh(self, ctx: SessionContext, fake_server) -> None:
        """Test a new db_update time reloads the collection."""
        ctx = connected(ctx)
        fake_server.responses["stats"] = ["db_update: 1700000999", "OK"]
        fake_server.responses["listallinfo"] = ["file: new.mp3", "Title: New", "OK"]
        fake_server.received.clear()
        ctx = session.tick(ctx)
        assert "listallinfo" in fake_server.received
        assert "playlistinfo" in fake_server.received
        assert ctx.database.song_count == 1
        assert ctx.status.database_update_time == 1700000999

    def test_playlist_version_triggers_refetch(self, ctx: SessionContext, fake_server) -> None:
        """Test a playlist version bump refetches the queue."""
        ctx = connected(ctx)
        fake_server.responses["status"] = ["state: stop", "playlist: 8", "OK"]
        fake_server.responses["playlistinfo"] = ["OK"]
        ctx = session.tick(ctx)
        assert ctx.playlist.items == []
        assert ctx.playlist.version == 8
        assert ctx.playlist.play_status_description == "Stopped."

    def test_lost_connection_clears_state(self, ctx: SessionContext, fake_server) -> None:
        """Test a transport failure empties every derived structure."""
        ctx = connected(ctx)
        fake_server.transports[-1].send_error = BrokenPipeError(errno.EPIPE, "broken pipe")
        ctx = session.tick(ctx)
        assert ctx.connection.state is ConnectionState.DISCONNECTED
        assert ctx.database.is_empty
        assert ctx.playlist.items == []
        assert ctx.saved_playlists.names == []
        assert ctx.outputs.items == []
        assert not ctx.status.ok

    def test_reconnects_after_interval(self, ctx: SessionContext, fake_server) -> None:
        """Test a lost session reconnects on a later tick."""
        ctx = connected(ctx)
        fake_server.transports[-1].send_error = BrokenPipeError(errno.EPIPE, "broken pipe")
        ctx = session.tick(ctx)
        ctx = connected(ctx)
        assert ctx.connection.is_connected
        assert len(fake_server.transports) == 2

    def test_waits_for_reconnect_interval(self, config: Config, transport_factory, fake_server) -> None:
        """Test no reconnect is attempted before the interval elapses."""
        config.server.reconnect_interval = 3600.0
        ctx = connected(SessionContext.create(config, transport_factory=transport_factory))
        fake_server.transports[-1].send_error = BrokenPipeError(errno.EPIPE, "broken pipe")
        ctx = session.tick(ctx)
        ctx = session.tick(ctx)
        assert ctx.connection.state is ConnectionState.DISCONNECTED
        assert len(fake_server.transports) == 1

    def test_connect_timeout(self, config: Config, transport_factory, fake_server) -> None:
        """Test a connect that never completes is abandoned."""
        config.server.connect_timeout = -1.0

        def never_ready():
            transport = transport_factory()
            transport.ready = False
            return transport

        ctx = session.tick(SessionContext.create(config, transport_factory=never_ready))
        ctx = session.tick(ctx)
        assert ctx.connection.state is ConnectionState.DISCONNECTED
        assert ctx.connection.status_description == "Connecting to music.local:6600 timed out."

    def test_failed_handshake(self, config: Config, transport_factory, fake_server) -> None:
        """Test a refused connect leaves the session disconnected and empty."""

        def refusing():
            transport = transport_factory()
            transport.finish_error = ConnectionRefusedError(errno.ECONNREFUSED, "refused")
            return transport

        ctx = connected(SessionContext.create(config, transport_factory=refusing))
        assert ctx.connection.state is ConnectionState.DISCONNECTED
        assert ctx.database.is_empty


class TestConnectBlocking:
    """Tests for session.connect_blocking."""

    def test_connects(self, ctx: SessionContext) -> None:
        """Test the session is connected and loaded on return."""
        ctx = session.connect_blocking(ctx, timeout=1.0, sleep=lambda _: None)
        assert ctx.connection.is_connected
        assert ctx.status.ok
        assert ctx.database.song_count == 5

    def test_gives_up(self, config: Config, transport_factory) -> None:
        """Test an endpoint that never becomes ready times out."""

        def never_ready():
            transport = transport_factory()
            transport.ready = False
            return transport

        ticks = count()
        ctx = SessionContext.create(config, transport_factory=never_ready)
        ctx = session.connect_blocking(
            ctx, timeout=3.0, sleep=lambda _: None, clock=lambda: float(next(ticks))
        )
        assert not ctx.connection.is_connected
        assert ctx.connection.status_description.endswith("timed out.")


class TestDisconnect:
    """Tests for session.disconnect."""

    def test_sends_close(self, ctx: SessionContext, fake_server) -> None:
        """Test the server is told goodbye and state is dropped."""
        ctx = connected(ctx)
        ctx = session.disconnect(ctx)
        assert fake_server.received[-1] == "close"
        assert fake_server.transports[-1].closed
        assert ctx.database.is_empty
        assert not ctx.status.ok


class TestSessionContext:
    """Tests for SessionContext."""

    def test_with_status_copies(self, ctx: SessionContext) -> None:
        """Test with_status returns a new context sharing the components."""
        updated = ctx.with_status(ctx.status._replace(ok=True))
        assert updated is not ctx
        assert updated.status.ok and not ctx.status.ok
        assert updated.database is ctx.database

    def test_resolve_playable_uses_streams(self, ctx: SessionContext) -> None:
        """Test saved streams are consulted for non-library paths."""
        from mpd_minion.domain.library.models import Stream

        ctx.streams.add(Stream("http://radio.example/stream", "Radio"))
        assert ctx.resolve_playable("http://radio.example/stream").name == "Radio"

    def test_uses_configured_album_sort(self, config: Config, transport_factory) -> None:
        """Test the library settings reach the database."""
        config.library.album_sort_mode = "title"
        assert SessionContext.create(config, transport_factory=transport_factory).database.album_sort == "title"
