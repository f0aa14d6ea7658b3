"""Tests for command serialization."""

import pytest

from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.commands import quote_string
from mpd_minion.domain.protocol.connection import Connection


class TestQuoteString:
    """Tests for quote_string."""

    def test_plain(self) -> None:
        """Test plain text is only wrapped in quotes."""
        assert quote_string("Artist A/First") == '"Artist A/First"'

    def test_escapes_quotes_and_backslashes(self) -> None:
        """Test backslashes are doubled and quotes escaped."""
        assert quote_string('He said "hi"\\now') == '"He said \\"hi\\"\\\\now"'

    def test_empty(self) -> None:
        """Test the empty string still yields a quoted argument."""
        assert quote_string("") == '""'

    def test_newline_rejected(self) -> None:
        """Test a newline cannot split one argument into two command lines."""
        with pytest.raises(ValueError):
            quote_string("a.mp3\nclear")


class TestCommandLines:
    """Tests for the wire text each command function sends."""

    @pytest.fixture
    def wire(self, connection: Connection, fake_server):
        """Return the lines the server received, answering everything with OK."""
        fake_server.responses.clear()
        original = fake_server.reply

        def reply_ok(command: str) -> bytes:
            fake_server.received.append(command)
            return b"" if command == "close" else b"OK\n"

        fake_server.reply = reply_ok
        yield fake_server.received
        fake_server.reply = original

    def test_add_escapes_path(self, connection: Connection, wire) -> None:
        """Test user-supplied paths are quoted on the wire."""
        commands.add(connection, 'He said "hi"\\now')
        assert wire == ['add "He said \\"hi\\"\\\\now"']

    def test_newline_path_sends_nothing(self, connection: Connection, wire) -> None:
        """Test a path with a newline is refused before anything is written."""
        with pytest.raises(ValueError):
            commands.add(connection, "a.mp3\nclear")
        assert wire == []
        assert commands.status(connection).is_ok

    @pytest.mark.parametrize(
        "call, expected",
        [
            (lambda c: commands.add_id(c, "a b.mp3", 4), 'addid "a b.mp3" 4'),
            (lambda c: commands.add_id(c, "a.mp3"), 'addid "a.mp3"'),
            (lambda c: commands.play_id(c, 7), "playid 7"),
            (lambda c: commands.play(c), "play"),
            (lambda c: commands.play(c, 2), "play 2"),
            (lambda c: commands.seek(c, 3, 120), "seek 3 120"),
            (lambda c: commands.set_vol(c, 50), "setvol 50"),
            (lambda c: commands.move_id(c, 12, 4), "moveid 12 4"),
            (lambda c: commands.delete_id(c, 12), "deleteid 12"),
            (lambda c: commands.random(c, True), "random 1"),
            (lambda c: commands.repeat(c, False), "repeat 0"),
            (lambda c: commands.pause(c), "pause"),
            (lambda c: commands.pause(c, True), "pause 1"),
            (lambda c: commands.save(c, "My List"), 'save "My List"'),
            (lambda c: commands.load(c, "My List"), 'load "My List"'),
            (lambda c: commands.rename(c, "Old", "New"), 'rename "Old" "New"'),
            (lambda c: commands.rm(c, "Old"), 'rm "Old"'),
            (lambda c: commands.list_playlist(c, "Mix"), 'listplaylist "Mix"'),
            (lambda c: commands.enable_output(c, 1), "enableoutput 1"),
            (lambda c: commands.disable_output(c, 0), "disableoutput 0"),
            (lambda c: commands.password(c, 'pa"ss'), 'password "pa\\"ss"'),
            (lambda c: commands.ls_info(c), "lsinfo"),
            (lambda c: commands.search(c, "artist", "Björk"), 'search artist "Björk"'),
            (lambda c: commands.list_all_info(c), "listallinfo"),
            (lambda c: commands.next_song(c), "next"),
        ],
    )
    def test_wire_text(self, connection: Connection, wire, call, expected: str) -> None:
        """Test each command's serialized line."""
        response = call(connection)
        assert wire == [expected]
        assert response.is_ok

    def test_close_expects_no_reply(self, connection: Connection, wire) -> None:
        """Test close is sent without waiting for a response."""
        assert commands.close(connection) is None
        assert wire == ["close"]

    def test_one_exchange_per_command(self, connection: Connection, wire) -> None:
        """Test consecutive commands each complete their own round trip."""
        commands.stop(connection)
        commands.clear(connection)
        assert wire == ["stop", "clear"]


class TestDisconnected:
    """Tests for commands issued without a connection."""

    def test_not_attempted(self, transport_factory, fake_server) -> None:
        """Test commands return None and write nothing while disconnected."""
        connection = Connection(transport_factory)
        assert commands.status(connection) is None
        assert commands.add(connection, "a.mp3") is None
        assert fake_server.received == []
