"""Tests for audio output tracking."""

from mpd_minion.domain.playback.outputs import Output, OutputCollection, parse_outputs
from mpd_minion.domain.protocol.connection import Connection
from mpd_minion.domain.protocol.response import Response


class TestParseOutputs:
    """Tests for parse_outputs."""

    def test_parses_triples(self) -> None:
        """Test id/name/enabled triples become outputs."""
        response = Response(
            ["outputid: 0", "outputname: A", "outputenabled: 1", "outputid: 1", "outputname: B", "outputenabled: 0", "OK"]
        )
        assert parse_outputs(response) == [Output(0, "A", True), Output(1, "B", False)]

    def test_non_sequential_ids(self) -> None:
        """Test gaps in output ids invalidate the list."""
        response = Response(["outputid: 1", "outputname: A", "outputenabled: 1", "OK"])
        assert parse_outputs(response) is None

    def test_unknown_line(self) -> None:
        """Test unexpected fields invalidate the list."""
        response = Response(["outputid: 0", "volume: 3", "OK"])
        assert parse_outputs(response) is None

    def test_plugin_and_attribute_ignored(self) -> None:
        """Test informational fields from newer servers are accepted."""
        response = Response(
            ["outputid: 0", "outputname: A", "plugin: alsa", "outputenabled: 1", "attribute: dop=0", "OK"]
        )
        assert parse_outputs(response) == [Output(0, "A", True)]


class TestOutputCollection:
    """Tests for OutputCollection."""

    def test_update(self, connection: Connection) -> None:
        """Test outputs are read from the server."""
        outputs = OutputCollection()
        assert outputs.update(connection)
        assert [(o.name, o.enabled) for o in outputs.items] == [("Speakers", True), ("Headphones", False)]

    def test_same_names_update_in_place(self, connection: Connection, fake_server) -> None:
        """Test existing output objects are kept when names are unchanged."""
        outputs = OutputCollection()
        outputs.update(connection)
        speakers = outputs.items[0]
        fake_server.responses["outputs"] = [
            "outputid: 0", "outputname: Speakers", "outputenabled: 0",
            "outputid: 1", "outputname: Headphones", "outputenabled: 1", "OK",
        ]
        outputs.update(connection)
        assert outputs.items[0] is speakers
        assert not speakers.enabled
        assert outputs.items[1].enabled

    def test_malformed_clears(self, connection: Connection, fake_server) -> None:
        """Test a malformed response empties the list."""
        outputs = OutputCollection()
        outputs.update(connection)
        fake_server.responses["outputs"] = ["outputid: 3", "OK"]
        assert not outputs.update(connection)
        assert outputs.items == []

    def test_disconnected(self, connection: Connection) -> None:
        """Test no outputs without a connection."""
        connection.disconnect()
        outputs = OutputCollection()
        assert not outputs.update(connection)

    def test_set_enabled(self, connection: Connection, fake_server) -> None:
        """Test toggling sends the command and re-reads the list."""
        fake_server.responses["enableoutput 1"] = ["OK"]
        outputs = OutputCollection()
        assert outputs.set_enabled(connection, 1, True)
        assert fake_server.received == ["enableoutput 1", "outputs"]
