"""
Server command layer.

Each function serializes its arguments, sends one command line and returns
the server's Response. Every function returns None without touching the wire
when the connection is down or the transport fails.
"""

from typing import Optional

from .connection import Connection
from .response import Response


def quote_string(value: str) -> str:
    """Escape backslashes and double quotes, then wrap in double quotes.

    Raises:
        ValueError: If the value contains a newline, which would end the command line.
    """
    if "\n" in value:
        raise ValueError(f"Argument contains a newline: {value!r}")
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _flag(value: bool) -> str:
    return "1" if value else "0"


def execute(connection: Connection, command: str) -> Optional[Response]:
    """Send a raw command line and wait for its response."""
    if not connection.send_command(command):
        return None
    return connection.receive_response()


# Database

def update(connection: Connection) -> Optional[Response]:
    return execute(connection, "update")


def stats(connection: Connection) -> Optional[Response]:
    return execute(connection, "stats")


def list_all_info(connection: Connection) -> Optional[Response]:
    """Bulk dump of every song the server knows about."""
    return execute(connection, "listallinfo")


def ls_info(connection: Connection, path: Optional[str] = None) -> Optional[Response]:
    if path is None:
        return execute(connection, "lsinfo")
    return execute(connection, f"lsinfo {quote_string(path)}")


def search(connection: Connection, tag: str, what: str) -> Optional[Response]:
    return execute(connection, f"search {tag} {quote_string(what)}")


# Status

def status(connection: Connection) -> Optional[Response]:
    return execute(connection, "status")


def current_song(connection: Connection) -> Optional[Response]:
    return execute(connection, "currentsong")


# Queue

def add(connection: Connection, path: str) -> Optional[Response]:
    return execute(connection, f"add {quote_string(path)}")


def add_id(connection: Connection, path: str, position: Optional[int] = None) -> Optional[Response]:
    if position is None:
        return execute(connection, f"addid {quote_string(path)}")
    return execute(connection, f"addid {quote_string(path)} {position}")


def clear(connection: Connection) -> Optional[Response]:
    return execute(connection, "clear")


def delete_id(connection: Connection, song_id: int) -> Optional[Response]:
    return execute(connection, f"deleteid {song_id}")


def move_id(connection: Connection, song_id: int, position: int) -> Optional[Response]:
    return execute(connection, f"moveid {song_id} {position}")


def playlist_info(connection: Connection) -> Optional[Response]:
    return execute(connection, "playlistinfo")


def shuffle(connection: Connection) -> Optional[Response]:
    return execute(connection, "shuffle")


# Stored playlists

def list_playlists(connection: Connection) -> Optional[Response]:
    return execute(connection, "listplaylists")


def list_playlist(connection: Connection, name: str) -> Optional[Response]:
    return execute(connection, f"listplaylist {quote_string(name)}")


def list_playlist_info(connection: Connection, name: str) -> Optional[Response]:
    return execute(connection, f"listplaylistinfo {quote_string(name)}")


def load(connection: Connection, name: str) -> Optional[Response]:
    return execute(connection, f"load {quote_string(name)}")


def save(connection: Connection, name: str) -> Optional[Response]:
    return execute(connection, f"save {quote_string(name)}")


def rename(connection: Connection, old_name: str, new_name: str) -> Optional[Response]:
    return execute(connection, f"rename {quote_string(old_name)} {quote_string(new_name)}")


def rm(connection: Connection, name: str) -> Optional[Response]:
    return execute(connection, f"rm {quote_string(name)}")


# Playback

def next_song(connection: Connection) -> Optional[Response]:
    return execute(connection, "next")


def previous(connection: Connection) -> Optional[Response]:
    return execute(connection, "previous")


def pause(connection: Connection, paused: Optional[bool] = None) -> Optional[Response]:
    """Toggle pause, or set it explicitly when ``paused`` is given."""
    if paused is None:
        return execute(connection, "pause")
    return execute(connection, f"pause {_flag(paused)}")


def play(connection: Connection, position: Optional[int] = None) -> Optional[Response]:
    if position is None:
        return execute(connection, "play")
    return execute(connection, f"play {position}")


def play_id(connection: Connection, song_id: int) -> Optional[Response]:
    return execute(connection, f"playid {song_id}")


def stop(connection: Connection) -> Optional[Response]:
    return execute(connection, "stop")


def seek(connection: Connection, position: int, seconds: int) -> Optional[Response]:
    """Seek to ``seconds`` within the queue entry at ``position``."""
    return execute(connection, f"seek {position} {seconds}")


def set_vol(connection: Connection, volume: int) -> Optional[Response]:
    return execute(connection, f"setvol {volume}")


def random(connection: Connection, enabled: bool) -> Optional[Response]:
    return execute(connection, f"random {_flag(enabled)}")


def repeat(connection: Connection, enabled: bool) -> Optional[Response]:
    return execute(connection, f"repeat {_flag(enabled)}")


# Outputs

def outputs(connection: Connection) -> Optional[Response]:
    return execute(connection, "outputs")


def enable_output(connection: Connection, index: int) -> Optional[Response]:
    return execute(connection, f"enableoutput {index}")


def disable_output(connection: Connection, index: int) -> Optional[Response]:
    return execute(connection, f"disableoutput {index}")


# Connection

def password(connection: Connection, secret: str) -> Optional[Response]:
    return execute(connection, f"password {quote_string(secret)}")


def close(connection: Connection) -> None:
    """Ask the server to drop the connection. The server sends no reply."""
    connection.send_only("close")
