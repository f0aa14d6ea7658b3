"""
mpd-minion CLI - entry point

Connects to the configured server, loads the collection and runs one
subcommand against it.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from loguru import logger
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from mpd_minion import session
from mpd_minion.context import SessionContext
from mpd_minion.core.config import load_config
from mpd_minion.core.console import create_console, safe_print
from mpd_minion.core.output import log, setup_from_config
from mpd_minion.domain.library.items import (
    AlbumItem,
    ArtistItem,
    GenreItem,
    display_text,
    format_length,
    item_for_playable,
)
from mpd_minion.domain.library.models import Album, Song
from mpd_minion.domain.library.search import CollectionSearch
from mpd_minion.domain.library.tree import DirectoryTree
from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.response import Response

SEARCH_TIMEOUT = 30.0


def report(ctx: SessionContext, response: Optional[Response]) -> int:
    """Turn a command response into an exit code, printing server errors.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if response is None:
        log(f"Error: {ctx.connection.status_description or 'not connected'}", level="error")
        return 1
    if not response.is_ok:
        error = response.error
        message = error.message if error is not None else response.status
        log(f"Error: {message}", level="error")
        return 1
    return 0


def cmd_status(ctx: SessionContext, args: argparse.Namespace) -> int:
    status = ctx.status
    table = Table(show_header=False, box=None)
    table.add_row("Server", escape(ctx.connection.status_description))
    table.add_row("Protocol", ctx.connection.protocol_version or "?")
    table.add_row("Now", escape(ctx.playlist.play_status_description or "Unknown."))
    if status.is_playing or status.is_paused:
        table.add_row(
            "Position", f"{format_length(status.play_position)} / {format_length(status.song_length)}"
        )
    table.add_row("Volume", "n/a" if status.volume is None else f"{status.volume}%")
    table.add_row("Random", "on" if status.random else "off")
    table.add_row("Repeat", "on" if status.repeat else "off")
    table.add_row("Queue", f"{len(ctx.playlist.items)} entries")
    table.add_row(
        "Library",
        f"{ctx.database.song_count} songs, {len(ctx.database.artists)} artists, "
        f"{len(ctx.database.albums)} albums",
    )
    ctx.console.print(table)
    return 0


def cmd_artists(ctx: SessionContext, args: argparse.Namespace) -> int:
    for artist in ctx.database.artists:
        safe_print(ctx.console, escape(display_text(ArtistItem(artist))))
    return 0


def cmd_genres(ctx: SessionContext, args: argparse.Namespace) -> int:
    for genre in ctx.database.genres:
        safe_print(ctx.console, escape(display_text(GenreItem(genre))))
    return 0


def cmd_albums(ctx: SessionContext, args: argparse.Namespace) -> int:
    if args.artist:
        albums = ctx.database.albums_by_artist(args.artist)
    elif args.genre:
        albums = ctx.database.albums_by_genre(args.genre)
    else:
        albums = ctx.database.albums

    table = Table("Artist", "Album", "Songs")
    for album in albums:
        table.add_row(escape(album.artist), escape(display_text(AlbumItem(album))), str(len(ctx.database.paths_by_album(album))))
    ctx.console.print(table)
    return 0


def _song_table(songs: List[Song], title: Optional[str] = None) -> Table:
    table = Table("#", "Artist", "Title", "Album", "Length", title=title)
    for song in songs:
        table.add_row(
            "" if song.track is None else str(song.track),
            escape(song.artist),
            escape(song.title),
            escape(song.album),
            format_length(song.length),
        )
    return table


def cmd_songs(ctx: SessionContext, args: argparse.Namespace) -> int:
    songs = ctx.database.songs_by_album(Album(args.artist, args.album))
    if not songs:
        log(f"No album {args.album!r} by {args.artist!r}", level="error")
        return 1
    ctx.console.print(_song_table(songs))
    return 0


def _add_tree_children(tree: DirectoryTree, node_id: int, branch: Tree, depth: Optional[int]) -> None:
    if depth is not None and depth <= 0:
        return
    for child_id in tree.node(node_id).children:
        child = tree.node(child_id)
        label = f"[dim]{child.id}[/dim] {escape(child.name)}" + ("" if child.is_leaf else "/")
        sub = branch.add(label)
        _add_tree_children(tree, child_id, sub, None if depth is None else depth - 1)


def cmd_tree(ctx: SessionContext, args: argparse.Namespace) -> int:
    tree = ctx.database.directory_tree()
    root = Tree(f"[dim]0[/dim] {escape(tree.root.name)}")
    _add_tree_children(tree, 0, root, args.depth)
    ctx.console.print(root)
    return 0


def cmd_search(ctx: SessionContext, args: argparse.Namespace) -> int:
    query = " ".join(args.query)
    search = CollectionSearch(
        lambda: ctx.database.songs,
        batch_interval_ms=ctx.config.search.batch_interval_ms,
        min_fragment_length=ctx.config.search.min_fragment_length,
    )
    found: List[Song] = []
    try:
        search.submit(query)
        while True:
            batch = search.wait_for_results(timeout=SEARCH_TIMEOUT)
            found.extend(batch.songs)
            if batch.complete:
                break
    finally:
        search.close()

    ctx.console.print(_song_table(found, title=escape(f"{len(found)} matches for {query!r}")))
    return 0


def cmd_queue(ctx: SessionContext, args: argparse.Namespace) -> int:
    table = Table("", "Id", "Pos", "Entry")
    for item in ctx.playlist.items:
        table.add_row(
            ">" if item.is_current else "",
            str(item.id),
            str(item.position),
            escape(display_text(item_for_playable(item.playable))),
        )
    ctx.console.print(table)
    safe_print(ctx.console, escape(ctx.playlist.play_status_description), style="bold")
    return 0


def cmd_playlists(ctx: SessionContext, args: argparse.Namespace) -> int:
    if args.name is None:
        for name in ctx.saved_playlists.names:
            safe_print(ctx.console, escape(name))
        return 0
    if args.name not in ctx.saved_playlists.names:
        log(f"No stored playlist named {args.name!r}", level="error")
        return 1
    for playable in ctx.saved_playlists.contents(args.name):
        safe_print(ctx.console, escape(display_text(item_for_playable(playable))))
    return 0


def cmd_outputs(ctx: SessionContext, args: argparse.Namespace) -> int:
    if args.enable is not None or args.disable is not None:
        index = args.enable if args.enable is not None else args.disable
        if not ctx.outputs.set_enabled(ctx.connection, index, args.enable is not None):
            log(f"Error: could not change output {index}", level="error")
            return 1

    table = Table("Id", "Name", "Enabled")
    for output in ctx.outputs.items:
        table.add_row(str(output.index), escape(output.name), "yes" if output.enabled else "no")
    ctx.console.print(table)
    return 0


def cmd_play(ctx: SessionContext, args: argparse.Namespace) -> int:
    if args.id is None:
        return report(ctx, commands.play(ctx.connection))
    return report(ctx, commands.play_id(ctx.connection, args.id))


def cmd_seek(ctx: SessionContext, args: argparse.Namespace) -> int:
    if ctx.status.current_song_index < 0:
        log("Error: nothing is playing", level="error")
        return 1
    return report(ctx, commands.seek(ctx.connection, ctx.status.current_song_index, args.seconds))


def _simple(command: Callable) -> Callable[[SessionContext, argparse.Namespace], int]:
    def handler(ctx: SessionContext, args: argparse.Namespace) -> int:
        return report(ctx, command(ctx.connection))

    return handler


COMMANDS: Dict[str, Callable[[SessionContext, argparse.Namespace], int]] = {
    "status": cmd_status,
    "artists": cmd_artists,
    "genres": cmd_genres,
    "albums": cmd_albums,
    "songs": cmd_songs,
    "tree": cmd_tree,
    "search": cmd_search,
    "queue": cmd_queue,
    "playlists": cmd_playlists,
    "outputs": cmd_outputs,
    "play": cmd_play,
    "pause": _simple(commands.pause),
    "stop": _simple(commands.stop),
    "next": _simple(commands.next_song),
    "previous": _simple(commands.previous),
    "add": lambda ctx, args: report(ctx, commands.add(ctx.connection, args.path)),
    "volume": lambda ctx, args: report(ctx, commands.set_vol(ctx.connection, args.level)),
    "seek": cmd_seek,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mpd-minion",
        description="mpd-minion - browse and control an MPD server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument("--host", help="Server host (overrides config and MPD_HOST)")
    parser.add_argument("--port", type=int, help="Server port (overrides config and MPD_PORT)")
    parser.add_argument("--password", help="Server password")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="subcommand", required=True, help="Available commands")

    # Browsing
    subparsers.add_parser("status", help="Show playback and library status")
    subparsers.add_parser("artists", help="List artists")
    subparsers.add_parser("genres", help="List genres")
    albums_parser = subparsers.add_parser("albums", help="List albums")
    albums_filter = albums_parser.add_mutually_exclusive_group()
    albums_filter.add_argument("--artist", help="Only albums by this artist")
    albums_filter.add_argument("--genre", help="Only albums in this genre")
    songs_parser = subparsers.add_parser("songs", help="List songs on an album")
    songs_parser.add_argument("artist")
    songs_parser.add_argument("album")
    tree_parser = subparsers.add_parser("tree", help="Show the directory tree")
    tree_parser.add_argument("--depth", type=int, help="Maximum depth to show")
    search_parser = subparsers.add_parser("search", help="Quick search artist/album/title")
    search_parser.add_argument("query", nargs="+")

    # Queue and playlists
    subparsers.add_parser("queue", help="Show the play queue")
    playlists_parser = subparsers.add_parser("playlists", help="List stored playlists")
    playlists_parser.add_argument("name", nargs="?", help="Show this playlist's entries")
    add_parser = subparsers.add_parser("add", help="Append a song or directory to the queue")
    add_parser.add_argument("path")

    # Outputs
    outputs_parser = subparsers.add_parser("outputs", help="List or toggle audio outputs")
    outputs_toggle = outputs_parser.add_mutually_exclusive_group()
    outputs_toggle.add_argument("--enable", type=int, metavar="ID")
    outputs_toggle.add_argument("--disable", type=int, metavar="ID")

    # Playback
    play_parser = subparsers.add_parser("play", help="Start playback")
    play_parser.add_argument("id", type=int, nargs="?", help="Queue entry id")
    subparsers.add_parser("pause", help="Toggle pause")
    subparsers.add_parser("stop", help="Stop playback")
    subparsers.add_parser("next", help="Next song")
    subparsers.add_parser("previous", help="Previous song")
    volume_parser = subparsers.add_parser("volume", help="Set volume")
    volume_parser.add_argument("level", type=int, choices=range(0, 101), metavar="0-100")
    seek_parser = subparsers.add_parser("seek", help="Seek within the current song")
    seek_parser.add_argument("seconds", type=int)

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, connect and run one subcommand.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.password:
        config.server.password = args.password

    setup_from_config(config.logging, level="DEBUG" if args.verbose else None)

    ctx = SessionContext.create(config, console=create_console())
    ctx = session.connect_blocking(ctx, timeout=config.server.connect_timeout)
    if not ctx.connection.is_connected:
        log(f"Error: {ctx.connection.status_description}", level="error")
        return 1

    try:
        return COMMANDS[args.subcommand](ctx, args)
    except KeyboardInterrupt:
        return 130
    finally:
        session.disconnect(ctx)
        logger.debug(f"Finished {args.subcommand}")


def main() -> None:
    """Main entry point for the mpd-minion command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
