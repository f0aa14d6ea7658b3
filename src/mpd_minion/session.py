"""
Session polling: connection lifecycle and state refresh.

``tick`` is called periodically from the owning control flow. Each call
advances the connection state machine by at most one step and then brings
the derived state (status, library, queue, outputs) up to date.
"""

import time
from typing import Callable

from loguru import logger

from mpd_minion.context import SessionContext
from mpd_minion.domain.playback.status import ServerStatus, update_status
from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import ConnectionState


def clear_server_state(ctx: SessionContext) -> SessionContext:
    """Drop everything learned from the server."""
    ctx.database.clear()
    ctx.playlist.clear()
    ctx.saved_playlists.clear()
    ctx.outputs.clear()
    return ctx.with_status(ServerStatus())


def _on_connected(ctx: SessionContext) -> SessionContext:
    connection = ctx.connection
    password = ctx.config.server.password
    if password:
        response = commands.password(connection, password)
        if response is None:
            return clear_server_state(ctx)
        if not response.is_ok:
            logger.warning(f"Password rejected by {connection.endpoint}: {response.status}")

    ctx.database.refresh(connection)
    ctx.saved_playlists.refresh(connection, ctx.resolve_playable)
    ctx.outputs.update(connection)
    return _poll(ctx.with_status(ServerStatus()), force_playlist=True)


def _poll(ctx: SessionContext, force_playlist: bool = False) -> SessionContext:
    connection = ctx.connection
    previous = ctx.status
    status = update_status(connection, previous)
    if not connection.is_connected:
        return clear_server_state(ctx)

    database_changed = (
        previous.ok
        and status.ok
        and status.database_update_time != previous.database_update_time
    )
    if database_changed:
        logger.info("Server database changed, refreshing collection")
        ctx.database.refresh(connection)
        ctx.saved_playlists.refresh(connection, ctx.resolve_playable)

    if database_changed or force_playlist:
        # entries must be re-resolved against the new collection
        ctx.playlist.clear()
    ctx.playlist.update(connection, status, ctx.resolve_playable)
    ctx.outputs.update(connection)

    if not connection.is_connected:
        return clear_server_state(ctx)
    return ctx.with_status(status)


def tick(ctx: SessionContext) -> SessionContext:
    """Advance the session by one polling step.

    Returns:
        The updated context.
    """
    connection = ctx.connection
    server = ctx.config.server

    if connection.state is ConnectionState.DISCONNECTED:
        if connection.time_since_disconnect() >= server.reconnect_interval:
            connection.start_connecting()
        return ctx

    if connection.state is ConnectionState.CONNECTING:
        if connection.is_ready_to_connect:
            if connection.finish_connecting() is None:
                return clear_server_state(ctx)
            return _on_connected(ctx)
        if connection.connecting_for() > server.connect_timeout:
            logger.warning(f"Connecting to {connection.endpoint} timed out")
            connection.disconnect()
            connection.status_description = f"Connecting to {connection.endpoint} timed out."
            return clear_server_state(ctx)
        return ctx

    return _poll(ctx)


def disconnect(ctx: SessionContext) -> SessionContext:
    """Say goodbye to the server and drop all server state."""
    if ctx.connection.is_connected:
        commands.close(ctx.connection)
    ctx.connection.disconnect()
    return clear_server_state(ctx)


def connect_blocking(
    ctx: SessionContext,
    timeout: float = 5.0,
    poll_interval: float = 0.05,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> SessionContext:
    """Connect and load server state, ticking until connected or timed out.

    Callers check ``ctx.connection.is_connected`` on the returned context.
    """
    connection = ctx.connection
    if not connection.is_connected:
        connection.start_connecting()
    deadline = clock() + timeout

    while connection.state is ConnectionState.CONNECTING:
        ctx = tick(ctx)
        if connection.state is not ConnectionState.CONNECTING:
            break
        if clock() >= deadline:
            logger.warning(f"Gave up connecting to {connection.endpoint} after {timeout}s")
            connection.disconnect()
            connection.status_description = f"Connecting to {connection.endpoint} timed out."
            return clear_server_state(ctx)
        sleep(poll_interval)

    if connection.is_connected and not ctx.status.ok:
        ctx = _poll(ctx)
    return ctx
