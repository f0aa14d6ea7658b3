"""
Connection state machine and response framing for the server protocol.

A connection moves Disconnected -> Connecting -> Connected -> Disconnected.
Connecting is entered by a non-blocking connect which the caller polls with
``is_ready_to_connect`` before calling ``finish_connecting`` to read the
greeting banner. Exactly one command may be outstanding at a time.
"""

import time
from enum import Enum
from typing import Callable, List, Optional

from loguru import logger

from .errors import CommandSequenceError, TransportError
from .response import Response
from .transport import SocketTransport, Transport

RECEIVE_CHUNK_SIZE = 4096
BANNER_PREFIX = "OK MPD "


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def is_status_line(line: str) -> bool:
    """True for the line that terminates a response.

    The greeting banner ("OK MPD 0.23.5") also counts, since it is read as
    a response of its own.
    """
    return line == "OK" or line.startswith("OK ") or line.startswith("ACK")


class Connection:
    """One client connection to the server.

    Transport failures never escape this class: they turn into a disconnect
    and a human-readable ``status_description``.
    """

    def __init__(
        self,
        transport_factory: Callable[[], Transport] = SocketTransport,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._transport_factory = transport_factory
        self._clock = clock
        self._transport: Optional[Transport] = None
        self._buffer = bytearray()
        self._pending = False
        self._connect_started_at: Optional[float] = None
        self._disconnected_at: Optional[float] = None

        self.host: Optional[str] = None
        self.port: int = 0
        self.state = ConnectionState.DISCONNECTED
        self.status_description = ""
        self.protocol_version: Optional[str] = None
        self.bytes_sent = 0
        self.bytes_received = 0

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def is_ready_to_connect(self) -> bool:
        """True when a pending connect attempt can be finished without blocking."""
        if self.state is not ConnectionState.CONNECTING or self._transport is None:
            return False
        try:
            return self._transport.connect_ready()
        except OSError as e:
            logger.warning(f"Polling connect to {self.endpoint} failed: {e}")
            return True

    def set_host(self, host: str, port: int) -> None:
        if self._transport is not None:
            self.disconnect()
            self.status_description = f"Disconnected from {self.endpoint}."
        self.host = host
        self.port = port

    def start_connecting(self) -> None:
        """Begin a non-blocking connect to the configured host."""
        if self.host is None:
            raise ValueError("set_host() must be called before connecting")

        self.disconnect()
        self.state = ConnectionState.CONNECTING
        self._connect_started_at = self._clock()
        self.status_description = f"Connecting to {self.endpoint}."
        logger.info(f"Connecting to {self.endpoint}")

        self._transport = self._transport_factory()
        try:
            self._transport.start_connect(self.host, self.port)
        except OSError as e:
            logger.warning(f"Connecting to {self.endpoint} failed: {e}")
            self.disconnect()
            self.status_description = f"Connecting to {self.endpoint} failed."

    def connecting_for(self) -> float:
        """Seconds spent in the current connect attempt, 0 when not connecting."""
        if self.state is not ConnectionState.CONNECTING or self._connect_started_at is None:
            return 0.0
        return self._clock() - self._connect_started_at

    def time_since_disconnect(self) -> float:
        """Seconds since the last disconnect, infinite if never connected."""
        if self._disconnected_at is None:
            return float("inf")
        return self._clock() - self._disconnected_at

    def finish_connecting(self) -> Optional[Response]:
        """Complete the connect and read the greeting banner.

        Returns:
            The banner response, or None if the connect failed or the server
            did not greet like an MPD server.
        """
        if self.state is not ConnectionState.CONNECTING or self._transport is None:
            return None

        try:
            self._transport.finish_connect()
        except OSError as e:
            logger.warning(f"Connecting to {self.endpoint} failed: {e}")
            self.disconnect()
            self.status_description = f"Connecting to {self.endpoint} failed."
            return None

        self.state = ConnectionState.CONNECTED
        self._pending = True
        banner = self.receive_response()
        if banner is None:
            return None

        if banner.status is None or not banner.status.startswith(BANNER_PREFIX):
            logger.warning(f"Unexpected greeting from {self.endpoint}: {banner.status!r}")
            self.disconnect()
            self.status_description = f"Connecting to {self.endpoint} failed."
            return None

        self.protocol_version = banner.status[len(BANNER_PREFIX):].strip()
        self._connect_started_at = None
        self.status_description = f"Connected to {self.endpoint}."
        logger.info(f"Connected to {self.endpoint} (protocol {self.protocol_version})")
        return banner

    def disconnect(self) -> None:
        """Close the transport and drop any buffered or pending data."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            self._disconnected_at = self._clock()
            if self.state is ConnectionState.CONNECTED:
                self.status_description = f"Disconnected from {self.endpoint}."
                logger.info(f"Disconnected from {self.endpoint}")

        self._buffer.clear()
        self._pending = False
        self._connect_started_at = None
        self.protocol_version = None
        self.bytes_sent = 0
        self.bytes_received = 0
        self.state = ConnectionState.DISCONNECTED

    def send_command(self, command: str) -> bool:
        """Write one command line and mark a response as outstanding.

        Returns:
            False if not connected or the write failed (which disconnects).

        Raises:
            CommandSequenceError: If the previous response was never received.
        """
        if self._pending:
            raise CommandSequenceError(
                f"cannot send {command.split(' ', 1)[0]!r}: previous response not received"
            )
        if not self._write(command):
            return False
        self._pending = True
        return True

    def send_only(self, command: str) -> bool:
        """Write a command that the server never answers (such as ``close``)."""
        if self._pending:
            raise CommandSequenceError("cannot send while a response is outstanding")
        return self._write(command)

    def receive_response(self) -> Optional[Response]:
        """Read lines until the status line and return them as one Response.

        Blocks until the status line arrives or the transport fails. Returns
        None when disconnected, including when the transport fails mid-read.

        Raises:
            CommandSequenceError: If no command is outstanding.
        """
        if not self.is_connected:
            return None
        if not self._pending:
            raise CommandSequenceError("receive_response() called with no command outstanding")

        lines: List[str] = []
        try:
            while True:
                line = self._read_line()
                lines.append(line)
                if is_status_line(line):
                    break
        except (OSError, TransportError) as e:
            self._lose(e)
            return None
        except BaseException:
            # a partly read reply would misframe every later response
            logger.warning(f"Read from {self.endpoint} interrupted, disconnecting")
            self.disconnect()
            raise
        self._pending = False

        if lines[-1].startswith("ACK"):
            logger.debug(f"Server replied {lines[-1]!r}")
        return Response(lines)

    def _write(self, command: str) -> bool:
        if not self.is_connected or self._transport is None:
            return False
        data = (command + "\n").encode("utf-8")
        try:
            self._transport.send(data)
        except OSError as e:
            self._lose(e)
            return False
        self.bytes_sent += len(data)
        logger.debug(f"-> {command.split(' ', 1)[0]}")
        return True

    def _read_line(self) -> str:
        while True:
            newline = self._buffer.find(b"\n")
            if newline >= 0:
                raw = bytes(self._buffer[:newline])
                del self._buffer[: newline + 1]
                return raw.decode("utf-8", errors="replace")

            chunk = self._transport.recv(RECEIVE_CHUNK_SIZE)
            if not chunk:
                raise TransportError("connection closed by server")
            self.bytes_received += len(chunk)
            self._buffer.extend(chunk)

    def _lose(self, error: Exception) -> None:
        logger.error(f"Connection to {self.endpoint} lost: {error}")
        self.disconnect()
        self.status_description = f"Connection to {self.endpoint} lost."
