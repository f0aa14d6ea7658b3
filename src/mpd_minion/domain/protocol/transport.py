"""
Byte-stream transports for the protocol connection.

The connection only needs ordered bytes over a host:port endpoint plus a way
to ask whether a non-blocking connect has completed.
"""

import errno
import select
import socket
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger


class Transport(ABC):
    """Ordered byte stream with a pollable connect step."""

    @abstractmethod
    def start_connect(self, host: str, port: int) -> None:
        """Begin connecting without blocking. Raises OSError on immediate failure."""

    @abstractmethod
    def connect_ready(self) -> bool:
        """True once the pending connect has either completed or failed."""

    @abstractmethod
    def finish_connect(self) -> None:
        """Complete the connect. Raises OSError if it failed."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Write all of ``data``. Raises OSError on failure."""

    @abstractmethod
    def recv(self, size: int) -> bytes:
        """Read up to ``size`` bytes. Returns b"" when the peer has closed."""

    @abstractmethod
    def close(self) -> None:
        """Release the stream. Safe to call more than once."""


class SocketTransport(Transport):
    """TCP transport built on a plain socket."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Blocking timeout for reads and writes once connected.
                None blocks until data arrives or the stream fails.
        """
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None

    def start_connect(self, host: str, port: int) -> None:
        self.close()
        family, socktype, proto, _, address = socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM
        )[0]
        sock = socket.socket(family, socktype, proto)
        sock.setblocking(False)
        result = sock.connect_ex(address)
        if result not in (0, errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EALREADY):
            sock.close()
            raise OSError(result, f"connect to {host}:{port} failed")
        self._sock = sock
        logger.debug(f"Non-blocking connect to {host}:{port} started")

    def connect_ready(self) -> bool:
        if self._sock is None:
            return False
        _, writable, failed = select.select([], [self._sock], [self._sock], 0)
        return bool(writable or failed)

    def finish_connect(self) -> None:
        if self._sock is None:
            raise OSError(errno.ENOTCONN, "no connect in progress")
        error = self._sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if error:
            raise OSError(error, "connect failed")
        self._sock.setblocking(True)
        self._sock.settimeout(self.timeout)

    def send(self, data: bytes) -> None:
        if self._sock is None:
            raise OSError(errno.ENOTCONN, "not connected")
        self._sock.sendall(data)

    def recv(self, size: int) -> bytes:
        if self._sock is None:
            raise OSError(errno.ENOTCONN, "not connected")
        return self._sock.recv(size)

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Ignoring error while closing socket: {e}")
            self._sock = None
