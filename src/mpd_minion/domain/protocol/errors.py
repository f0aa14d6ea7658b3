"""
Protocol client exceptions.

Server-side failures (ACK responses) are returned as values on the Response
and never raised; these exceptions cover misuse of the connection and the
transport failures the connection converts into a disconnect.
"""


class MpdError(Exception):
    """Base exception for protocol client errors."""

    pass


class CommandSequenceError(MpdError):
    """Raised when a send/receive call breaks the one-command-in-flight rule."""

    pass


class TransportError(MpdError):
    """Raised when the underlying stream fails or the peer closes it."""

    pass
