"""Protocol domain - line protocol client for MPD-style servers.

This domain handles:
- Parsing response lines and framing whole responses
- The connection state machine over a pluggable transport
- Serializing server commands with proper string quoting
"""

from .connection import Connection, ConnectionState, is_status_line
from .errors import CommandSequenceError, MpdError, TransportError
from .response import AckError, Response, ResponseLine
from .transport import SocketTransport, Transport
from .commands import execute, quote_string

__all__ = [
    "Connection",
    "ConnectionState",
    "is_status_line",
    "CommandSequenceError",
    "MpdError",
    "TransportError",
    "AckError",
    "Response",
    "ResponseLine",
    "SocketTransport",
    "Transport",
    "execute",
    "quote_string",
]
