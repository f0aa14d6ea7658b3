"""
Response parsing for the line-oriented server protocol.

A server reply is zero or more "Name: Value" lines followed by exactly one
status line, either "OK" or "ACK [code@index] {command} message".
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Sequence

_ACK_PATTERN = re.compile(r"^ACK \[(\d+)@(\d+)\] \{([^}]*)\} ?(.*)$")


@dataclass(frozen=True)
class ResponseLine:
    """One raw protocol line split at its first colon.

    ``name`` is None when the line has no colon. ``value`` is None when the
    line is too short to hold anything after the ": " separator.
    """

    full: str
    name: Optional[str] = field(init=False)
    value: Optional[str] = field(init=False)

    def __post_init__(self) -> None:
        border = self.full.find(":")
        if border < 0:
            name, value = None, None
        else:
            name = self.full[:border]
            value = self.full[border + 2:] if len(self.full) > border + 2 else None
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return self.full


class AckError(NamedTuple):
    """Parsed parts of an ACK status line."""

    code: int
    command_index: int
    command: str
    message: str


class Response:
    """The body lines and status line of a single server reply."""

    def __init__(self, lines: Sequence[str]):
        if lines:
            self.status: Optional[str] = lines[-1]
            self.lines: List[ResponseLine] = [ResponseLine(line) for line in lines[:-1]]
        else:
            self.status = None
            self.lines = []

    @property
    def is_valid(self) -> bool:
        return self.status is not None

    @property
    def is_ok(self) -> bool:
        return self.status is not None and self.status.startswith("OK")

    @property
    def is_ack(self) -> bool:
        return self.status is not None and self.status.startswith("ACK")

    @property
    def error(self) -> Optional[AckError]:
        """ACK details for display, or None for non-ACK responses.

        Status lines that do not follow the usual ACK layout are reported
        with code -1 and the raw text as message.
        """
        if not self.is_ack:
            return None
        match = _ACK_PATTERN.match(self.status)
        if match is None:
            return AckError(-1, -1, "", self.status[3:].strip())
        return AckError(int(match[1]), int(match[2]), match[3], match[4])

    def values(self, name: str) -> List[str]:
        """All values of lines called ``name``, in order."""
        return [line.value for line in self.lines if line.name == name and line.value is not None]

    def first(self, name: str) -> Optional[str]:
        for line in self.lines:
            if line.name == name:
                return line.value
        return None

    def __iter__(self) -> Iterator[ResponseLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __repr__(self) -> str:
        return f"Response(status={self.status!r}, lines={len(self.lines)})"
