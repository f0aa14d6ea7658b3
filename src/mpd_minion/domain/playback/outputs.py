"""
Audio outputs configured on the server.
"""

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from mpd_minion.domain.protocol import commands
from mpd_minion.domain.protocol.connection import Connection
from mpd_minion.domain.protocol.response import Response

# informational lines newer servers send per output
_IGNORED_FIELDS = {"plugin", "attribute"}


@dataclass
class Output:
    index: int
    name: str
    enabled: bool


def parse_outputs(response: Response) -> Optional[List[Output]]:
    """Parse an ``outputs`` response.

    Returns:
        The outputs, or None if ids are not sequential from 0 or an unknown
        line appears.
    """
    result: List[Output] = []
    index = -1
    name = ""
    for line in response:
        if line.name == "outputid":
            try:
                index = int(line.value or "")
            except ValueError:
                return None
            if index != len(result):
                return None
        elif line.name == "outputname":
            name = line.value or ""
        elif line.name == "outputenabled":
            result.append(Output(index, name, line.value == "1"))
        elif line.name not in _IGNORED_FIELDS:
            return None
    return result


class OutputCollection:
    """The server's outputs, updated in place while their names are unchanged."""

    def __init__(self):
        self.items: List[Output] = []

    def clear(self) -> None:
        self.items = []

    def update(self, connection: Connection) -> bool:
        response = commands.outputs(connection) if connection.is_connected else None
        if response is None or not response.is_ok:
            self.items = []
            return False

        outputs = parse_outputs(response)
        if outputs is None:
            logger.warning("Malformed outputs response, discarding output list")
            self.items = []
            return False

        if [o.name for o in outputs] == [o.name for o in self.items]:
            for current, fresh in zip(self.items, outputs):
                current.enabled = fresh.enabled
        else:
            self.items = outputs
        return True

    def set_enabled(self, connection: Connection, index: int, enabled: bool) -> bool:
        """Enable or disable an output on the server, then re-read the list."""
        command = commands.enable_output if enabled else commands.disable_output
        response = command(connection, index)
        if response is None or not response.is_ok:
            return False
        return self.update(connection)
