"""Playback domain - server status, play queue and outputs.

This domain handles:
- Polling status/stats into an immutable ServerStatus
- Mirroring the play queue by playlist version
- Tracking audio outputs
"""

from .status import ServerStatus, parse_status, update_status
from .playlist import Playlist, PlaylistItem, describe_playable, play_status_description
from .outputs import Output, OutputCollection, parse_outputs

__all__ = [
    "ServerStatus",
    "parse_status",
    "update_status",
    "Playlist",
    "PlaylistItem",
    "describe_playable",
    "play_status_description",
    "Output",
    "OutputCollection",
    "parse_outputs",
]
