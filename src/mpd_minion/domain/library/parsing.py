"""
Parsing of song blocks from bulk listings.

Listings such as ``listallinfo`` and ``playlistinfo`` are flat sequences of
"Name: Value" lines where each "file" line starts a new song.
"""

import posixpath
import re
from typing import Dict, Iterable, List, NamedTuple, Optional

from loguru import logger

from mpd_minion.domain.protocol.response import ResponseLine

from .dates import DateNormalizer
from .models import NO_GENRE, UNKNOWN_ALBUM, UNKNOWN_ARTIST, Song

FILE_FIELD = "file"
LEADING_DIGITS = re.compile(r"[0-9]+")


class SongBlocks(NamedTuple):
    """Song blocks of one listing and the count of lines before the first file."""
    blocks: List[Dict[str, str]]
    dropped_lines: int


def split_song_blocks(lines: Iterable[ResponseLine]) -> SongBlocks:
    """Group listing lines into one field dict per "file" line.

    Lines before the first "file" line belong to no song and are counted in
    ``dropped_lines``. Directory and playlist entries in mixed listings are
    not songs and are skipped. Repeated fields keep their first value.
    """
    blocks: List[Dict[str, str]] = []
    current: Optional[Dict[str, str]] = None
    dropped = 0

    for line in lines:
        if line.name == FILE_FIELD:
            # a pathless "file" line still ends the previous song
            current = {FILE_FIELD: line.value} if line.value else {}
            if current:
                blocks.append(current)
        elif line.name is None or line.value is None:
            continue
        elif line.name in ("directory", "playlist"):
            current = None
        elif current is None:
            dropped += 1
        else:
            current.setdefault(line.name, line.value)

    return SongBlocks(blocks, dropped)


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Parse leading ASCII digits: "3/12" -> 3, "abc" -> None."""
    if value is None:
        return None
    match = LEADING_DIGITS.match(value.strip())
    return int(match.group()) if match else None


def _parse_length(block: Dict[str, str]) -> Optional[int]:
    length = _parse_int(block.get("Time"))
    if length is None and "duration" in block:
        try:
            length = round(float(block["duration"]))
        except (ValueError, OverflowError):
            logger.debug(f"Unparseable duration {block['duration']!r} for {block[FILE_FIELD]}")
    return length


def song_from_block(block: Dict[str, str], normalizer: DateNormalizer) -> Song:
    """Build a Song from one block, substituting defaults for missing tags."""
    path = block[FILE_FIELD]
    return Song(
        path=path,
        title=block.get("Title") or posixpath.basename(path) or path,
        artist=block.get("Artist") or UNKNOWN_ARTIST,
        album=block.get("Album") or UNKNOWN_ALBUM,
        genre=block.get("Genre") or NO_GENRE,
        length=_parse_length(block),
        track=_parse_int(block.get("Track")),
        date=normalizer.normalize(block.get("Date")),
    )
