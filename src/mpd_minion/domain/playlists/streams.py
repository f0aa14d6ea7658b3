"""
User-saved internet streams, held in memory for the session.
"""

from typing import Dict, Iterable, List, Optional

from mpd_minion.domain.library.models import Stream


class StreamsCollection:
    """Streams keyed by name, case-insensitively."""

    def __init__(self, streams: Iterable[Stream] = ()):
        self._by_name: Dict[str, Stream] = {}
        self.add_all(streams)

    @staticmethod
    def _key(name: str) -> str:
        return name.casefold()

    @property
    def streams(self) -> List[Stream]:
        """Streams ordered by name, ignoring case."""
        return [self._by_name[key] for key in sorted(self._by_name)]

    def __len__(self) -> int:
        return len(self._by_name)

    def add(self, stream: Stream) -> bool:
        """Add a stream. Returns False if the name is already taken."""
        key = self._key(stream.name)
        if key in self._by_name:
            return False
        self._by_name[key] = stream
        return True

    def add_all(self, streams: Iterable[Stream]) -> bool:
        """Add several streams; True only if every one was added."""
        results = [self.add(stream) for stream in streams]
        return all(results)

    def delete(self, stream: Stream) -> bool:
        return self._by_name.pop(self._key(stream.name), None) is not None

    def rename(self, stream: Stream, new_name: str) -> Optional[Stream]:
        """Rename a stream. Returns the renamed stream, or None if the name is taken."""
        old_key, new_key = self._key(stream.name), self._key(new_name)
        if old_key not in self._by_name:
            return None
        if new_key in self._by_name and new_key != old_key:
            return None
        renamed = stream._replace(name=new_name)
        del self._by_name[old_key]
        self._by_name[new_key] = renamed
        return renamed

    def stream_by_name(self, name: str) -> Optional[Stream]:
        return self._by_name.get(self._key(name))

    def stream_by_path(self, path: str) -> Optional[Stream]:
        return next((s for s in self._by_name.values() if s.path == path), None)
