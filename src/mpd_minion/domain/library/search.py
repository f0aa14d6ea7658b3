"""
Background quick search over the song index.

Queries go to a worker thread through an inbox queue; queued queries are
coalesced so only the newest is scanned. Matches come back through an outbox
queue in batches, each tagged with the generation of the query it answers,
and the worker abandons a scan as soon as a newer query arrives.
"""

import queue
import threading
import time
from typing import Callable, List, NamedTuple, Optional, Sequence

from loguru import logger

from .models import Song

_STOP = object()


class SearchResults(NamedTuple):
    """One batch of matches. ``complete`` marks the final batch of a query."""
    generation: int
    query: str
    songs: List[Song]
    complete: bool


def query_fragments(query: str, min_length: int = 1) -> List[str]:
    return [fragment for fragment in query.lower().split() if len(fragment) >= min_length]


def song_matches(song: Song, fragments: Sequence[str]) -> bool:
    """True when every fragment occurs in the artist, album or title."""
    haystacks = (song.artist.lower(), song.album.lower(), song.title.lower())
    return all(any(fragment in text for text in haystacks) for fragment in fragments)


class CollectionSearch:
    """Quick-search worker thread.

    Args:
        songs_provider: Returns the songs to scan; called once per query.
        on_results: Optional callback invoked from the worker for every batch.
        batch_interval_ms: Minimum time between partial batches.
        min_fragment_length: Shorter query fragments are ignored.
    """

    def __init__(
        self,
        songs_provider: Callable[[], Sequence[Song]],
        on_results: Optional[Callable[[SearchResults], None]] = None,
        batch_interval_ms: int = 250,
        min_fragment_length: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._songs_provider = songs_provider
        self._on_results = on_results
        self._batch_interval = batch_interval_ms / 1000.0
        self._min_fragment_length = min_fragment_length
        self._clock = clock
        self._inbox: queue.Queue = queue.Queue()
        self._outbox: queue.Queue = queue.Queue()
        self._generation = 0

        self._thread = threading.Thread(target=self._run, name="collection-search", daemon=True)
        self._thread.silent_logging = True
        self._thread.start()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def submit(self, query: str) -> None:
        """Queue a query; any unstarted earlier query is superseded."""
        self._inbox.put(query)

    def results(self) -> List[SearchResults]:
        """Drain every batch published so far without blocking."""
        batches = []
        while True:
            try:
                batches.append(self._outbox.get_nowait())
            except queue.Empty:
                return batches

    def wait_for_results(self, timeout: Optional[float] = None) -> SearchResults:
        """Block for the next batch. Raises queue.Empty on timeout."""
        return self._outbox.get(timeout=timeout)

    def close(self, timeout: Optional[float] = 2.0) -> None:
        """Stop the worker and wait for it to exit."""
        self._inbox.put(_STOP)
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Collection search worker did not stop in time")

    def _run(self) -> None:
        pending = self._inbox.get()
        while pending is not _STOP:
            pending = self._newest(pending)
            if pending is _STOP:
                break
            newer = self._search(pending)
            pending = newer if newer is not None else self._inbox.get()
        logger.debug("Collection search worker stopped")

    def _newest(self, query):
        while True:
            try:
                newer = self._inbox.get_nowait()
            except queue.Empty:
                return query
            if newer is _STOP:
                return _STOP
            query = newer

    def _publish(self, results: SearchResults) -> None:
        self._outbox.put(results)
        if self._on_results is not None:
            try:
                self._on_results(results)
            except Exception:
                logger.exception("Search results callback failed")

    def _search(self, query: str):
        """Scan for ``query``; returns a newer inbox item if the scan was cut short."""
        self._generation += 1
        generation = self._generation
        fragments = query_fragments(query, self._min_fragment_length)
        if not fragments:
            self._publish(SearchResults(generation, query, [], True))
            return None

        batch: List[Song] = []
        last_publish = self._clock()
        for song in self._songs_provider():
            if song_matches(song, fragments):
                batch.append(song)
            if batch and self._clock() - last_publish >= self._batch_interval:
                self._publish(SearchResults(generation, query, batch, False))
                batch = []
                last_publish = self._clock()
                try:
                    newer = self._inbox.get_nowait()
                except queue.Empty:
                    continue
                logger.debug(f"Search for {query!r} superseded")
                return newer

        self._publish(SearchResults(generation, query, batch, True))
        return None
