"""Tests for collection item display."""

import pytest

from mpd_minion.domain.library.items import (
    AlbumItem,
    ArtistItem,
    GenreItem,
    SongItem,
    StreamItem,
    display_text,
    format_length,
    item_for_playable,
)
from mpd_minion.domain.library.models import Album, Song, Stream, UnknownPlayable


class TestDisplayText:
    """Tests for display_text."""

    @pytest.mark.parametrize(
        "item, expected",
        [
            (ArtistItem("Aphex Twin"), "Aphex Twin"),
            (GenreItem("Electronic"), "Electronic"),
            (AlbumItem(Album("Aphex Twin", "Drukqs", "2001-10-22")), "Drukqs (2001)"),
            (AlbumItem(Album("Aphex Twin", "Untitled")), "Untitled"),
            (SongItem(Song("a.mp3", "Avril 14th", artist="Aphex Twin")), "Aphex Twin: Avril 14th"),
            (StreamItem(Stream("http://x", "Radio X")), "Radio X"),
        ],
    )
    def test_variants(self, item, expected: str) -> None:
        """Test every variant renders its label."""
        assert display_text(item) == expected

    def test_rejects_other_types(self) -> None:
        """Test non-items are refused."""
        with pytest.raises(TypeError):
            display_text("Aphex Twin")


class TestItemForPlayable:
    """Tests for item_for_playable."""

    def test_song(self) -> None:
        """Test songs become song items."""
        song = Song("a.mp3", "A")
        assert item_for_playable(song) == SongItem(song)

    def test_unknown_path(self) -> None:
        """Test unresolved entries display their path."""
        assert display_text(item_for_playable(UnknownPlayable("gone.mp3"))) == "gone.mp3"


class TestFormatLength:
    """Tests for format_length."""

    @pytest.mark.parametrize("seconds, expected", [(None, ""), (0, "0:00"), (61, "1:01"), (3600, "60:00")])
    def test_format(self, seconds, expected: str) -> None:
        """Test minute:second formatting."""
        assert format_length(seconds) == expected
