"""Library domain - collection index built from the server's song listing.

This domain handles:
- Song, album and stream records
- Parsing bulk listings and normalizing date tags
- Derived artist/genre/album indices with configurable album ordering
- The directory-tree projection and its selection state
- Background quick search
"""

from .models import Album, Song, Stream, UnknownPlayable, NO_GENRE, UNKNOWN_ALBUM, UNKNOWN_ARTIST
from .dates import DEFAULT_DATE_FORMATS, DateNormalizer, DateTemplate
from .parsing import SongBlocks, song_from_block, split_song_blocks
from .database import (
    ALBUM_SORT_RULES,
    EMPTY_INDEX,
    Database,
    IndexSnapshot,
    album_by_date_key,
    album_by_title_key,
    build_index,
)
from .tree import DirectoryTree, TreeNode, TreeSelection, build_directory_tree, split_path
from .items import (
    AlbumItem,
    ArtistItem,
    CollectionItem,
    GenreItem,
    SongItem,
    StreamItem,
    display_text,
    format_length,
    item_for_playable,
)
from .search import CollectionSearch, SearchResults, query_fragments, song_matches

__all__ = [
    "Album",
    "Song",
    "Stream",
    "UnknownPlayable",
    "NO_GENRE",
    "UNKNOWN_ALBUM",
    "UNKNOWN_ARTIST",
    "DEFAULT_DATE_FORMATS",
    "DateNormalizer",
    "DateTemplate",
    "SongBlocks",
    "song_from_block",
    "split_song_blocks",
    "ALBUM_SORT_RULES",
    "EMPTY_INDEX",
    "Database",
    "IndexSnapshot",
    "album_by_date_key",
    "album_by_title_key",
    "build_index",
    "DirectoryTree",
    "TreeNode",
    "TreeSelection",
    "build_directory_tree",
    "split_path",
    "AlbumItem",
    "ArtistItem",
    "CollectionItem",
    "GenreItem",
    "SongItem",
    "StreamItem",
    "display_text",
    "format_length",
    "item_for_playable",
    "CollectionSearch",
    "SearchResults",
    "query_fragments",
    "song_matches",
]
