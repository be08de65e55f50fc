"""
Data structures produced by the magnet URI parser.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_MAGNET_TITLE = "Magnet Link"


class ContentCategory(Enum):
    """Content category inferred from a torrent's display name."""

    MOVIE = "Movie"
    TV_SHOW = "TV Show"
    MUSIC = "Music"
    SOFTWARE_GAME = "Software/Game"
    BOOK_DOCUMENT = "Book/Document"
    GENERIC = "BitTorrent"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class MagnetDescriptor:
    """Structured view of a magnet URI. Built fresh for every parse call."""

    info_hash: Optional[str] = None
    display_name: Optional[str] = None
    exact_length: Optional[int] = None
    trackers: list[str] = field(default_factory=list)
    category: ContentCategory = ContentCategory.GENERIC
    params: dict[str, list[str]] = field(default_factory=dict, repr=False)
    description: str = ""

    @property
    def title(self) -> str:
        return self.display_name or DEFAULT_MAGNET_TITLE

    @property
    def tracker_count(self) -> int:
        return len(self.trackers)
