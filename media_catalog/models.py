"""
Data Models for the Media Catalog

Track metadata as served to clients, the mutable cell the by-id index keeps
per track, and the small enums the cache works with.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Placeholder values
# ---------------------------------------------------------------------------

UNKNOWN = "Unknown"
DEFAULT_ALBUM_ART_URL = (
    "http://creativeherald.com/wp-content/uploads/2012/07/music-note-logo-500x625.jpg"
)


# ---------------------------------------------------------------------------
# Track models
# ---------------------------------------------------------------------------

class Track(BaseModel):
    """One media item's metadata. Immutable; edits go through the cache."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable identifier derived from the source URL")
    title: str = Field(..., description="Track title")
    source: str = Field(..., description="URL the media is streamed from")
    genre: str = Field(UNKNOWN, description="Musical genre")
    artist: str = Field(UNKNOWN, description="Track artist")
    album: str = Field(UNKNOWN, description="Album name")
    album_art_url: str = Field(DEFAULT_ALBUM_ART_URL, description="Album art image URL")
    track_number: int = Field(0, description="Ordinal taken from the record's size field")


class TrackEntry:
    """Mutable cell around a Track so edits never re-key the by-id index."""

    __slots__ = ("track_id", "track")

    def __init__(self, track_id: str, track: Track) -> None:
        self.track_id = track_id
        self.track = track

    def __repr__(self) -> str:
        return f"TrackEntry({self.track_id!r}, title={self.track.title!r})"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CatalogState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class SearchField(Enum):
    """Track fields that support substring search."""

    TITLE = "title"
    ALBUM = "album"
    ARTIST = "artist"

    @classmethod
    def parse(cls, value: "SearchField | str") -> "SearchField":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())

    def value_of(self, track: Track) -> Optional[str]:
        return getattr(track, self.value, None)
