"""
Track building.

Converts one raw catalog record into a canonical ``Track``.  The identifier is
a hash of the source URL, so fetching the same catalog twice yields the same
ids.  Attributes the catalog does not carry get the ``UNKNOWN`` placeholder.
"""

import hashlib
from typing import Any, Optional

from .exceptions import RecordError
from .models import DEFAULT_ALBUM_ART_URL, UNKNOWN, Track

# Record keys
KEY_TITLE = "name"
KEY_SOURCE = "url"
KEY_TRACK_NUMBER = "size"
KEY_GENRE = "genre"
KEY_ARTIST = "artist"
KEY_ALBUM = "album"
KEY_IMAGE = "image"

_ID_LENGTH = 16


def track_id_for(source: str) -> str:
    """Deterministic identifier for a source URL."""
    return hashlib.sha256(source.encode("utf-8")).hexdigest()[:_ID_LENGTH]


def _require_str(record: dict, key: str, index: Optional[int]) -> str:
    value = record.get(key)
    # Numbers are read as their string form; bool and null are not
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise RecordError(
            f"Record is missing string field '{key}'",
            index=index,
            field=key,
            details=f"got {value!r}",
        )
    return value


def _require_int(record: dict, key: str, index: Optional[int]) -> int:
    value = record.get(key)
    # bool is an int subclass but never a valid ordinal
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise RecordError(
        f"Record is missing integer field '{key}'",
        index=index,
        field=key,
        details=f"got {value!r}",
    )


def _optional_str(record: dict, key: str, default: str) -> str:
    value = record.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


def build_track(record: dict[str, Any], index: Optional[int] = None) -> Track:
    """
    Build a Track from a raw ``{"name", "url", "size"}`` record.

    Args:
        record: One entry of the catalog's ``files`` list.
        index:  Position of the record, used in error reports.

    Raises:
        RecordError: a required field is absent or has the wrong type.
    """
    title = _require_str(record, KEY_TITLE, index)
    source = _require_str(record, KEY_SOURCE, index)
    track_number = _require_int(record, KEY_TRACK_NUMBER, index)

    return Track(
        id=track_id_for(source),
        title=title,
        source=source,
        genre=_optional_str(record, KEY_GENRE, UNKNOWN),
        artist=_optional_str(record, KEY_ARTIST, UNKNOWN),
        album=_optional_str(record, KEY_ALBUM, UNKNOWN),
        album_art_url=_optional_str(record, KEY_IMAGE, DEFAULT_ALBUM_ART_URL),
        track_number=track_number,
    )
