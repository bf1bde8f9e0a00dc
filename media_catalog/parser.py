"""
Catalog document parsing.

Turns the raw response body into the ordered list of raw track records found
under the top-level ``files`` key.  Pure function, no I/O.
"""

import json
from typing import Any

from .exceptions import ParseError

RECORDS_KEY = "files"


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        # The catalog server historically answered in Latin-1
        return raw.decode("iso-8859-1")


def parse_records(raw: bytes) -> list[dict[str, Any]]:
    """
    Parse a catalog body shaped as ``{"files": [{...}, ...]}``.

    Raises:
        ParseError: body is not JSON, the top level is not an object, or
                    ``files`` is missing, not a list, or holds non-objects.
    """
    if isinstance(raw, str):
        text = raw
    else:
        text = _decode(bytes(raw))

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError("Catalog body is not valid JSON", details=str(e)) from e

    if not isinstance(document, dict):
        raise ParseError(
            "Catalog body must be a JSON object",
            details=f"got {type(document).__name__}",
        )
    if RECORDS_KEY not in document:
        raise ParseError(f"Catalog body has no '{RECORDS_KEY}' list")

    records = document[RECORDS_KEY]
    if not isinstance(records, list):
        raise ParseError(
            f"Catalog '{RECORDS_KEY}' must be a list",
            details=f"got {type(records).__name__}",
        )
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise ParseError(
                f"Catalog record #{i} is not an object",
                details=f"got {type(record).__name__}",
            )
    return records
