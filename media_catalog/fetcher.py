"""
Catalog fetching.

A catalog source returns the raw catalog body in one round-trip.  The
``CatalogFetcher`` runs source → parser → builder as a single all-or-nothing
operation: it either returns every track or raises a ``FetchError``.
"""

from typing import Callable, Optional, Protocol

import requests
from loguru import logger

from .assets import AssetLoader
from .builder import build_track
from .config import CatalogSettings
from .exceptions import AssetError, FetchError, NetworkError, RecordError
from .models import Track
from .parser import parse_records

DEFAULT_ASSET_NAME = "data.json"


class CatalogSource(Protocol):
    def fetch_bytes(self) -> bytes: ...


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

class HttpCatalogSource:
    """Fetches the catalog body with a single HTTP GET."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session

    def fetch_bytes(self) -> bytes:
        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(
                "Failed to fetch catalog", url=self.url, details=str(e)
            ) from e
        return response.content

    def __repr__(self) -> str:
        return f"HttpCatalogSource({self.url})"


class AssetCatalogSource:
    """Reads the catalog body from a bundled asset instead of the network."""

    def __init__(self, loader: AssetLoader, asset_name: str = DEFAULT_ASSET_NAME) -> None:
        self.loader = loader
        self.asset_name = asset_name

    def fetch_bytes(self) -> bytes:
        try:
            return self.loader.load_bytes(self.asset_name)
        except AssetError as e:
            raise NetworkError(
                "Failed to read catalog asset", url=self.asset_name, details=str(e)
            ) from e

    def __repr__(self) -> str:
        return f"AssetCatalogSource({self.loader.root / self.asset_name})"


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

class CatalogFetcher:
    """Turns one source round-trip into a complete list of Tracks."""

    def __init__(
        self,
        source: CatalogSource,
        parser: Callable[[bytes], list] = parse_records,
        builder: Callable[..., Track] = build_track,
    ) -> None:
        self.source = source
        self.parser = parser
        self.builder = builder

    def fetch(self) -> list[Track]:
        """
        Fetch, parse and build the full catalog.

        Raises:
            FetchError: NetworkError, ParseError or RecordError. No partial
                        list is ever returned.
        """
        logger.info(f"Fetching catalog from {self.source!r}")
        raw = self.source.fetch_bytes()
        records = self.parser(raw)

        tracks: list[Track] = []
        for i, record in enumerate(records):
            try:
                tracks.append(self.builder(record, index=i))
            except FetchError:
                raise
            except (TypeError, ValueError) as e:
                raise RecordError(f"Invalid catalog record #{i}", index=i, details=str(e)) from e

        logger.info(f"Fetched {len(tracks)} catalog records")
        return tracks


def build_source(settings: CatalogSettings) -> CatalogSource:
    """Pick the bundled-asset source when an assets dir is configured, else HTTP."""
    if settings.assets_dir is not None:
        logger.info(f"Catalog source: assets in {settings.assets_dir}")
        return AssetCatalogSource(AssetLoader(settings.assets_dir))
    logger.info(f"Catalog source: {settings.url}")
    return HttpCatalogSource(settings.url, timeout=settings.timeout)
