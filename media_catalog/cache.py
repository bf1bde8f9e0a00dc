"""
Catalog Cache — lazily populated, thread-safe track catalog.

Holds two indexes over the fetched catalog (by id and by genre), the
initialization state machine and the caller's favorites.

The catalog is fetched at most once at a time: concurrent ``ensure_ready``
callers share a single in-flight fetch and all observe its outcome.  The fetch
runs on a worker thread without holding the lock; the finished indexes are
built off to the side and swapped in together with the ``READY`` transition,
so readers never see a half-built catalog.

Usage:
    cache = CatalogCache(CatalogFetcher(HttpCatalogSource(url)))
    cache.ensure_ready_async(lambda ok: print("catalog ready:", ok))
    if cache.ensure_ready(timeout=10):
        cache.tracks_by_genre("Rock")
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Iterable, Optional

from loguru import logger

from .exceptions import FetchError
from .fetcher import CatalogFetcher
from .models import CatalogState, SearchField, Track, TrackEntry

ReadyCallback = Callable[[bool], None]


def _group_by_genre(entries: Iterable[TrackEntry]) -> dict[str, tuple[TrackEntry, ...]]:
    """Build a fresh by-genre index; order within a genre follows ``entries``."""
    grouped: dict[str, list[TrackEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.track.genre, []).append(entry)
    return {genre: tuple(items) for genre, items in grouped.items()}


def _resolved(success: bool) -> Future:
    future: Future = Future()
    future.set_running_or_notify_cancel()
    future.set_result(success)
    return future


class CatalogCache:
    """
    In-memory catalog with by-id and by-genre indexes.

    All shared state lives behind ``self._lock``.  Only the fetch itself runs
    outside it.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        executor: Optional[Executor] = None,
    ) -> None:
        self._fetcher = fetcher
        self._executor = executor
        self._owns_executor = executor is None
        self._lock = threading.RLock()

        self._state = CatalogState.UNINITIALIZED
        self._by_id: dict[str, TrackEntry] = {}
        self._by_genre: dict[str, tuple[TrackEntry, ...]] = {}
        self._favorites: set[str] = set()
        self._pending: Optional[Future] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> CatalogState:
        with self._lock:
            return self._state

    def is_ready(self) -> bool:
        return self.state is CatalogState.READY

    def ensure_ready_async(self, callback: Optional[ReadyCallback] = None) -> Future:
        """
        Make sure the catalog is loaded, fetching it if needed.

        Returns a future resolving to True on success, False on failure.  Each
        call gets its own future; cancelling it only detaches this caller and
        never stops the shared fetch.  ``callback(success)`` runs exactly once
        per call (with False if this caller's future was cancelled).
        """
        start: Optional[Future] = None
        with self._lock:
            if self._state is CatalogState.READY:
                logger.debug("ensure_ready: catalog already initialized")
                waiter = _resolved(True)
            else:
                if self._pending is None:
                    self._pending = Future()
                    self._pending.set_running_or_notify_cancel()
                    self._state = CatalogState.INITIALIZING
                    start = self._pending
                else:
                    logger.debug("Catalog fetch already in flight, joining it")
                waiter = self._chain(self._pending)

        if start is not None:
            self._start(start)

        if callback is not None:
            waiter.add_done_callback(self._notifier(callback))
        return waiter

    def ensure_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Blocking variant of ``ensure_ready_async``.

        Returns False if the catalog is not ready within ``timeout`` seconds.
        The fetch keeps running for everyone else and may still succeed.
        """
        waiter = self.ensure_ready_async()
        try:
            return waiter.result(timeout=timeout)
        except FutureTimeoutError:
            if not waiter.cancel():
                # The fetch finished between the timeout and the cancel
                return waiter.result()
            logger.warning(f"Timed out after {timeout}s waiting for the catalog")
            return False

    def close(self) -> None:
        """Shut down the worker thread pool if this cache created it."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def __enter__(self) -> "CatalogCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _start(self, pending: Future) -> None:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="catalog-fetch"
                )
            executor = self._executor
        try:
            executor.submit(self._initialize, pending)
        except RuntimeError as e:
            logger.error(f"Could not schedule catalog fetch: {e}")
            self._finish(pending, success=False)

    @staticmethod
    def _chain(pending: Future) -> Future:
        waiter: Future = Future()

        def _forward(done: Future) -> None:
            if waiter.set_running_or_notify_cancel():
                waiter.set_result(done.result())

        pending.add_done_callback(_forward)
        return waiter

    @staticmethod
    def _notifier(callback: ReadyCallback) -> Callable[[Future], None]:
        def _notify(done: Future) -> None:
            success = not done.cancelled() and bool(done.result())
            try:
                callback(success)
            except Exception:
                logger.exception("Catalog ready callback raised")

        return _notify

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _initialize(self, pending: Future) -> None:
        success = False
        try:
            tracks = self._fetcher.fetch()
            if not tracks:
                logger.warning("Catalog fetch returned no tracks")
            else:
                self._install(tracks)
                success = True
        except FetchError as e:
            logger.error(f"Could not retrieve catalog: {e}")
        except Exception:
            logger.exception("Unexpected error while loading the catalog")
        finally:
            self._finish(pending, success)

    def _install(self, tracks: list[Track]) -> None:
        by_id: dict[str, TrackEntry] = {}
        for track in tracks:
            # Duplicate ids: last record wins
            by_id[track.id] = TrackEntry(track.id, track)
        by_genre = _group_by_genre(by_id.values())

        with self._lock:
            self._by_id = by_id
            self._by_genre = by_genre
            self._state = CatalogState.READY
        logger.info(f"Catalog ready: {len(by_id)} tracks in {len(by_genre)} genres")

    def _finish(self, pending: Future, success: bool) -> None:
        with self._lock:
            if not success:
                self._state = CatalogState.UNINITIALIZED
            self._pending = None
        pending.set_result(success)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def genres(self) -> list[str]:
        with self._lock:
            if self._state is not CatalogState.READY:
                return []
            return list(self._by_genre)

    def tracks_by_genre(self, genre: str) -> list[Track]:
        with self._lock:
            if self._state is not CatalogState.READY:
                return []
            return [entry.track for entry in self._by_genre.get(genre, ())]

    def track_by_id(self, track_id: str) -> Optional[Track]:
        with self._lock:
            entry = self._by_id.get(track_id)
            return entry.track if entry is not None else None

    def all_tracks(self) -> list[Track]:
        with self._lock:
            if self._state is not CatalogState.READY:
                return []
            return [entry.track for entry in self._by_id.values()]

    def search_by_field(self, field: SearchField | str, query: str) -> list[Track]:
        """Case-insensitive substring search on title, album or artist."""
        search_field = SearchField.parse(field)
        q = (query or "").lower()
        return [
            t for t in self.all_tracks()
            if q in (search_field.value_of(t) or "").lower()
        ]

    def search_by_title(self, query: str) -> list[Track]:
        return self.search_by_field(SearchField.TITLE, query)

    def search_by_album(self, query: str) -> list[Track]:
        return self.search_by_field(SearchField.ALBUM, query)

    def search_by_artist(self, query: str) -> list[Track]:
        return self.search_by_field(SearchField.ARTIST, query)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def update_track(self, track_id: str, track: Track) -> bool:
        """
        Replace the metadata of a known track.  Unknown ids are ignored.

        The stored value always keeps ``track_id`` as its id.  A genre change
        rebuilds the whole by-genre index.

        Returns:
            True if a track was updated.
        """
        if track.id != track_id:
            track = track.model_copy(update={"id": track_id})

        with self._lock:
            entry = self._by_id.get(track_id)
            if entry is None:
                logger.debug(f"update_track: unknown id {track_id}")
                return False

            old_genre = entry.track.genre
            entry.track = track
            if old_genre != track.genre:
                self._by_genre = _group_by_genre(self._by_id.values())
                logger.debug(
                    f"Genre of {track_id} changed {old_genre!r} → {track.genre!r}; "
                    f"rebuilt {len(self._by_genre)} genre lists"
                )
        return True

    def set_favorite(self, track_id: str, favorite: bool) -> None:
        with self._lock:
            if favorite:
                self._favorites.add(track_id)
            else:
                self._favorites.discard(track_id)

    def is_favorite(self, track_id: str) -> bool:
        with self._lock:
            return track_id in self._favorites

    def favorites(self) -> list[str]:
        with self._lock:
            return sorted(self._favorites)

    # ------------------------------------------------------------------
    # Repr
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    def __repr__(self) -> str:
        with self._lock:
            return f"CatalogCache({self._state.value}, {len(self._by_id)} tracks)"
