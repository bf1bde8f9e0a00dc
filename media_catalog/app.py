"""
FastAPI Web Application for the Media Catalog

Endpoints:
  GET    /api/catalog/status            - Catalog state and size
  POST   /api/catalog/load              - Load the catalog (waits for the fetch)
  GET    /api/genres                    - Genre names
  GET    /api/genres/{genre}/tracks     - Tracks of one genre
  GET    /api/tracks/{track_id}         - One track
  PUT    /api/tracks/{track_id}         - Edit a track's metadata
  GET    /api/search                    - Substring search on title/album/artist
  GET    /api/favorites                 - Favorite track ids
  PUT    /api/favorites/{track_id}      - Mark favorite
  DELETE /api/favorites/{track_id}      - Unmark favorite
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from .cache import CatalogCache
from .config import CatalogSettings, configure_logging
from .fetcher import CatalogFetcher, build_source
from .models import SearchField, Track


class TrackUpdate(BaseModel):
    title: Optional[str] = None
    genre: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_art_url: Optional[str] = None
    track_number: Optional[int] = None


def _track_json(cache: CatalogCache, track: Track) -> dict:
    data = track.model_dump()
    data["is_favorite"] = cache.is_favorite(track.id)
    return data


def _cache(request: Request) -> CatalogCache:
    return request.app.state.cache


def create_app(cache: CatalogCache, settings: Optional[CatalogSettings] = None) -> FastAPI:
    """Build the API around an already constructed cache."""
    settings = settings or CatalogSettings()

    @asynccontextmanager
    async def lifespan(app_instance: FastAPI):
        # Start loading in the background; requests can still poll status
        cache.ensure_ready_async(
            lambda ok: logger.info(f"Startup catalog load finished (success={ok})")
        )
        yield
        cache.close()

    app = FastAPI(title="Media Catalog", lifespan=lifespan)
    app.state.cache = cache
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Catalog lifecycle
    # -----------------------------------------------------------------------

    @app.get("/api/catalog/status")
    async def catalog_status(request: Request):
        c = _cache(request)
        return {"state": c.state.value, "ready": c.is_ready(), "track_count": len(c)}

    @app.post("/api/catalog/load")
    async def catalog_load(request: Request):
        c = _cache(request)
        timeout = request.app.state.settings.load_timeout
        try:
            ok = await asyncio.wait_for(
                asyncio.wrap_future(c.ensure_ready_async()), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Catalog load did not finish within {timeout}s")
            ok = False
        if not ok:
            raise HTTPException(status_code=503, detail="Catalog unavailable")
        return {"ready": True, "track_count": len(c)}

    # -----------------------------------------------------------------------
    # Browse
    # -----------------------------------------------------------------------

    @app.get("/api/genres")
    async def list_genres(request: Request):
        return sorted(_cache(request).genres())

    @app.get("/api/genres/{genre}/tracks")
    async def genre_tracks(genre: str, request: Request):
        c = _cache(request)
        return JSONResponse([_track_json(c, t) for t in c.tracks_by_genre(genre)])

    @app.get("/api/tracks/{track_id}")
    async def get_track(track_id: str, request: Request):
        c = _cache(request)
        track = c.track_by_id(track_id)
        if track is None:
            raise HTTPException(status_code=404, detail="Track not found")
        return JSONResponse(_track_json(c, track))

    @app.put("/api/tracks/{track_id}")
    async def update_track(track_id: str, body: TrackUpdate, request: Request):
        c = _cache(request)
        current = c.track_by_id(track_id)
        if current is None:
            raise HTTPException(status_code=404, detail="Track not found")
        updated = current.model_copy(update=body.model_dump(exclude_none=True))
        if not c.update_track(track_id, updated):
            raise HTTPException(status_code=404, detail="Track not found")
        return JSONResponse(_track_json(c, updated))

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    @app.get("/api/search")
    async def search(request: Request, field: str = "title", q: str = ""):
        try:
            search_field = SearchField.parse(field)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown search field: {field}")
        c = _cache(request)
        return JSONResponse([_track_json(c, t) for t in c.search_by_field(search_field, q)])

    # -----------------------------------------------------------------------
    # Favorites
    # -----------------------------------------------------------------------

    @app.get("/api/favorites")
    async def list_favorites(request: Request):
        return _cache(request).favorites()

    @app.put("/api/favorites/{track_id}")
    async def add_favorite(track_id: str, request: Request):
        _cache(request).set_favorite(track_id, True)
        return {"id": track_id, "is_favorite": True}

    @app.delete("/api/favorites/{track_id}")
    async def remove_favorite(track_id: str, request: Request):
        _cache(request).set_favorite(track_id, False)
        return {"id": track_id, "is_favorite": False}

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    settings = CatalogSettings.from_env()
    configure_logging(settings.log_level)

    cache = CatalogCache(CatalogFetcher(build_source(settings)))
    app = create_app(cache, settings)

    logger.info(f"Starting Media Catalog on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port, reload=False)


if __name__ == "__main__":
    main()
