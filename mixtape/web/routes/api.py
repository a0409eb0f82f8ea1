"""
REST API Routes for Mixtape.

Provides REST endpoints for UI clients:
- /api/status: Server status
- /api/search: Catalog song search
- /api/playlists: Playlist listing, creation and song appends

The store and search service are handed in when the router is built; the
route handlers close over them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, FastAPI, HTTPException, Query

from mixtape.core.models import Playlist, Song
from mixtape.core.search import DecodingError, InvalidQueryError, NetworkError

if TYPE_CHECKING:
    from mixtape.core.search import SearchService
    from mixtape.core.store import PlaylistStore

logger = logging.getLogger(__name__)


def register_api_routes(
    app: FastAPI,
    playlist_store: PlaylistStore,
    search_service: SearchService | None = None,
) -> None:
    """
    Register API routes with the FastAPI app.

    Args:
        app: FastAPI application instance
        playlist_store: PlaylistStore backing the playlist endpoints
        search_service: Optional SearchService for /api/search
    """
    app.include_router(create_api_router(playlist_store, search_service))


def _playlist_payload(playlist: Playlist) -> dict[str, Any]:
    result = playlist.to_dict()
    result["songCount"] = len(playlist)
    return result


def create_api_router(
    store: PlaylistStore,
    search_service: SearchService | None = None,
) -> APIRouter:
    """Build the /api router bound to a store and an optional search service."""
    router = APIRouter(tags=["api"])

    # =========================================================================
    # Server Status
    # =========================================================================

    @router.get("/api/status")
    async def server_status() -> dict[str, Any]:
        """Get server status and basic info."""
        return {
            "server": "mixtape",
            "version": "0.1.0",
            "playlists": len(store),
            "search_available": search_service is not None,
        }

    # =========================================================================
    # Search
    # =========================================================================

    @router.get("/api/search")
    async def search_songs(term: str = Query(default="")) -> dict[str, Any]:
        """Search the catalog for songs. An empty term returns no songs."""
        if search_service is None:
            raise HTTPException(status_code=503, detail="Search not available")

        if not term:
            return {"count": 0, "songs": []}

        try:
            songs = await search_service.search(term)
        except InvalidQueryError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except NetworkError as e:
            raise HTTPException(status_code=502, detail=f"Catalog unreachable: {e}") from e
        except DecodingError as e:
            raise HTTPException(status_code=502, detail=f"Unexpected catalog response: {e}") from e

        return {
            "count": len(songs),
            "songs": [song.to_dict() for song in songs],
        }

    # =========================================================================
    # Playlists
    # =========================================================================

    @router.get("/api/playlists")
    async def list_playlists() -> dict[str, Any]:
        """List all playlists with their songs."""
        playlists = store.playlists

        return {
            "count": len(playlists),
            "playlists": [_playlist_payload(p) for p in playlists],
        }

    @router.post("/api/playlists", status_code=201)
    async def create_playlist(payload: dict[str, Any]) -> dict[str, Any]:
        """Create an empty playlist. Body: {"name": "..."}, name non-empty."""
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise HTTPException(status_code=422, detail="'name' must be a non-empty string")

        playlist = await store.add_playlist(name)
        return _playlist_payload(playlist)

    @router.get("/api/playlists/{playlist_id}")
    async def get_playlist(playlist_id: str) -> dict[str, Any]:
        """Get a single playlist."""
        playlist = store.get(playlist_id)
        if playlist is None:
            raise HTTPException(status_code=404, detail=f"Playlist not found: {playlist_id}")
        return _playlist_payload(playlist)

    @router.post("/api/playlists/{playlist_id}/songs")
    async def add_song(playlist_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Append a song to a playlist.

        The body is a song in its JSON form; `id` is optional and generated
        when missing.
        """
        try:
            song = Song.from_dict(payload)
        except (KeyError, TypeError) as e:
            raise HTTPException(status_code=422, detail=f"Invalid song: {e}") from e

        if not await store.add_song_to_playlist(playlist_id, song):
            raise HTTPException(status_code=404, detail=f"Playlist not found: {playlist_id}")

        # Playlists are never removed, so a successful append means it exists.
        return _playlist_payload(store.get(playlist_id))  # type: ignore[arg-type]

    return router
