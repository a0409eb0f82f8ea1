"""
Web Server Module for Mixtape.

This module provides the WebServer class that creates and manages the
FastAPI application, registers all routes, and runs it under uvicorn.

The WebServer integrates:
- Health check
- REST API for UI clients (search + playlists)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mixtape.web.routes.api import register_api_routes

if TYPE_CHECKING:
    from mixtape.core.search import SearchService
    from mixtape.core.store import PlaylistStore

logger = logging.getLogger(__name__)


class WebServer:
    """
    FastAPI-based web server for Mixtape.

    Provides HTTP endpoints for:
    - Catalog search
    - Playlist browsing and editing
    """

    def __init__(
        self,
        playlist_store: PlaylistStore,
        search_service: SearchService | None = None,
        *,
        cors_origins: list[str] | None = None,
    ) -> None:
        """
        Initialize the WebServer.

        Args:
            playlist_store: Store backing the playlist endpoints
            search_service: Optional catalog search service
            cors_origins: Allowed CORS origins (default: all)
        """
        self.playlist_store = playlist_store
        self.search_service = search_service

        # Create FastAPI app
        self.app = FastAPI(
            title="Mixtape",
            description="Song search and playlist curation",
            version="0.1.0",
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Server state
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._host = "127.0.0.1"
        self._port = 8000

        # Register routes
        self._register_routes()

    def _register_routes(self) -> None:
        """Register all routes with the FastAPI app."""

        # Health check
        @self.app.get("/health")
        async def health_check() -> dict[str, str]:
            """Health check endpoint."""
            return {"status": "ok", "server": "mixtape"}

        register_api_routes(
            self.app,
            playlist_store=self.playlist_store,
            search_service=self.search_service,
        )

    async def start(self, host: str = "127.0.0.1", port: int = 8000) -> None:
        """
        Start the web server in the background.

        Args:
            host: Host address to bind to
            port: Port to listen on
        """
        self._host = host
        self._port = port

        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        self._serve_task = asyncio.create_task(self._server.serve())

        logger.info("Web server started on http://%s:%d", host, port)

    async def stop(self) -> None:
        """Stop the web server and wait for uvicorn to shut down."""
        if self._server is not None:
            self._server.should_exit = True
            self._server = None

        if self._serve_task is not None:
            await self._serve_task
            self._serve_task = None

        logger.info("Web server stopped")

    @property
    def port(self) -> int:
        """Get the server port."""
        return self._port

    @property
    def host(self) -> str:
        """Get the server host."""
        return self._host
