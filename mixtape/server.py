"""
Mixtape - Main Server Module

This module contains the MixtapeServer class that wires storage, the
playlist store, the catalog search service and the web server together and
manages the application lifecycle.
"""

import asyncio
import logging
import signal

from mixtape.config import MixtapeConfig, get_config
from mixtape.core.events import Event, EventBus
from mixtape.core.search import SearchService
from mixtape.core.storage import SqliteKeyValueStorage
from mixtape.core.store import PlaylistStore
from mixtape.web.server import WebServer

logger = logging.getLogger(__name__)


class MixtapeServer:
    """
    Main Mixtape server that coordinates all components.

    The server manages:
    - SQLite slot storage
    - Playlist store (loaded once at startup)
    - Catalog search service
    - Web server for the HTTP API
    """

    def __init__(self, config: MixtapeConfig | None = None) -> None:
        """
        Initialize the Mixtape server.

        Args:
            config: Loaded configuration. Defaults to the packaged defaults.
        """
        self.config = config or get_config()

        self.event_bus = EventBus()
        self.storage = SqliteKeyValueStorage(self.config.storage.db_path)
        self.search_service = SearchService(
            base_url=self.config.catalog.base_url,
            timeout=self.config.catalog.timeout,
        )

        # Created in start(), once storage is open
        self.playlist_store: PlaylistStore | None = None
        self.web_server: WebServer | None = None

        # Server state
        self._running = False
        self._shutdown_event: asyncio.Event | None = None

    async def start(self) -> None:
        """Start all server components."""
        logger.info("Starting Mixtape server")

        self._running = True
        self._shutdown_event = asyncio.Event()

        await self.storage.open()
        await self.storage.ensure_schema()

        self.playlist_store = await PlaylistStore.open(
            self.storage,
            event_bus=self.event_bus,
            storage_key=self.config.storage.key,
        )
        await self.playlist_store.subscribe(self._log_change)

        self.web_server = WebServer(
            playlist_store=self.playlist_store,
            search_service=self.search_service,
        )
        await self.web_server.start(host=self.config.web.host, port=self.config.web.port)

        logger.info("Mixtape server started successfully")
        logger.info(
            "Storage: %s | %d playlists loaded",
            self.storage.db_path,
            len(self.playlist_store),
        )

    async def stop(self) -> None:
        """Stop all server components gracefully."""
        if not self._running:
            return

        logger.info("Stopping Mixtape server...")
        self._running = False

        # Stop Web server first so no new mutations arrive
        if self.web_server:
            await self.web_server.stop()

        await self.search_service.aclose()
        await self.event_bus.clear()

        # Close storage last, after all components are stopped.
        await self.storage.close()

        if self._shutdown_event:
            self._shutdown_event.set()

        logger.info("Mixtape server stopped")

    async def run(self) -> None:
        """
        Run the server until shutdown is requested.

        This method starts all components and waits for a shutdown signal
        (SIGINT or SIGTERM).
        """
        await self.start()

        loop = asyncio.get_running_loop()

        def handle_signal() -> None:
            logger.info("Received shutdown signal")
            if self._shutdown_event:
                self._shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, handle_signal)
            except NotImplementedError:
                # Signal handlers not supported on Windows
                pass

        if self._shutdown_event:
            await self._shutdown_event.wait()

        await self.stop()

    @property
    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    async def _log_change(self, event: Event) -> None:
        logger.info("Playlists changed: %s", event.to_dict())
