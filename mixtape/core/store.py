"""
Playlist store for Mixtape.

The store owns the full collection of playlists for the process. It is
created once at startup, loads the collection from a storage slot, and after
every mutation writes the whole collection back as JSON and publishes a
change event.

Design decisions:
- The store is an explicit object handed to whoever needs it (no global).
- Mutations are serialized with an asyncio.Lock so lookup-then-append is atomic.
- Persistence is best-effort: read failures fall back to an empty collection,
  write failures are logged and swallowed. Callers never see storage errors.
- Events are published after the lock is released, but before the mutating
  call returns, so handlers see the updated collection and may call back into
  the store.
- Reads hand out copies; the collection changes only through add_playlist
  and add_song_to_playlist.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from mixtape.core.events import (
    EventBus,
    EventHandler,
    PlaylistCreatedEvent,
    PlaylistSongAddedEvent,
)
from mixtape.core.models import (
    Playlist,
    Song,
    playlists_from_json_list,
    playlists_to_json_list,
)

if TYPE_CHECKING:
    from mixtape.core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "savedPlaylists"

# Subscription pattern covering every store event
STORE_EVENTS = "playlists.*"


class PlaylistStore:
    """
    In-memory playlist collection mirrored to a key-value storage slot.

    Usage:
        store = await PlaylistStore.open(storage, event_bus=bus)
        playlist = await store.add_playlist("Road Trip")
        await store.add_song_to_playlist(playlist.id, song)
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        event_bus: EventBus | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._event_bus = event_bus or EventBus()
        self._storage_key = storage_key
        self._playlists: list[Playlist] = []
        self._lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        storage: KeyValueStorage,
        *,
        event_bus: EventBus | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> PlaylistStore:
        """Create a store and load the persisted collection."""
        store = cls(storage, event_bus=event_bus, storage_key=storage_key)
        await store.load_all()
        return store

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def playlists(self) -> list[Playlist]:
        """Copy of the current collection, in creation order."""
        return [p.copy() for p in self._playlists]

    def get(self, playlist_id: str) -> Playlist | None:
        """Look up a playlist by id. Returns a copy, or None."""
        playlist = self._find(playlist_id)
        return playlist.copy() if playlist is not None else None

    def _find(self, playlist_id: str) -> Playlist | None:
        for playlist in self._playlists:
            if playlist.id == playlist_id:
                return playlist
        return None

    def __len__(self) -> int:
        return len(self._playlists)

    def __contains__(self, playlist_id: object) -> bool:
        return any(p.id == playlist_id for p in self._playlists)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load_all(self) -> list[Playlist]:
        """
        Replace the in-memory collection with the persisted one.

        A missing slot gives an empty collection. An unreadable or corrupted
        slot also gives an empty collection; the problem is logged, not raised.
        Playlists repeating an earlier id are dropped.
        """
        async with self._lock:
            self._playlists = await self._read_slot()
            return [p.copy() for p in self._playlists]

    async def _read_slot(self) -> list[Playlist]:
        try:
            raw = await self._storage.get(self._storage_key)
        except Exception as e:
            logger.warning("Could not read playlists from slot %r: %s", self._storage_key, e)
            return []

        if raw is None:
            logger.debug("No saved playlists in slot %r", self._storage_key)
            return []

        try:
            playlists = playlists_from_json_list(json.loads(raw))
        except (ValueError, KeyError, TypeError, RecursionError) as e:
            logger.warning("Discarding unreadable playlists in slot %r: %s", self._storage_key, e)
            return []

        unique: list[Playlist] = []
        seen: set[str] = set()
        for playlist in playlists:
            if playlist.id in seen:
                logger.warning(
                    "Dropping saved playlist %r with duplicate id %s", playlist.name, playlist.id
                )
                continue
            seen.add(playlist.id)
            unique.append(playlist)

        logger.info("Loaded %d playlists", len(unique))
        return unique

    async def _persist(self) -> None:
        """Write the whole collection to the slot. Must be called with the lock held."""
        try:
            payload = json.dumps(playlists_to_json_list(self._playlists), ensure_ascii=False)
            await self._storage.set(self._storage_key, payload)
        except Exception as e:
            logger.warning("Could not save playlists to slot %r: %s", self._storage_key, e)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_playlist(self, name: str) -> Playlist:
        """
        Create an empty playlist with the given name.

        Names are not validated; empty and duplicate names are accepted.

        Returns:
            The new playlist.
        """
        async with self._lock:
            playlist = Playlist(name=name)
            self._playlists.append(playlist)
            await self._persist()
            count = len(self._playlists)
            created = playlist.copy()

        logger.debug("Created playlist %s (%r)", playlist.id, name)
        await self._event_bus.publish(
            PlaylistCreatedEvent(playlist_id=playlist.id, name=name, count=count)
        )
        return created

    async def add_song_to_playlist(self, playlist_id: str, song: Song) -> bool:
        """
        Append a song to a playlist.

        An unknown playlist id is a no-op: nothing changes, nothing is
        persisted and no event is published.

        Returns:
            True if the song was appended.
        """
        async with self._lock:
            playlist = self._find(playlist_id)
            if playlist is None:
                logger.debug("Ignoring song for unknown playlist %s", playlist_id)
                return False
            index = playlist.append(song)
            await self._persist()
            count = len(playlist)

        logger.debug("Added %r to playlist %s at %d", song.track_name, playlist_id, index)
        await self._event_bus.publish(
            PlaylistSongAddedEvent(
                playlist_id=playlist_id,
                song_id=song.id,
                index=index,
                count=count,
            )
        )
        return True

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    async def subscribe(self, handler: EventHandler) -> None:
        """Register an async handler for every store change event."""
        await self._event_bus.subscribe(STORE_EVENTS, handler)

    async def unsubscribe(self, handler: EventHandler) -> bool:
        return await self._event_bus.unsubscribe(STORE_EVENTS, handler)
