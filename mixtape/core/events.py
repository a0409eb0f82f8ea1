"""
Event Bus for Mixtape.

This module provides a simple pub/sub event system for decoupled communication
between components. The primary use case is notifying UI layers when the
playlist collection changes.

Event types:
- playlists.created: A playlist was added to the store
- playlists.song_added: A song was appended to a playlist

Usage:
    bus = EventBus()

    async def on_change(event: Event) -> None:
        print(f"Playlists changed: {event.to_dict()}")

    await bus.subscribe("playlists.*", on_change)

    await bus.publish(PlaylistCreatedEvent(playlist_id="...", name="Gym", count=1))

There is no module-level bus; create one and pass it to the components that
need it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Type alias for event handlers
EventHandler = Callable[["Event"], Coroutine[Any, Any, None]]


@dataclass
class Event:
    """Base class for all events."""

    event_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for JSON serialization."""
        return {"type": self.event_type}


@dataclass
class PlaylistCreatedEvent(Event):
    """Fired when a new playlist is added to the store."""

    event_type: str = field(default="playlists.created", init=False)
    playlist_id: str = ""
    name: str = ""
    count: int = 0  # playlists in the store after the change

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            "playlist_id": self.playlist_id,
            "name": self.name,
            "count": self.count,
        }


@dataclass
class PlaylistSongAddedEvent(Event):
    """Fired when a song is appended to a playlist."""

    event_type: str = field(default="playlists.song_added", init=False)
    playlist_id: str = ""
    song_id: str = ""
    index: int = 0
    count: int = 0  # songs in the playlist after the change

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            "playlist_id": self.playlist_id,
            "song_id": self.song_id,
            "index": self.index,
            "count": self.count,
        }


def _matches(pattern: str, event_type: str) -> bool:
    """True if a subscription pattern covers an event type.

    A pattern is either an exact type ("playlists.created") or a namespace
    ending in ".*" ("playlists.*").
    """
    if pattern.endswith(".*"):
        return event_type.startswith(pattern[:-1])
    return pattern == event_type


class EventBus:
    """
    Async pub/sub bus for store change events.

    Handlers are awaited one after another in subscription order. A handler
    that raises is logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[str, EventHandler]] = []
        self._lock = asyncio.Lock()

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register `handler` for an exact event type or a "namespace.*" pattern."""
        async with self._lock:
            self._subscriptions.append((pattern, handler))
        logger.debug("Subscribed %s to %s", handler, pattern)

    async def unsubscribe(self, pattern: str, handler: EventHandler) -> bool:
        """Remove one registration. Returns False if it was not registered."""
        async with self._lock:
            try:
                self._subscriptions.remove((pattern, handler))
            except ValueError:
                return False
        logger.debug("Unsubscribed %s from %s", handler, pattern)
        return True

    async def publish(self, event: Event) -> int:
        """
        Deliver an event to every matching handler.

        By the time this returns every handler has seen the event.

        Returns:
            Number of handlers that completed without raising.
        """
        async with self._lock:
            handlers = [h for p, h in self._subscriptions if _matches(p, event.event_type)]

        delivered = 0
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception("Handler %s failed for %s", handler, event.event_type)
            else:
                delivered += 1

        if delivered:
            logger.debug("Published %s to %d handlers", event.event_type, delivered)
        return delivered

    async def clear(self) -> None:
        """Remove all subscriptions."""
        async with self._lock:
            self._subscriptions.clear()
