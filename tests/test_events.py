"""
Tests for the event bus.

Tests cover:
- Exact and wildcard subscriptions
- Unsubscribe
- Error isolation between handlers
- Event serialization
"""

from __future__ import annotations

from mixtape.core.events import (
    Event,
    EventBus,
    PlaylistCreatedEvent,
    PlaylistSongAddedEvent,
)


class TestEventBus:
    """Tests for EventBus publish/subscribe."""

    async def test_exact_subscription(self) -> None:
        """Handlers subscribed to an exact type receive matching events."""
        bus = EventBus()
        received: list[Event] = []

        async def handler(event: Event) -> None:
            received.append(event)

        await bus.subscribe("playlists.created", handler)
        count = await bus.publish(PlaylistCreatedEvent(playlist_id="p1", name="Gym", count=1))

        assert count == 1
        assert len(received) == 1
        assert received[0].event_type == "playlists.created"

    async def test_wildcard_subscription(self) -> None:
        """A "playlists.*" handler receives every playlist event."""
        bus = EventBus()
        received: list[str] = []

        async def handler(event: Event) -> None:
            received.append(event.event_type)

        await bus.subscribe("playlists.*", handler)
        await bus.publish(PlaylistCreatedEvent(playlist_id="p1"))
        await bus.publish(PlaylistSongAddedEvent(playlist_id="p1", song_id="s1"))
        await bus.publish(Event(event_type="other.thing"))

        assert received == ["playlists.created", "playlists.song_added"]

    async def test_wildcard_respects_namespace_boundary(self) -> None:
        """A namespace pattern ignores types that merely share its prefix."""
        bus = EventBus()
        received: list[str] = []

        async def handler(event: Event) -> None:
            received.append(event.event_type)

        await bus.subscribe("playlists.*", handler)
        await bus.publish(Event(event_type="playlistsx.created"))
        await bus.publish(Event(event_type="playlists"))

        assert received == []

    async def test_unsubscribe(self) -> None:
        """Unsubscribed handlers no longer receive events."""
        bus = EventBus()
        received: list[Event] = []

        async def handler(event: Event) -> None:
            received.append(event)

        await bus.subscribe("playlists.created", handler)
        assert await bus.unsubscribe("playlists.created", handler) is True
        assert await bus.unsubscribe("playlists.created", handler) is False

        assert await bus.publish(PlaylistCreatedEvent()) == 0
        assert received == []

    async def test_failing_handler_is_isolated(self) -> None:
        """One failing handler does not prevent the others from running."""
        bus = EventBus()
        received: list[Event] = []

        async def broken(event: Event) -> None:
            raise RuntimeError("boom")

        async def handler(event: Event) -> None:
            received.append(event)

        await bus.subscribe("playlists.created", broken)
        await bus.subscribe("playlists.created", handler)

        count = await bus.publish(PlaylistCreatedEvent())

        assert count == 1
        assert len(received) == 1

    async def test_clear(self) -> None:
        """clear() drops every subscription."""
        bus = EventBus()

        async def handler(event: Event) -> None:
            pass

        await bus.subscribe("playlists.*", handler)
        await bus.clear()

        assert await bus.publish(PlaylistCreatedEvent()) == 0


class TestEventSerialization:
    """Tests for Event.to_dict()."""

    def test_created_event(self) -> None:
        event = PlaylistCreatedEvent(playlist_id="p1", name="Gym", count=2)
        assert event.to_dict() == {
            "type": "playlists.created",
            "playlist_id": "p1",
            "name": "Gym",
            "count": 2,
        }

    def test_song_added_event(self) -> None:
        event = PlaylistSongAddedEvent(playlist_id="p1", song_id="s1", index=0, count=1)
        assert event.to_dict() == {
            "type": "playlists.song_added",
            "playlist_id": "p1",
            "song_id": "s1",
            "index": 0,
            "count": 1,
        }
