"""
Search session for Mixtape.

`SearchService.search` is single-shot and stateless. A search box issues a new
query on every keystroke, so the caller needs "latest wins" behaviour on top:

1. Each submitted query increments a generation counter
2. The in-flight search of an older generation is cancelled
3. An optional debounce delay lets rapid keystrokes coalesce
4. Only the result matching the current generation is returned

Superseded submissions return None; the caller simply ignores them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from mixtape.core.search import SearchError

if TYPE_CHECKING:
    from mixtape.core.models import Song
    from mixtape.core.search import SearchService

logger = logging.getLogger(__name__)


class SearchSession:
    """
    Latest-wins wrapper around a `SearchService` for one search input.

    Usage:
        session = SearchSession(service, debounce_seconds=0.3)

        # on every keystroke
        songs = await session.submit(text)
        if songs is not None:
            render(songs)
    """

    def __init__(self, service: SearchService, *, debounce_seconds: float = 0.0) -> None:
        self._service = service
        self._debounce_seconds = debounce_seconds
        self._generation = 0
        self._active_task: asyncio.Task[list[Song]] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> None:
        """Discard the in-flight search, if any; its submit() returns None."""
        self._generation += 1
        self._cancel_active()

    def _cancel_active(self) -> None:
        task = self._active_task
        if task is not None and not task.done():
            task.cancel()
        self._active_task = None

    async def submit(self, query: str) -> list[Song] | None:
        """
        Submit a query, superseding any earlier one.

        Returns:
            The songs for this query, an empty list for an empty query, or
            None if a newer query was submitted before this one finished.

        Raises:
            SearchError: If this query is still the latest and the search failed.
        """
        self._generation += 1
        generation = self._generation
        self._cancel_active()

        if not query:
            return []

        if self._debounce_seconds > 0:
            await asyncio.sleep(self._debounce_seconds)
            if not self._is_current(generation):
                logger.debug("Search %r superseded during debounce (gen=%d)", query, generation)
                return None

        task = asyncio.create_task(self._service.search(query))
        self._active_task = task

        try:
            songs = await task
        except asyncio.CancelledError:
            # Cancelled by a newer submission: drop it. Cancelled from outside: propagate.
            if task.cancelled() and not self._is_current(generation):
                return None
            raise
        except SearchError:
            if not self._is_current(generation):
                return None
            raise
        finally:
            if self._active_task is task:
                self._active_task = None

        if not self._is_current(generation):
            logger.debug("Search %r completed but was superseded (gen=%d)", query, generation)
            return None
        return songs
