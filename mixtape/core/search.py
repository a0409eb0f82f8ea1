"""
Catalog search for Mixtape.

`SearchService` queries the iTunes Search API and maps each result into a
`Song`. It is stateless apart from its HTTP client: every call is independent,
nothing is cached and nothing is retried. Callers that issue overlapping
searches are responsible for discarding stale results (see
`mixtape.core.search_session`).

Request:
    GET <base_url>/search?term=<percent-encoded query>&entity=song

Expected response:
    {"results": [{"trackName": str, "artistName": str, "collectionName": str,
                  "previewUrl": str | null, "artworkUrl100": str | null}, ...]}

Any other shape is reported as `DecodingError`.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from mixtape.core import CoreError
from mixtape.core.models import Song

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://itunes.apple.com"

# Catalog field -> optional Song field
ARTWORK_FIELD = "artworkUrl100"
PREVIEW_FIELD = "previewUrl"


class SearchError(CoreError):
    """Base error for catalog search failures."""


class InvalidQueryError(SearchError):
    """Raised when a query cannot be turned into a valid request URL."""


class NetworkError(SearchError):
    """Raised on transport errors, timeouts and non-success HTTP statuses."""


class DecodingError(SearchError):
    """Raised when the response body does not have the expected shape."""


def build_search_url(base_url: str, query: str) -> httpx.URL:
    """
    Build the catalog search URL for a query.

    The query is percent-encoded in full (no characters left unescaped), so
    `&`, `=` and `#` cannot break out of the `term` parameter.

    Raises:
        InvalidQueryError: If the query cannot be encoded or the URL is invalid.
    """
    try:
        encoded = quote(query, safe="")
    except UnicodeEncodeError as e:
        raise InvalidQueryError(f"Query cannot be encoded: {e}") from e

    try:
        return httpx.URL(f"{base_url.rstrip('/')}/search?term={encoded}&entity=song")
    except httpx.InvalidURL as e:
        raise InvalidQueryError(f"Invalid search URL: {e}") from e


def _require_text(entry: dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str):
        raise DecodingError(f"Catalog entry field {key!r} missing or not a string")
    return value


def _optional_text(entry: dict[str, Any], key: str) -> str | None:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise DecodingError(f"Catalog entry field {key!r} is not a string")
    return value


def song_from_catalog_entry(entry: Any) -> Song:
    """
    Map one raw catalog entry to a Song with a fresh id.

    Raises:
        DecodingError: If the entry does not have the expected fields.
    """
    if not isinstance(entry, dict):
        raise DecodingError(f"Catalog entry is not an object: {type(entry).__name__}")
    return Song(
        track_name=_require_text(entry, "trackName"),
        artist_name=_require_text(entry, "artistName"),
        album_name=_require_text(entry, "collectionName"),
        preview_url=_optional_text(entry, PREVIEW_FIELD),
        artwork_url=_optional_text(entry, ARTWORK_FIELD),
    )


def parse_search_response(payload: Any) -> list[Song]:
    """
    Map a decoded search response body to songs, one per result entry.

    Raises:
        DecodingError: If the payload does not match the expected shape.
    """
    if not isinstance(payload, dict):
        raise DecodingError("Response body is not a JSON object")
    results = payload.get("results")
    if not isinstance(results, list):
        raise DecodingError("Response body has no 'results' list")
    return [song_from_catalog_entry(entry) for entry in results]


class SearchService:
    """
    Song search against the public catalog.

    The service owns its `httpx.AsyncClient` unless one is passed in; an
    injected client is left open on `aclose()`.

    Usage:
        async with SearchService() as service:
            songs = await service.search("daft punk")
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_CATALOG_URL,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            base_url: Catalog host, e.g. "https://itunes.apple.com".
            timeout: Request timeout in seconds. None keeps the httpx default.
            client: Optional pre-configured HTTP client.
        """
        self._base_url = base_url
        self._owns_client = client is None
        if client is None:
            if timeout is None:
                client = httpx.AsyncClient()
            else:
                client = httpx.AsyncClient(timeout=timeout)
        self._client = client

    @property
    def base_url(self) -> str:
        return self._base_url

    async def search(self, query: str) -> list[Song]:
        """
        Search the catalog for songs.

        An empty query returns an empty list without a network call.

        Raises:
            InvalidQueryError: The query cannot be encoded into a request URL.
            NetworkError: Transport failure, timeout or non-2xx status.
            DecodingError: The response body has an unexpected shape.
        """
        if not query:
            return []

        url = build_search_url(self._base_url, query)
        logger.debug("Searching catalog: %s", url)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Catalog search failed for %r: %s", query, e)
            raise NetworkError(str(e) or type(e).__name__) from e

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            raise DecodingError(f"Response body is not valid JSON: {e}") from e

        songs = parse_search_response(payload)
        logger.debug("Catalog search %r returned %d songs", query, len(songs))
        return songs

    async def aclose(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> SearchService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
