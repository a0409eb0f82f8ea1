"""
Tests for the catalog SearchService.

The catalog is replaced with `httpx.MockTransport`, so no network is used.

Tests cover:
- Request construction (percent-encoding, entity filter)
- Field-for-field mapping of catalog entries to songs
- Empty queries short-circuiting
- InvalidQueryError / NetworkError / DecodingError
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from mixtape.core.search import (
    DecodingError,
    InvalidQueryError,
    NetworkError,
    SearchError,
    SearchService,
    build_search_url,
    parse_search_response,
)

CATALOG = "https://catalog.test"

Handler = Callable[[httpx.Request], httpx.Response]


def entry(
    track: str,
    artist: str = "Daft Punk",
    album: str = "Discovery",
    **extra: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "wrapperType": "track",
        "trackId": 697195787,
        "trackName": track,
        "artistName": artist,
        "collectionName": album,
    }
    data.update(extra)
    return data


class RecordingCatalog:
    """Mock catalog that records requests and answers with a fixed response."""

    def __init__(self, response: httpx.Response | Exception) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def json_catalog(payload: Any, status_code: int = 200) -> RecordingCatalog:
    return RecordingCatalog(httpx.Response(status_code, json=payload))


def raw_catalog(body: bytes, status_code: int = 200) -> RecordingCatalog:
    return RecordingCatalog(
        httpx.Response(status_code, content=body, headers={"content-type": "application/json"})
    )


async def run_search(handler: Handler, query: str):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = SearchService(base_url=CATALOG, client=client)
        return await service.search(query)


# =============================================================================
# Request construction
# =============================================================================


class TestBuildSearchUrl:
    """Tests for build_search_url()."""

    def test_entity_filter_and_term(self) -> None:
        url = build_search_url(CATALOG, "daft punk")
        assert url.path == "/search"
        assert url.params["term"] == "daft punk"
        assert url.params["entity"] == "song"

    def test_reserved_characters_stay_in_term(self) -> None:
        """'&', '=' and '#' cannot leak into other parameters."""
        url = build_search_url(CATALOG, "AC/DC & friends=#1")
        assert url.params["term"] == "AC/DC & friends=#1"
        assert url.params["entity"] == "song"
        assert url.fragment == ""

    def test_trailing_slash_in_base_url(self) -> None:
        url = build_search_url(CATALOG + "/", "x")
        assert url.path == "/search"

    def test_unencodable_query(self) -> None:
        """Lone surrogates cannot be percent-encoded."""
        with pytest.raises(InvalidQueryError):
            build_search_url(CATALOG, "bad \ud800 query")


# =============================================================================
# Successful searches
# =============================================================================


class TestSearchSuccess:
    """Tests for successful searches."""

    async def test_maps_fields(self) -> None:
        """Each entry maps field-for-field to a Song."""
        catalog = json_catalog(
            {
                "resultCount": 2,
                "results": [
                    entry(
                        "One More Time",
                        previewUrl="https://audio.example/omt.m4a",
                        artworkUrl100="https://img.example/omt100.jpg",
                        artworkUrl60="https://img.example/omt60.jpg",
                    ),
                    entry("Aerodynamic"),
                ],
            }
        )

        songs = await run_search(catalog, "daft punk")

        assert len(songs) == 2
        first, second = songs
        assert first.track_name == "One More Time"
        assert first.artist_name == "Daft Punk"
        assert first.album_name == "Discovery"
        assert first.preview_url == "https://audio.example/omt.m4a"
        assert first.artwork_url == "https://img.example/omt100.jpg"
        assert second.track_name == "Aerodynamic"
        assert second.preview_url is None
        assert second.artwork_url is None

    async def test_fresh_ids_not_catalog_ids(self) -> None:
        """Songs get fresh ids; the catalog's trackId is not reused."""
        catalog = json_catalog({"results": [entry("A"), entry("A")]})

        songs = await run_search(catalog, "a")

        assert songs[0].id != songs[1].id
        assert all(s.id != "697195787" for s in songs)

    async def test_request_shape(self) -> None:
        """One GET to /search with term and entity=song."""
        catalog = json_catalog({"results": []})

        await run_search(catalog, "café del mar")

        assert len(catalog.requests) == 1
        request = catalog.requests[0]
        assert request.method == "GET"
        assert request.url.host == "catalog.test"
        assert request.url.path == "/search"
        assert request.url.params["term"] == "café del mar"
        assert request.url.params["entity"] == "song"

    async def test_empty_results(self) -> None:
        songs = await run_search(json_catalog({"resultCount": 0, "results": []}), "zzz")
        assert songs == []

    async def test_null_optional_fields(self) -> None:
        """Explicit nulls for optional URLs are accepted."""
        catalog = json_catalog({"results": [entry("A", previewUrl=None, artworkUrl100=None)]})

        songs = await run_search(catalog, "a")

        assert songs[0].preview_url is None
        assert songs[0].artwork_url is None

    async def test_empty_query_makes_no_request(self) -> None:
        """An empty query returns no songs without calling the catalog."""
        catalog = json_catalog({"results": [entry("A")]})

        songs = await run_search(catalog, "")

        assert songs == []
        assert catalog.requests == []


# =============================================================================
# Failures
# =============================================================================


class TestSearchFailures:
    """Tests for typed search failures."""

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    async def test_transport_errors(self, error: Exception) -> None:
        with pytest.raises(NetworkError):
            await run_search(RecordingCatalog(error), "a")

    @pytest.mark.parametrize("status_code", [400, 403, 404, 500, 503])
    async def test_non_success_status(self, status_code: int) -> None:
        catalog = json_catalog({"results": [entry("A")]}, status_code=status_code)
        with pytest.raises(NetworkError):
            await run_search(catalog, "a")

    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"<html>Service Unavailable</html>",
            b'{"results": [',
            b"[]",
            b"{}",
            b'{"results": null}',
            b'{"results": "nope"}',
            b'{"results": ["nope"]}',
            json.dumps({"results": [{"trackName": "A", "artistName": "B"}]}).encode(),
            json.dumps(
                {"results": [{"trackName": 1, "artistName": "B", "collectionName": "C"}]}
            ).encode(),
            json.dumps(
                {
                    "results": [
                        {
                            "trackName": "A",
                            "artistName": "B",
                            "collectionName": "C",
                            "previewUrl": 5,
                        }
                    ]
                }
            ).encode(),
            json.dumps({"results": [entry("ok"), {"wrapperType": "collection"}]}).encode(),
            pytest.param(
                b'{"results": ' + b"[" * 200_000 + b"]" * 200_000 + b"}", id="deeply-nested"
            ),
        ],
    )
    async def test_malformed_bodies(self, body: bytes) -> None:
        """Any unexpected body shape is a DecodingError."""
        with pytest.raises(DecodingError):
            await run_search(raw_catalog(body), "a")

    async def test_invalid_query(self) -> None:
        """An unencodable query fails before any request is made."""
        catalog = json_catalog({"results": []})

        with pytest.raises(InvalidQueryError):
            await run_search(catalog, "\udcff")

        assert catalog.requests == []

    async def test_all_failures_share_a_base(self) -> None:
        """Callers can catch every search failure with SearchError."""
        for exc in (InvalidQueryError, NetworkError, DecodingError):
            assert issubclass(exc, SearchError)

    async def test_network_error_chains_cause(self) -> None:
        with pytest.raises(NetworkError) as info:
            await run_search(RecordingCatalog(httpx.ConnectError("refused")), "a")
        assert isinstance(info.value.__cause__, httpx.ConnectError)


class TestParseSearchResponse:
    """Tests for the pure response mapper."""

    def test_one_song_per_entry(self) -> None:
        songs = parse_search_response({"results": [entry("A"), entry("B"), entry("C")]})
        assert [s.track_name for s in songs] == ["A", "B", "C"]

    def test_rejects_non_object(self) -> None:
        with pytest.raises(DecodingError):
            parse_search_response([entry("A")])


class TestServiceLifecycle:
    """Tests for client ownership."""

    async def test_injected_client_left_open(self) -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(json_catalog({}))) as client:
            service = SearchService(base_url=CATALOG, client=client)
            await service.aclose()
            assert not client.is_closed

    async def test_owned_client_closed(self) -> None:
        async with SearchService(base_url=CATALOG, timeout=2.0) as service:
            assert service.base_url == CATALOG
        assert service._client.is_closed
