"""
Domain models for Mixtape.

Songs and playlists are plain dataclasses. Their JSON form uses the camelCase
keys of the persisted `savedPlaylists` slot, so the same shape is used for
storage and for the HTTP API:

    [ { "id": "...", "name": "...", "songs": [
        { "id": "...", "trackName": "...", "artistName": "...", "albumName": "...",
          "previewUrl": "..." | null, "artworkUrl": "..." | null } ] } ]
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping


def new_id() -> str:
    """Generate a fresh opaque identifier (UUID v4 string)."""
    return str(uuid.uuid4())


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string or null, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Song:
    """
    A song as stored in a playlist.

    The id is generated locally when the song is created; catalog-provided
    ids are never reused.
    """

    track_name: str
    artist_name: str
    album_name: str
    preview_url: str | None = None
    artwork_url: str | None = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "trackName": self.track_name,
            "artistName": self.artist_name,
            "albumName": self.album_name,
            "previewUrl": self.preview_url,
            "artworkUrl": self.artwork_url,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Song:
        """
        Build a song from its JSON form.

        A missing `id` gets a fresh one. Raises KeyError/TypeError on a
        malformed mapping.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"song must be an object, got {type(data).__name__}")
        song_id = _optional_str(data, "id") or new_id()
        return cls(
            id=song_id,
            track_name=_require_str(data, "trackName"),
            artist_name=_require_str(data, "artistName"),
            album_name=_require_str(data, "albumName"),
            preview_url=_optional_str(data, "previewUrl"),
            artwork_url=_optional_str(data, "artworkUrl"),
        )


@dataclass
class Playlist:
    """
    A named, ordered list of songs.

    Songs keep insertion order and duplicates are allowed.
    """

    name: str
    songs: list[Song] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __len__(self) -> int:
        """Return number of songs in the playlist."""
        return len(self.songs)

    @property
    def is_empty(self) -> bool:
        return len(self.songs) == 0

    def copy(self) -> Playlist:
        """Detached copy; songs are immutable, so only the list is copied."""
        return Playlist(id=self.id, name=self.name, songs=list(self.songs))

    def append(self, song: Song) -> int:
        """Append a song and return its index."""
        self.songs.append(song)
        return len(self.songs) - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songs": [song.to_dict() for song in self.songs],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Playlist:
        if not isinstance(data, Mapping):
            raise TypeError(f"playlist must be an object, got {type(data).__name__}")
        raw_songs = data["songs"]
        if not isinstance(raw_songs, list):
            raise TypeError("'songs' must be a list")
        return cls(
            id=_require_str(data, "id"),
            name=_require_str(data, "name"),
            songs=[Song.from_dict(s) for s in raw_songs],
        )


def playlists_to_json_list(playlists: list[Playlist]) -> list[dict[str, Any]]:
    """Convert a playlist collection to its JSON-ready form."""
    return [p.to_dict() for p in playlists]


def playlists_from_json_list(data: Any) -> list[Playlist]:
    """
    Convert decoded JSON back into playlists.

    Raises TypeError/KeyError if the data does not have the expected shape.
    """
    if not isinstance(data, list):
        raise TypeError(f"expected a list of playlists, got {type(data).__name__}")
    return [Playlist.from_dict(item) for item in data]
