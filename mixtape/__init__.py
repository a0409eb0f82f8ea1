"""
Mixtape - search a public song catalog and curate local playlists.

Mixtape pairs a catalog search service (iTunes Search API) with a playlist
store persisted as JSON in a SQLite-backed key-value slot, and exposes both
through a small HTTP API.
"""

__version__ = "0.1.0"
__author__ = "Mixtape Contributors"
__license__ = "GPL-2.0"

from mixtape.server import MixtapeServer

__all__ = ["MixtapeServer", "__version__"]
