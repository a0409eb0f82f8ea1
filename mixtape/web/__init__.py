"""
Mixtape Web Layer.

This package provides the HTTP/REST API layer for Mixtape, letting UI
clients search the catalog and curate playlists.

Components:
- WebServer: FastAPI application with all routes
"""

from mixtape.web.server import WebServer

__all__ = [
    "WebServer",
]
