"""
Web Routes Package.

This package contains FastAPI route modules:
- api: REST API endpoints (/api/*)
"""

from mixtape.web.routes.api import create_api_router, register_api_routes

__all__ = [
    "create_api_router",
    "register_api_routes",
]
