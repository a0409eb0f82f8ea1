"""
Internal DB subpackage for Mixtape.

Schema/migrations and slot queries live here. External code should import
the storage classes from `mixtape.core.storage`.
"""

from __future__ import annotations

# Schema / migrations
from .schema import SCHEMA_VERSION, ensure_schema, migrate

__all__ = [
    "SCHEMA_VERSION",
    "ensure_schema",
    "migrate",
]
