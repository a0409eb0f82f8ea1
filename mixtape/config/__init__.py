"""
Configuration management for Mixtape.

This module loads catalog, storage and web settings from TOML files. The
package ships `defaults.toml`; a user file passed on the command line is
layered on top of it, section by section.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = CONFIG_DIR / "defaults.toml"


@dataclass(frozen=True)
class CatalogConfig:
    """Where and how to reach the song catalog."""

    base_url: str = "https://itunes.apple.com"
    timeout: float | None = None  # None = HTTP client default


@dataclass(frozen=True)
class StorageConfig:
    db_path: Path = Path("mixtape.sqlite3")
    key: str = "savedPlaylists"


@dataclass(frozen=True)
class WebConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class MixtapeConfig:
    """Loaded application configuration."""

    catalog: CatalogConfig = CatalogConfig()
    storage: StorageConfig = StorageConfig()
    web: WebConfig = WebConfig()


def _read_toml(path: Path) -> dict[str, Any]:
    logger.debug("Loading config from %s", path)
    with path.open("rb") as f:
        return tomllib.load(f)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two parsed TOML documents, one level deep (per section)."""
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in base.items()}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def _parse_timeout(value: object) -> float | None:
    """Parse the catalog timeout. Zero, negative or missing means "client default"."""
    if value is None:
        return None
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid catalog timeout: %r", value)
        return None
    return timeout if timeout > 0 else None


def _parse_config(data: dict[str, Any]) -> MixtapeConfig:
    catalog = data.get("catalog", {})
    storage = data.get("storage", {})
    web = data.get("web", {})

    return MixtapeConfig(
        catalog=CatalogConfig(
            base_url=str(catalog.get("base_url", CatalogConfig.base_url)),
            timeout=_parse_timeout(catalog.get("timeout")),
        ),
        storage=StorageConfig(
            db_path=Path(storage.get("db_path", StorageConfig.db_path)),
            key=str(storage.get("key", StorageConfig.key)),
        ),
        web=WebConfig(
            host=str(web.get("host", WebConfig.host)),
            port=int(web.get("port", WebConfig.port)),
        ),
    )


def load_config(config_path: Path | None = None) -> MixtapeConfig:
    """
    Load configuration from TOML.

    Args:
        config_path: Optional user config file. Values it sets override
            the packaged defaults; everything else keeps its default.

    Returns:
        Loaded MixtapeConfig instance.
    """
    data = _read_toml(DEFAULT_CONFIG_PATH)
    if config_path is not None:
        data = _merge(data, _read_toml(config_path))
    return _parse_config(data)


# Global singleton instance (lazy loaded)
_config: MixtapeConfig | None = None


def get_config() -> MixtapeConfig:
    """
    Get the global configuration (lazy loaded singleton).

    Returns:
        The MixtapeConfig instance.
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reload_config(config_path: Path | None = None) -> MixtapeConfig:
    """
    Force reload of configuration.

    Returns:
        The newly loaded MixtapeConfig instance.
    """
    global _config
    _config = load_config(config_path)
    return _config
