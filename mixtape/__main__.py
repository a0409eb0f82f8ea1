"""
Mixtape - Entry Point

Run with: python -m mixtape
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from mixtape.config import MixtapeConfig, load_config
from mixtape.server import MixtapeServer


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mixtape",
        description="Mixtape - song search and playlist curation server",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML config file (overrides packaged defaults)",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host address to bind to (default: from config)",
    )

    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="HTTP port (default: from config)",
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite file for saved playlists (default: from config)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> MixtapeConfig:
    """Load the config file and apply command line overrides."""
    config = load_config(args.config)

    web = config.web
    if args.host is not None:
        web = dataclasses.replace(web, host=args.host)
    if args.port is not None:
        web = dataclasses.replace(web, port=args.port)

    storage = config.storage
    if args.db is not None:
        storage = dataclasses.replace(storage, db_path=args.db)

    return dataclasses.replace(config, web=web, storage=storage)


async def run_server(config: MixtapeConfig) -> None:
    """Start and run the Mixtape server."""
    server = MixtapeServer(config)
    await server.run()


def main() -> int:
    """Main entry point for the application."""
    args = parse_args()
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting Mixtape...")

    try:
        config = build_config(args)
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
