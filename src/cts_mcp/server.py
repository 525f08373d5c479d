import argparse
import asyncio
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from cts_mcp.app import mcp
from cts_mcp.data.config import get_transit_config
from cts_mcp.data.repository import TransitRepository, configure_repository, find_repository
from cts_mcp.models.responses import HealthResponse

# Registers the tools on `mcp`
from cts_mcp.tools import (  # noqa: F401
    arrivals_tools,
    favorites_tools,
    refresh_tools,
    static_tools,
)

logger = logging.getLogger(__name__)


@mcp.tool()
def health() -> HealthResponse:
    """Check if the CTS MCP server is running and healthy.

    Returns the server status, version, current timestamp, and when the loaded
    static data snapshot was built. Status is "no_data" until a snapshot is loaded.
    """
    from cts_mcp import __version__

    repository = find_repository()
    snapshot_created_at = None
    if repository is not None and repository.has_snapshot:
        snapshot_created_at = repository.snapshot.created_at.isoformat()

    return HealthResponse(
        status="ok" if snapshot_created_at is not None else "no_data",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        snapshot_created_at=snapshot_created_at,
    )


async def run_refresh(topology_path: Path, db_path: Path) -> None:
    """Build and store a snapshot from a topology document."""
    from cts_mcp.services.refresh_service import refresh_snapshot

    row_counts = await refresh_snapshot(topology_path, db_path)

    print("\nRefresh complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")


async def load_repository(db_path: Path) -> TransitRepository:
    """Create the server's repository, loading the snapshot if one is stored."""
    repository = TransitRepository(db_path=db_path)
    if db_path.exists():
        await repository.reload()
    else:
        logger.warning(
            f"No snapshot database at {db_path}. Run 'cts-mcp refresh <topology.json>' "
            "and call reload_static_data."
        )
    return repository


def main() -> None:
    config = get_transit_config()

    parser = argparse.ArgumentParser(
        prog="cts-mcp",
        description="CTS Transit MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve command (also the default)
    subparsers.add_parser("serve", help="Run the MCP server over stdio")

    # refresh command
    refresh_parser = subparsers.add_parser(
        "refresh",
        help="Build the static data snapshot from a topology JSON document",
    )
    refresh_parser.add_argument(
        "topology_path",
        type=Path,
        help="Path to the topology JSON document",
    )
    refresh_parser.add_argument(
        "--db",
        type=Path,
        default=config.db_path,
        help="SQLite database path (default: data/snapshot.db or CTS_DB_PATH env var)",
    )
    refresh_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.command == "refresh":
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        try:
            asyncio.run(run_refresh(args.topology_path, args.db))
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Refresh failed: {e}")
            sys.exit(1)
    else:
        # Default: run MCP server. stdout carries the protocol, so log to stderr.
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )
        configure_repository(asyncio.run(load_repository(config.db_path)))
        mcp.run()


if __name__ == "__main__":
    main()
