"""Database connection helper for the snapshot SQLite database."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from cts_mcp.data.config import get_transit_config


def get_db_path() -> Path:
    """Get the database path from configuration (CTS_DB_PATH) or default."""
    return get_transit_config().db_path


@asynccontextmanager
async def get_db(db_path: Path | None = None) -> AsyncIterator[aiosqlite.Connection]:
    """Async context manager for DB connections with Row factory.

    Args:
        db_path: Optional path to the database. If not provided, uses CTS_DB_PATH
                 or defaults to 'data/snapshot.db'.

    Yields:
        aiosqlite.Connection configured with Row factory for dict-like access.

    Raises:
        FileNotFoundError: If the database file doesn't exist.
    """
    if db_path is None:
        db_path = get_db_path()

    if not db_path.exists():
        raise FileNotFoundError(
            f"Snapshot database not found at {db_path}. "
            "Run 'cts-mcp refresh <topology.json>' to create it."
        )

    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        yield db
