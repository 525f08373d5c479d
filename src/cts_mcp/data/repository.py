"""In-memory owner of the current static data snapshot."""

import logging
from pathlib import Path

from cts_mcp.data.snapshot_store import SnapshotStore
from cts_mcp.models.schedule import RouteStopSchedule
from cts_mcp.models.static import StaticData, TransitSnapshot

logger = logging.getLogger(__name__)


class TransitRepository:
    """Holds the snapshot that every request reads from.

    The snapshot is immutable and replaced whole by reload() or replace(), so
    concurrent requests never observe a partially refreshed state.
    """

    def __init__(self, snapshot: TransitSnapshot | None = None, db_path: Path | None = None):
        """Initialize the repository.

        Args:
            snapshot: Optional initial snapshot.
            db_path: Optional snapshot database used by reload().
        """
        self._snapshot = snapshot
        self._db_path = db_path

    @property
    def snapshot(self) -> TransitSnapshot:
        """The current snapshot.

        Raises:
            RuntimeError: If no snapshot has been loaded yet.
        """
        if self._snapshot is None:
            raise RuntimeError(
                "No static data loaded. Run 'cts-mcp refresh <topology.json>' and reload."
            )
        return self._snapshot

    @property
    def has_snapshot(self) -> bool:
        return self._snapshot is not None

    def replace(self, snapshot: TransitSnapshot) -> None:
        """Swap in a new snapshot."""
        self._snapshot = snapshot
        logger.info(f"Static data snapshot replaced (created {snapshot.created_at.isoformat()})")

    async def reload(self) -> TransitSnapshot:
        """Load the latest snapshot from the snapshot database.

        Raises:
            RuntimeError: If the repository has no database path.
            FileNotFoundError: If the database doesn't exist.
        """
        if self._db_path is None:
            raise RuntimeError("Repository has no snapshot database configured")
        snapshot = await SnapshotStore(self._db_path).load()
        self.replace(snapshot)
        return snapshot

    async def get_static_data(self) -> StaticData:
        """Get stops and routes."""
        return self.snapshot.static_data

    async def get_schedule(self) -> dict[int, list[RouteStopSchedule]]:
        """Get the schedule of every route at every stop, keyed by stop ID."""
        return self.snapshot.schedule

    async def get_platform_tags(self) -> dict[int, int]:
        """Get the stop ID -> platform tag mapping used for ETA lookups."""
        return self.snapshot.platform_tags


# Repository used by the MCP tools, installed by the server at startup
_repository: TransitRepository | None = None


def configure_repository(repository: TransitRepository | None) -> None:
    """Install the repository the MCP tools read from (None to uninstall)."""
    global _repository
    _repository = repository


def get_repository() -> TransitRepository:
    """Get the installed repository.

    Raises:
        RuntimeError: If the server has not installed one.
    """
    if _repository is None:
        raise RuntimeError("Transit repository not configured - start the server with 'cts-mcp'")
    return _repository


def find_repository() -> TransitRepository | None:
    """Get the installed repository, or None if the server has not installed one."""
    return _repository
