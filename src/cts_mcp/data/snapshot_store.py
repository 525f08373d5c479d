"""SQLite storage for static data snapshots."""

import json
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from cts_mcp.data.database import get_db
from cts_mcp.models.schedule import RouteStopSchedule
from cts_mcp.models.static import BusRoute, BusStop, StaticData, TransitSnapshot

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
-- stops
CREATE TABLE stops (
    stop_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    lat REAL NOT NULL,
    long REAL NOT NULL,
    route_names TEXT NOT NULL
);

-- routes
CREATE TABLE routes (
    route_no TEXT PRIMARY KEY,
    display_name TEXT,
    color TEXT NOT NULL,
    url TEXT
);

-- platform_tags
CREATE TABLE platform_tags (
    stop_id INTEGER PRIMARY KEY,
    platform_tag INTEGER NOT NULL
);

-- stop_schedules: one row per route per stop, day schedules as JSON
CREATE TABLE stop_schedules (
    stop_id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    route_no TEXT NOT NULL,
    day_schedules TEXT NOT NULL,
    PRIMARY KEY (stop_id, position)
);

-- snapshot_info
CREATE TABLE snapshot_info (
    created_at TEXT NOT NULL
);
"""


class SnapshotStore:
    """Saves and loads TransitSnapshot objects to a SQLite database."""

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path of the SQLite database.
        """
        self.db_path = Path(db_path)

    async def save(self, snapshot: TransitSnapshot) -> dict[str, int]:
        """Write a snapshot, replacing any previous one.

        Uses atomic swap: writes into a temp DB, then replaces the target DB, so a
        failed write leaves the previous snapshot in place.

        Args:
            snapshot: The snapshot to persist.

        Returns:
            Dictionary with row counts per table.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            # Remove temp db if it exists from a previous failed run
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                await db.executescript(SCHEMA_SQL)
                row_counts = await self._write_snapshot(db, snapshot)
                await db.commit()

            # atomic swap
            temp_db.replace(self.db_path)

            logger.info(f"Snapshot saved: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _write_snapshot(
        self, db: aiosqlite.Connection, snapshot: TransitSnapshot
    ) -> dict[str, int]:
        static_data = snapshot.static_data

        stop_rows = [
            (stop.id, stop.name, stop.lat, stop.long, json.dumps(stop.route_names))
            for stop in static_data.stops.values()
        ]
        await db.executemany(
            "INSERT INTO stops (stop_id, name, lat, long, route_names) VALUES (?,?,?,?,?)",
            stop_rows,
        )

        route_rows = [
            (route.route_no, route.display_name, route.color, route.url)
            for route in static_data.routes.values()
        ]
        await db.executemany(
            "INSERT INTO routes (route_no, display_name, color, url) VALUES (?,?,?,?)",
            route_rows,
        )

        tag_rows = list(snapshot.platform_tags.items())
        await db.executemany(
            "INSERT INTO platform_tags (stop_id, platform_tag) VALUES (?,?)", tag_rows
        )

        schedule_rows = []
        for stop_id, route_schedules in snapshot.schedule.items():
            for position, route_schedule in enumerate(route_schedules):
                day_schedules = [
                    ds.model_dump(mode="json") for ds in route_schedule.day_schedules
                ]
                schedule_rows.append(
                    (stop_id, position, route_schedule.route_no, json.dumps(day_schedules))
                )
        await db.executemany(
            "INSERT INTO stop_schedules (stop_id, position, route_no, day_schedules) "
            "VALUES (?,?,?,?)",
            schedule_rows,
        )

        await db.execute(
            "INSERT INTO snapshot_info (created_at) VALUES (?)",
            (snapshot.created_at.isoformat(),),
        )

        return {
            "stops": len(stop_rows),
            "routes": len(route_rows),
            "platform_tags": len(tag_rows),
            "stop_schedules": len(schedule_rows),
        }

    async def load(self) -> TransitSnapshot:
        """Read the stored snapshot.

        Returns:
            The snapshot, with an entry in the schedule for every stop.

        Raises:
            FileNotFoundError: If the database doesn't exist.
            ValueError: If the database holds no snapshot.
        """
        async with get_db(self.db_path) as db:
            async with db.execute("SELECT created_at FROM snapshot_info") as cursor:
                info_row = await cursor.fetchone()
            if info_row is None:
                raise ValueError(f"No snapshot stored in {self.db_path}")

            async with db.execute(
                "SELECT stop_id, name, lat, long, route_names FROM stops"
            ) as cursor:
                stops = {
                    row["stop_id"]: BusStop(
                        id=row["stop_id"],
                        name=row["name"],
                        lat=row["lat"],
                        long=row["long"],
                        route_names=json.loads(row["route_names"]),
                    )
                    for row in await cursor.fetchall()
                }

            async with db.execute(
                "SELECT route_no, display_name, color, url FROM routes"
            ) as cursor:
                routes = {
                    row["route_no"]: BusRoute(
                        route_no=row["route_no"],
                        display_name=row["display_name"],
                        color=row["color"],
                        url=row["url"],
                    )
                    for row in await cursor.fetchall()
                }

            async with db.execute("SELECT stop_id, platform_tag FROM platform_tags") as cursor:
                platform_tags = {
                    row["stop_id"]: row["platform_tag"] for row in await cursor.fetchall()
                }

            schedule: dict[int, list[RouteStopSchedule]] = {stop_id: [] for stop_id in stops}
            async with db.execute(
                "SELECT stop_id, route_no, day_schedules FROM stop_schedules "
                "ORDER BY stop_id, position"
            ) as cursor:
                for row in await cursor.fetchall():
                    schedule.setdefault(row["stop_id"], []).append(
                        RouteStopSchedule(
                            route_no=row["route_no"],
                            day_schedules=json.loads(row["day_schedules"]),
                        )
                    )

        return TransitSnapshot(
            static_data=StaticData(stops=stops, routes=routes),
            schedule=schedule,
            platform_tags=platform_tags,
            created_at=datetime.fromisoformat(info_row["created_at"]),
        )
