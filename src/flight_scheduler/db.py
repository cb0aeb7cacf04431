import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from flight_scheduler.assembler import ScheduledFlight
from flight_scheduler.catalogs import Airport
from flight_scheduler.config import database_path
from flight_scheduler.errors import PersistenceError
from flight_scheduler.logs import logger

PathLike = Union[str, Path]


# ---------------------------
# DB helpers
# ---------------------------

def get_conn(db_path: Optional[PathLike] = None) -> sqlite3.Connection:
    """
    Open a SQLite connection to the schedule database.
    Caller is responsible for closing it.
    """
    conn = sqlite3.connect(db_path or database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: Optional[PathLike] = None) -> None:
    """
    Create tables if they don't exist yet.
    Currently: airports, scheduled_flight.
    """
    conn = get_conn(db_path)
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS airports (
                code TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                city TEXT NOT NULL,
                country TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                utc_offset REAL NOT NULL
            )
            """
        )

        # flight_number is unique per run only, so no UNIQUE constraint here
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS scheduled_flight (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                flight_number TEXT NOT NULL,
                carrier_code TEXT NOT NULL,
                origin TEXT NOT NULL REFERENCES airports(code),
                destination TEXT NOT NULL REFERENCES airports(code),
                flight_date TEXT NOT NULL,        -- YYYY-MM-DD
                slot_index INTEGER NOT NULL,
                departure_utc TEXT NOT NULL,      -- ISO 8601, UTC
                arrival_utc TEXT NOT NULL,
                duration_minutes INTEGER NOT NULL CHECK (duration_minutes > 0),
                aircraft_type TEXT NOT NULL,
                distance_km REAL NOT NULL,
                route_category TEXT NOT NULL
            )
            """
        )

        conn.commit()
    finally:
        conn.close()


def seed_airports(airports: Sequence[Airport], db_path: Optional[PathLike] = None) -> int:
    """
    Upsert catalog airports so scheduled flights have rows to reference.
    Returns how many airports were written.
    """
    conn = get_conn(db_path)
    try:
        conn.executemany(
            """
            INSERT INTO airports (code, name, city, country, latitude, longitude, utc_offset)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(code) DO UPDATE SET
                name = excluded.name, city = excluded.city, country = excluded.country,
                latitude = excluded.latitude, longitude = excluded.longitude,
                utc_offset = excluded.utc_offset
            """,
            [
                (a.code, a.name, a.city, a.country, a.latitude, a.longitude, a.utc_offset)
                for a in airports
            ],
        )
        conn.commit()
    finally:
        conn.close()
    return len(airports)


def list_airports(db_path: Optional[PathLike] = None) -> List[Dict[str, Any]]:
    conn = get_conn(db_path)
    try:
        rows = conn.execute("SELECT * FROM airports ORDER BY code").fetchall()
    finally:
        conn.close()
    return [dict(r) for r in rows]


# ---------------------------
# Scheduled flights
# ---------------------------

def count_scheduled_flights(db_path: Optional[PathLike] = None) -> int:
    """
    Return how many rows are currently in the scheduled_flight table.
    """
    conn = get_conn(db_path)
    try:
        cur = conn.execute("SELECT COUNT(*) AS c FROM scheduled_flight")
        row = cur.fetchone()
        return int(row["c"])
    finally:
        conn.close()


def bulk_insert_scheduled_flights(
    flights: Sequence[ScheduledFlight],
    db_path: Optional[PathLike] = None,
) -> int:
    """
    Insert one batch of flights as a single transaction.
    Either every row of the batch is committed or none is.
    """
    conn = get_conn(db_path)
    try:
        conn.executemany(
            """
            INSERT INTO scheduled_flight (
                flight_number, carrier_code, origin, destination,
                flight_date, slot_index, departure_utc, arrival_utc,
                duration_minutes, aircraft_type, distance_km, route_category
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    f.flight_number,
                    f.carrier_code,
                    f.origin,
                    f.destination,
                    f.flight_date.isoformat(),
                    f.slot_index,
                    f.departure_utc.isoformat(),
                    f.arrival_utc.isoformat(),
                    f.duration_minutes,
                    f.aircraft_type,
                    f.distance_km,
                    f.route_category,
                )
                for f in flights
            ],
        )
        conn.commit()
    except Exception as e:
        conn.rollback()
        raise e
    finally:
        conn.close()
    return len(flights)


def search_scheduled_flights(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    date: Optional[str] = None,
    limit: int = 100,
    db_path: Optional[PathLike] = None,
) -> List[Dict[str, Any]]:
    """
    Filter scheduled flights by any of origin, destination and flight date (YYYY-MM-DD).
    """
    clauses = []
    params: List[Any] = []
    if origin:
        clauses.append("origin = ?")
        params.append(origin.upper())
    if destination:
        clauses.append("destination = ?")
        params.append(destination.upper())
    if date:
        clauses.append("flight_date = ?")
        params.append(date)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    params.append(limit)

    conn = get_conn(db_path)
    try:
        cur = conn.execute(
            f"""
            SELECT * FROM scheduled_flight
            {where}
            ORDER BY departure_utc ASC, id ASC
            LIMIT ?
            """,
            params,
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [dict(r) for r in rows]


def get_scheduled_flight(flight_number: str, db_path: Optional[PathLike] = None) -> Optional[Dict[str, Any]]:
    """Most recently inserted row with this flight number."""
    conn = get_conn(db_path)
    try:
        cur = conn.execute(
            "SELECT * FROM scheduled_flight WHERE flight_number = ? ORDER BY id DESC LIMIT 1",
            (flight_number.upper(),),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return dict(row)


# ---------------------------
# Batch persistence
# ---------------------------

class BatchPersister(Protocol):
    def persist_batch(self, records: Sequence[ScheduledFlight]) -> None:
        ...


class InMemoryPersister:
    """Keeps committed batches in memory; used when no database is wired in."""

    def __init__(self):
        self.batches: List[List[ScheduledFlight]] = []

    @property
    def records(self) -> List[ScheduledFlight]:
        return [r for batch in self.batches for r in batch]

    def persist_batch(self, records: Sequence[ScheduledFlight]) -> None:
        self.batches.append(list(records))


class SQLitePersister:
    """
    Commits each batch handed over by the orchestrator as its own transaction.
    There is no cross-batch transaction: earlier batches stay committed.
    """

    def __init__(self, db_path: Optional[PathLike] = None):
        self.db_path = Path(db_path) if db_path else database_path()
        self.batches_committed = 0

    def prepare(self, airports: Sequence[Airport]) -> None:
        init_db(self.db_path)
        seed_airports(airports, self.db_path)
        logger.info(f"Database ready at {self.db_path.resolve()}")

    def persist_batch(self, records: Sequence[ScheduledFlight]) -> None:
        try:
            bulk_insert_scheduled_flights(records, self.db_path)
        except sqlite3.Error as e:
            logger.error(
                "Batch insert failed",
                extra={"action": "persist_batch_error", "rows": len(records), "db_path": str(self.db_path)},
            )
            raise PersistenceError(f"Could not commit batch of {len(records)} flight(s): {e}") from e
        self.batches_committed += 1
