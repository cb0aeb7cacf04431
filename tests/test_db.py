import sqlite3

import pytest

from flight_scheduler import db
from flight_scheduler.config import GenerationConfig
from flight_scheduler.db import InMemoryPersister, SQLitePersister
from flight_scheduler.errors import PersistenceError
from flight_scheduler.orchestrator import FlightDataGenerator


@pytest.fixture
def db_path(tmp_path, catalog):
    path = tmp_path / "schedule.db"
    db.init_db(path)
    db.seed_airports(catalog.airports, path)
    return path


@pytest.fixture
def flights(catalog):
    persister = InMemoryPersister()
    FlightDataGenerator(GenerationConfig(seed=11), catalog, persister).generate_data(2, 3)
    return persister.records


class TestSchema:
    def test_init_is_idempotent(self, db_path):
        db.init_db(db_path)
        assert db.count_scheduled_flights(db_path) == 0

    def test_airports_seeded(self, db_path, catalog):
        rows = db.list_airports(db_path)
        assert len(rows) == len(catalog.airports)
        assert {r["code"] for r in rows} == {a.code for a in catalog.airports}

    def test_seeding_twice_does_not_duplicate(self, db_path, catalog):
        db.seed_airports(catalog.airports, db_path)
        assert len(db.list_airports(db_path)) == len(catalog.airports)


class TestScheduledFlights:
    def test_bulk_insert_and_query(self, db_path, flights):
        assert db.bulk_insert_scheduled_flights(flights, db_path) == 6
        assert db.count_scheduled_flights(db_path) == 6

        first_day = flights[0].flight_date.isoformat()
        rows = db.search_scheduled_flights(date=first_day, db_path=db_path)
        assert len(rows) == 3
        assert all(r["flight_date"] == first_day for r in rows)

        row = db.get_scheduled_flight(flights[0].flight_number, db_path)
        assert row["origin"] == flights[0].origin
        assert row["departure_utc"] == flights[0].departure_utc.isoformat()

    def test_search_by_origin(self, db_path, flights):
        db.bulk_insert_scheduled_flights(flights, db_path)
        origin = flights[0].origin
        rows = db.search_scheduled_flights(origin=origin.lower(), db_path=db_path)
        assert rows
        assert all(r["origin"] == origin for r in rows)

    def test_missing_flight(self, db_path):
        assert db.get_scheduled_flight("HL9999", db_path) is None

    def test_failed_batch_is_rolled_back(self, db_path, flights):
        broken = flights[1].model_copy(update={"duration_minutes": 0})
        with pytest.raises(Exception):
            db.bulk_insert_scheduled_flights([flights[0], broken], db_path)
        assert db.count_scheduled_flights(db_path) == 0

    def test_unknown_airport_codes_are_rejected(self, db_path, flights):
        stray = flights[0].model_copy(update={"origin": "ZZZ", "destination": "QQQ"})
        with pytest.raises(sqlite3.IntegrityError):
            db.bulk_insert_scheduled_flights([flights[1], stray], db_path)
        assert db.count_scheduled_flights(db_path) == 0

    def test_reseeding_airports_keeps_stored_flights(self, db_path, flights, catalog):
        db.bulk_insert_scheduled_flights(flights, db_path)
        db.seed_airports(catalog.airports, db_path)
        assert db.count_scheduled_flights(db_path) == 6


class TestSQLitePersister:
    def test_prepare_creates_tables(self, tmp_path, catalog):
        persister = SQLitePersister(tmp_path / "fresh.db")
        persister.prepare(catalog.airports)
        assert db.count_scheduled_flights(persister.db_path) == 0

    def test_wraps_sqlite_errors(self, db_path, flights):
        persister = SQLitePersister(db_path)
        persister.persist_batch(flights[:2])
        broken = flights[3].model_copy(update={"duration_minutes": -5})
        with pytest.raises(PersistenceError):
            persister.persist_batch([flights[2], broken])
        assert persister.batches_committed == 1
        assert db.count_scheduled_flights(db_path) == 2

    def test_full_run_into_sqlite(self, db_path, catalog):
        persister = SQLitePersister(db_path)
        config = GenerationConfig(seed=42, batch_size=10)
        summary = FlightDataGenerator(config, catalog, persister).generate_data(15, 3)
        assert summary.generated == 45
        assert persister.batches_committed == 5
        assert db.count_scheduled_flights(db_path) == 45

    def test_env_var_selects_database(self, tmp_path, monkeypatch):
        target = tmp_path / "from_env.db"
        monkeypatch.setenv("FLIGHT_SCHEDULER_DB_PATH", str(target))
        assert SQLitePersister().db_path == target

    def test_unknown_airport_fails_the_batch(self, db_path, flights):
        persister = SQLitePersister(db_path)
        stray = flights[0].model_copy(update={"origin": "ZZZ"})
        with pytest.raises(PersistenceError):
            persister.persist_batch([stray])
        assert db.count_scheduled_flights(db_path) == 0
