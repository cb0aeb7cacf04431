"""
Console driver: generate flights and insert them into scheduled_flight.

    python -m flight_scheduler --days 15 --flights-per-day 3 --seed 42
"""

import argparse
import datetime
import signal
import sys
from typing import List, Optional

from dotenv import load_dotenv

from flight_scheduler.catalogs import default_catalog
from flight_scheduler.config import (
    BATCH_SIZE,
    FLIGHTS_PER_DAY,
    NUM_DAYS,
    WINDOW_END,
    WINDOW_START,
    GenerationConfig,
    OperatingWindow,
)
from flight_scheduler.db import SQLitePersister
from flight_scheduler.errors import GenerationError
from flight_scheduler.orchestrator import FlightDataGenerator


def _time(value: str) -> datetime.time:
    try:
        return datetime.datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected HH:MM, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flight_scheduler",
        description="Generate synthetic scheduled flights into a SQLite database.",
    )
    parser.add_argument("--days", type=int, default=NUM_DAYS, help="consecutive days to cover")
    parser.add_argument("--flights-per-day", type=int, default=FLIGHTS_PER_DAY)
    parser.add_argument("--seed", type=int, default=None, help="fix the random source")
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    parser.add_argument("--db-path", default=None, help="defaults to FLIGHT_SCHEDULER_DB_PATH")
    parser.add_argument("--window-start", type=_time, default=WINDOW_START)
    parser.add_argument("--window-end", type=_time, default=WINDOW_END)
    parser.add_argument("--base-date", type=datetime.date.fromisoformat, default=None, help="first day, YYYY-MM-DD")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.days < 0 or args.flights_per_day < 0:
        parser.error("--days and --flights-per-day must be non-negative")

    options = {
        "seed": args.seed,
        "batch_size": args.batch_size,
        "operating_window": OperatingWindow(start=args.window_start, end=args.window_end),
    }
    if args.base_date is not None:
        options["base_date"] = args.base_date
    config = GenerationConfig(**options)
    catalog = default_catalog()
    persister = SQLitePersister(args.db_path)
    generator = FlightDataGenerator(config, catalog, persister)

    try:
        generator.check_config()
        persister.prepare(catalog.airports)
    except GenerationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: generator.cancel())
    try:
        print("Generating data...")
        summary = generator.generate_data(args.days, args.flights_per_day)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    tally = summary.tally()
    print(
        f"Done ({summary.status}). generated={tally['generated']} skipped={tally['skipped']} "
        f"failed_fatal={tally['failed_fatal']} cancelled={tally['cancelled']}"
    )
    if summary.failed_batch is not None:
        fb = summary.failed_batch
        print(
            f"Failed batch: {fb.first.day} slot {fb.first.slot_index} .. "
            f"{fb.last.day} slot {fb.last.slot_index}: {summary.fatal_error}"
        )
    if summary.resume_from is not None:
        print(f"Resume from {summary.resume_from.day} slot {summary.resume_from.slot_index}")

    return 0 if summary.status == "completed" else 1


if __name__ == "__main__":
    sys.exit(main())
