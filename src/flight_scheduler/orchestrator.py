"""
Generation Orchestrator: drives days x flights-per-day through the assembler
and hands validated records to the batch persister.

A run is NOT transactional as a whole. Each batch is committed on its own, so
when a later batch fails (or the run is cancelled, or flight numbers run out)
every earlier batch stays in storage. The returned summary says which slots
were committed and where to resume.
"""

import datetime
import random
import threading
import time
from typing import List, Optional

from pydantic import BaseModel

from flight_scheduler.assembler import ScheduledFlight, assemble
from flight_scheduler.catalogs import Catalog, default_catalog
from flight_scheduler.config import GenerationConfig
from flight_scheduler.db import BatchPersister, InMemoryPersister
from flight_scheduler.errors import (
    CatalogEmptyError,
    ExhaustedIdentifierSpaceError,
    InvalidWindowError,
    ScheduleAssemblyFailure,
)
from flight_scheduler.identifiers import FlightNumberAllocator
from flight_scheduler.logs import logger


class SlotRef(BaseModel):
    day: datetime.date
    slot_index: int


class SlotFailure(BaseModel):
    day: datetime.date
    slot_index: int
    reasons: List[str]


class BatchRange(BaseModel):
    first: SlotRef
    last: SlotRef
    size: int


class GenerationSummary(BaseModel):
    days: int
    flights_per_day: int
    seed: Optional[int] = None
    requested: int = 0
    generated: int = 0
    batches_committed: int = 0
    status: str = "running"    # running | completed | aborted | cancelled
    failures: List[SlotFailure] = []
    fatal_error: Optional[str] = None
    failed_batch: Optional[BatchRange] = None
    committed_through: Optional[SlotRef] = None
    resume_from: Optional[SlotRef] = None
    elapsed_seconds: float = 0.0

    @property
    def skipped(self) -> int:
        return len(self.failures)

    @property
    def remaining(self) -> int:
        return self.requested - self.generated - self.skipped

    def tally(self) -> dict:
        return {
            "generated": self.generated,
            "skipped": self.skipped,
            "failed_fatal": self.remaining if self.status == "aborted" else 0,
            "cancelled": self.remaining if self.status == "cancelled" else 0,
        }


class FlightDataGenerator:
    """
    Owns the random source and the run-scoped identifier allocator.
    Slots are processed in ascending (day, slot) order, so a fixed seed gives
    the same records every time.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        catalog: Optional[Catalog] = None,
        persister: Optional[BatchPersister] = None,
    ):
        self.config = config or GenerationConfig()
        self.catalog = catalog or default_catalog()
        self.persister = persister if persister is not None else InMemoryPersister()
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Stop issuing slots. Safe to call from another thread or a signal handler."""
        self._cancel.set()

    def check_config(self) -> None:
        self.catalog.require_routable(self.config.disallowed_routes)
        weights = self.config.airport_weights
        if weights:
            # only airports with a positive weight can ever be drawn
            drawable = [a.code for a in self.catalog.airports if weights.get(a.code, 1.0) > 0]
            if len(drawable) < 2:
                raise CatalogEmptyError(
                    f"Airport weights leave {len(drawable)} drawable airport(s), at least 2 are required"
                )
            self.catalog.restricted_to(drawable).require_routable(self.config.disallowed_routes)
        window = self.config.operating_window
        if window.width_minutes == 0:
            raise InvalidWindowError(
                f"Operating window {window.start:%H:%M}-{window.end:%H:%M} has zero width"
            )

    def generate_data(self, days: int, flights_per_day: int) -> GenerationSummary:
        """
        Generate `flights_per_day` flights on each of `days` consecutive days
        starting at config.base_date.

        Configuration errors raise before anything is generated or persisted.
        Slot-level failures are skipped and listed in the summary. Identifier
        exhaustion and persistence errors stop the run and are reported in
        the summary rather than raised.
        """
        if days < 0 or flights_per_day < 0:
            raise ValueError("days and flights_per_day must be non-negative")
        self.check_config()

        config = self.config
        rng = random.Random(config.seed)
        allocator = FlightNumberAllocator(
            start=config.flight_number_start,
            maximum=config.flight_number_max,
            strategy=config.id_strategy,
            rng=rng,
        )
        summary = GenerationSummary(
            days=days,
            flights_per_day=flights_per_day,
            seed=config.seed,
            requested=days * flights_per_day,
        )
        started = time.time()

        logger.info(
            f"Generating {summary.requested} flight(s): {days} day(s) x {flights_per_day} per day "
            f"from {config.base_date} (seed={config.seed}, batch_size={config.batch_size})"
        )

        batch: List[ScheduledFlight] = []
        batch_first: Optional[SlotRef] = None
        batch_last: Optional[SlotRef] = None

        for day_offset in range(days):
            day = config.base_date + datetime.timedelta(days=day_offset)
            for slot_index in range(flights_per_day):
                here = SlotRef(day=day, slot_index=slot_index)

                if self._cancel.is_set():
                    summary.status = "cancelled"
                    summary.resume_from = batch_first or here
                    logger.warning(
                        f"Run cancelled at {day} slot {slot_index}; "
                        f"{len(batch)} unflushed record(s) discarded"
                    )
                    return self._finish(summary, started)

                try:
                    flight = assemble(day, slot_index, self.catalog, allocator, rng, config)
                except ScheduleAssemblyFailure as e:
                    summary.failures.append(
                        SlotFailure(day=day, slot_index=slot_index, reasons=e.reasons)
                    )
                    logger.warning(
                        str(e),
                        extra={"action": "slot_skipped", "day": str(day), "slot": slot_index},
                    )
                    continue
                except ExhaustedIdentifierSpaceError as e:
                    logger.error(str(e), extra={"action": "identifiers_exhausted"})
                    if batch and not self._flush(batch, batch_first, batch_last, summary):
                        return self._finish(summary, started)
                    summary.status = "aborted"
                    summary.fatal_error = str(e)
                    summary.resume_from = here
                    return self._finish(summary, started)

                if not batch:
                    batch_first = here
                batch.append(flight)
                batch_last = here

                if len(batch) >= config.batch_size:
                    if not self._flush(batch, batch_first, batch_last, summary):
                        return self._finish(summary, started)
                    batch, batch_first, batch_last = [], None, None

        if batch and not self._flush(batch, batch_first, batch_last, summary):
            return self._finish(summary, started)

        summary.status = "completed"
        return self._finish(summary, started)

    def _flush(
        self,
        batch: List[ScheduledFlight],
        first: SlotRef,
        last: SlotRef,
        summary: GenerationSummary,
    ) -> bool:
        """Hand one batch to the persister. Returns False if the run must stop."""
        try:
            self.persister.persist_batch(list(batch))
        except Exception as e:
            summary.status = "aborted"
            summary.fatal_error = str(e)
            summary.failed_batch = BatchRange(first=first, last=last, size=len(batch))
            summary.resume_from = first
            logger.exception(
                f"Batch {first.day} slot {first.slot_index} .. {last.day} slot {last.slot_index} "
                f"({len(batch)} record(s)) failed to persist; earlier batches remain committed",
                extra={"action": "flush_error"},
            )
            return False

        summary.generated += len(batch)
        summary.batches_committed += 1
        summary.committed_through = last
        logger.info(
            f"Committed batch {summary.batches_committed} ({len(batch)} record(s), "
            f"{summary.generated}/{summary.requested} total)",
            extra={"action": "flush", "rows": len(batch)},
        )
        return True

    def _finish(self, summary: GenerationSummary, started: float) -> GenerationSummary:
        # a cancel() applies to one run, including one requested before it started
        self._cancel.clear()
        summary.elapsed_seconds = round(time.time() - started, 3)
        tally = summary.tally()
        log = logger.info if summary.status == "completed" else logger.warning
        log(
            f"Run {summary.status}: generated={tally['generated']} skipped={tally['skipped']} "
            f"failed_fatal={tally['failed_fatal']} cancelled={tally['cancelled']} "
            f"in {summary.elapsed_seconds:.2f}s"
        )
        return summary
