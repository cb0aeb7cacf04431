"""
Exception taxonomy for schedule generation.

Configuration errors (CatalogEmptyError, InvalidWindowError) abort a run before
any slot is generated. ScheduleAssemblyFailure is per slot and recoverable.
ExhaustedIdentifierSpaceError and PersistenceError stop the remaining run but
never undo batches that were already committed.
"""

from typing import List, Optional


class GenerationError(Exception):
    """Base class for everything the generator raises on purpose."""


class CatalogEmptyError(GenerationError):
    pass


class InvalidWindowError(GenerationError):
    pass


class ExhaustedIdentifierSpaceError(GenerationError):
    pass


class RouteSamplingError(GenerationError):
    pass


class ScheduleAssemblyFailure(GenerationError):
    def __init__(self, day, slot_index: int, reasons: Optional[List[str]] = None):
        self.day = day
        self.slot_index = slot_index
        self.reasons = list(reasons or [])
        detail = "; ".join(self.reasons) if self.reasons else "no reason recorded"
        super().__init__(
            f"Could not assemble flight for {day} slot {slot_index} "
            f"after {len(self.reasons)} attempt(s): {detail}"
        )


class PersistenceError(GenerationError):
    """A batch could not be committed; the batch is rolled back as a unit."""
