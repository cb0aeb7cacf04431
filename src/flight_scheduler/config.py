"""
Centralized configuration for the flight schedule generator.
"""

import datetime
import os
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

# ---------------------------
# Database Configuration
# ---------------------------

BASE_DIR = Path(__file__).parent
DEFAULT_DB_PATH = BASE_DIR / "flight_schedule.db"


def database_path() -> Path:
    """Resolve the SQLite file, honouring FLIGHT_SCHEDULER_DB_PATH (.env is loaded by the entry points)."""
    return Path(os.environ.get("FLIGHT_SCHEDULER_DB_PATH", str(DEFAULT_DB_PATH)))


# ---------------------------
# Generation Defaults
# ---------------------------

BASE_DATE = datetime.date(2025, 12, 1)
NUM_DAYS = 15              # how many days forward to generate
FLIGHTS_PER_DAY = 3        # flights per generated day
BATCH_SIZE = 50            # records per persistence flush
MAX_ASSEMBLY_ATTEMPTS = 5  # retries per slot before it is skipped
MIN_DURATION_MINUTES = 30

WINDOW_START = datetime.time(5, 0)
WINDOW_END = datetime.time(23, 0)

FLIGHT_NUMBER_START = 1
FLIGHT_NUMBER_MAX = 9999


class OperatingWindow(BaseModel):
    """
    Local departure window at the origin airport.
    start > end means the window wraps past midnight; start == end is empty.
    """
    model_config = {"frozen": True}

    start: datetime.time = WINDOW_START
    end: datetime.time = WINDOW_END

    @property
    def width_minutes(self) -> int:
        start = self.start.hour * 60 + self.start.minute
        end = self.end.hour * 60 + self.end.minute
        return (end - start) % (24 * 60)


class GenerationConfig(BaseModel):
    """Everything a run needs; passed explicitly into the orchestrator."""
    model_config = {"frozen": True}

    seed: Optional[int] = None
    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    operating_window: OperatingWindow = Field(default_factory=OperatingWindow)
    base_date: datetime.date = BASE_DATE
    max_attempts: int = Field(default=MAX_ASSEMBLY_ATTEMPTS, ge=1)
    min_duration_minutes: int = Field(default=MIN_DURATION_MINUTES, ge=1)
    flight_number_start: int = Field(default=FLIGHT_NUMBER_START, ge=0)
    flight_number_max: int = Field(default=FLIGHT_NUMBER_MAX, ge=0, le=9999)
    id_strategy: Literal["sequential", "random"] = "sequential"
    airport_weights: Optional[Dict[str, float]] = None
    disallowed_routes: List[Tuple[str, str]] = Field(default_factory=list)

    @field_validator("airport_weights")
    @classmethod
    def validate_weights(cls, v):
        if v is not None and any(w < 0 for w in v.values()):
            raise ValueError("Airport weights must be non-negative")
        return v

    @field_validator("disallowed_routes")
    @classmethod
    def normalize_routes(cls, v):
        return [(origin.upper(), destination.upper()) for origin, destination in v]

    @model_validator(mode="after")
    def check_flight_number_range(self):
        if self.flight_number_start > self.flight_number_max:
            raise ValueError(
                f"flight_number_start {self.flight_number_start} is above "
                f"flight_number_max {self.flight_number_max}"
            )
        return self
