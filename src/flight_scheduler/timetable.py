import datetime
import random
from typing import Optional, Tuple

from flight_scheduler.config import MIN_DURATION_MINUTES, OperatingWindow
from flight_scheduler.errors import InvalidWindowError
from flight_scheduler.routes import Route

DEPARTURE_GRID_MINUTES = 5
TAXI_OVERHEAD_MINUTES = 30
CRUISE_SPEED_KMH = 780

# Block time bounds (minutes) per route category.
DURATION_BOUNDS = {
    "short": (30, 240),
    "medium": (90, 480),
    "long": (240, 1140),
}


def estimate_block_minutes(distance_km: float) -> float:
    return TAXI_OVERHEAD_MINUTES + distance_km / CRUISE_SPEED_KMH * 60


def sample_duration(route: Route, rng: random.Random, min_duration: int = MIN_DURATION_MINUTES) -> int:
    """Jittered block time for the route, rounded to the grid and clamped to its category."""
    estimate = estimate_block_minutes(route.distance_km)
    minutes = rng.randint(int(estimate * 0.9), int(estimate * 1.15))
    minutes = DEPARTURE_GRID_MINUTES * round(minutes / DEPARTURE_GRID_MINUTES)

    low, high = DURATION_BOUNDS[route.category]
    minutes = max(low, min(high, minutes))
    return max(minutes, min_duration)


def local_to_utc(local: datetime.datetime, utc_offset_hours: float) -> datetime.datetime:
    shifted = local - datetime.timedelta(minutes=round(utc_offset_hours * 60))
    return shifted.replace(tzinfo=datetime.timezone.utc)


def build_times(
    day: datetime.date,
    route: Route,
    rng: random.Random,
    window: Optional[OperatingWindow] = None,
    min_duration: int = MIN_DURATION_MINUTES,
) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Departure and arrival (aware, UTC) for one flight on `day`.

    The departure is drawn in the origin's local time inside `window`. A window
    that wraps midnight puts late departures on the next calendar day, and the
    arrival may land on a later day than the departure.
    """
    window = window or OperatingWindow()
    width = window.width_minutes
    if width == 0:
        raise InvalidWindowError(
            f"Operating window {window.start:%H:%M}-{window.end:%H:%M} has zero width"
        )

    offset = rng.randrange(0, width, DEPARTURE_GRID_MINUTES)
    local_departure = datetime.datetime.combine(day, window.start.replace(second=0, microsecond=0))
    local_departure += datetime.timedelta(minutes=offset)
    departure = local_to_utc(local_departure, route.origin.utc_offset)

    duration = sample_duration(route, rng, min_duration)
    arrival = departure + datetime.timedelta(minutes=duration)
    return departure, arrival
