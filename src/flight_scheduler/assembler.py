import datetime
import random
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from flight_scheduler.catalogs import AircraftType, Catalog
from flight_scheduler.config import GenerationConfig
from flight_scheduler.errors import RouteSamplingError, ScheduleAssemblyFailure
from flight_scheduler.identifiers import FlightNumberAllocator
from flight_scheduler.logs import logger
from flight_scheduler.routes import Route, sample_route
from flight_scheduler.timetable import DURATION_BOUNDS, build_times


class ScheduledFlight(BaseModel):
    """One generated row of the scheduled_flight table. Immutable once emitted."""
    model_config = {"frozen": True}

    flight_number: str = Field(..., pattern=r"^[A-Z0-9]{2}\d{4}$")
    carrier_code: str
    origin: str
    destination: str
    flight_date: datetime.date
    slot_index: int = Field(..., ge=0)
    departure_utc: datetime.datetime
    arrival_utc: datetime.datetime
    duration_minutes: int = Field(..., gt=0)
    aircraft_type: str
    distance_km: float = Field(..., gt=0)
    route_category: str

    @model_validator(mode="after")
    def check_invariants(self):
        if self.origin == self.destination:
            raise ValueError("Origin and destination cannot be the same airport")
        if self.arrival_utc <= self.departure_utc:
            raise ValueError("Arrival must be strictly after departure")
        if self.arrival_utc - self.departure_utc != datetime.timedelta(minutes=self.duration_minutes):
            raise ValueError("Duration does not match departure/arrival")
        if not self.flight_number.startswith(self.carrier_code):
            raise ValueError("Flight number must carry the carrier code")
        return self


def find_violations(
    route: Route,
    departure: datetime.datetime,
    arrival: datetime.datetime,
    aircraft: Optional[AircraftType],
    catalog: Catalog,
) -> List[str]:
    """Domain checks for a candidate flight. Empty list means it can be emitted."""
    problems: List[str] = []

    for code in (route.origin.code, route.destination.code):
        if code not in catalog:
            problems.append(f"{code} is not in the airport catalog")
    if route.distance_km <= 0:
        problems.append("airports share a location")

    if arrival <= departure:
        problems.append("arrival not after departure")
    else:
        minutes = (arrival - departure).total_seconds() / 60
        low, high = DURATION_BOUNDS[route.category]
        if not low <= minutes <= high:
            problems.append(
                f"{minutes:.0f} min outside {route.category}-haul bounds [{low}, {high}]"
            )

    if aircraft is None:
        problems.append(f"no aircraft type can fly {route.distance_km:.0f} km")
    elif aircraft.range_km < route.distance_km:
        problems.append(f"{aircraft.code} range {aircraft.range_km} km < {route.distance_km:.0f} km")

    return problems


def assemble(
    day: datetime.date,
    slot_index: int,
    catalog: Catalog,
    allocator: FlightNumberAllocator,
    rng: random.Random,
    config: Optional[GenerationConfig] = None,
) -> ScheduledFlight:
    """
    Build one valid flight for (day, slot_index).

    Each attempt resamples route, times, carrier and aircraft. After
    config.max_attempts rejected attempts a ScheduleAssemblyFailure is raised.
    ExhaustedIdentifierSpaceError from the allocator propagates untouched.
    """
    config = config or GenerationConfig()
    reasons: List[str] = []

    for attempt in range(1, config.max_attempts + 1):
        try:
            route = sample_route(catalog, rng, config.airport_weights, config.disallowed_routes)
        except RouteSamplingError as e:
            reasons.append(str(e))
            continue

        departure, arrival = build_times(
            day, route, rng, config.operating_window, config.min_duration_minutes
        )
        carrier = rng.choice(catalog.carriers)
        capable = [a for a in catalog.aircraft_types if a.range_km >= route.distance_km]
        aircraft = rng.choice(capable) if capable else None

        problems = find_violations(route, departure, arrival, aircraft, catalog)
        if problems:
            reasons.append(f"{route.origin.code}-{route.destination.code}: " + ", ".join(problems))
            logger.debug(
                "Rejected candidate flight",
                extra={"action": "assemble_reject", "day": str(day), "slot": slot_index, "attempt": attempt},
            )
            continue

        flight_number = allocator.next_flight_number(carrier.code)
        try:
            return ScheduledFlight(
                flight_number=flight_number,
                carrier_code=carrier.code,
                origin=route.origin.code,
                destination=route.destination.code,
                flight_date=day,
                slot_index=slot_index,
                departure_utc=departure,
                arrival_utc=arrival,
                duration_minutes=int((arrival - departure).total_seconds() // 60),
                aircraft_type=aircraft.code,
                distance_km=route.distance_km,
                route_category=route.category,
            )
        except ValidationError as e:
            reasons.append(
                f"{route.origin.code}-{route.destination.code}: "
                f"{flight_number} rejected ({e.error_count()} validation error(s))"
            )
            continue

    raise ScheduleAssemblyFailure(day, slot_index, reasons)
