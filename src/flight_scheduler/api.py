import datetime
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from flight_scheduler.catalogs import default_catalog
from flight_scheduler.config import BATCH_SIZE, GenerationConfig, OperatingWindow
from flight_scheduler.db import (
    SQLitePersister,
    count_scheduled_flights,
    get_scheduled_flight,
    init_db,
    list_airports,
    search_scheduled_flights,
    seed_airports,
)
from flight_scheduler.errors import CatalogEmptyError, InvalidWindowError
from flight_scheduler.logs import logger
from flight_scheduler.orchestrator import FlightDataGenerator

load_dotenv()

app = FastAPI(title="Flight Schedule Generator (DB-backed)")


# ---------------------------
# Startup: ensure DB + airports
# ---------------------------

@app.on_event("startup")
def startup_event() -> None:
    """Initialize database and make sure the airport catalog is present."""
    init_db()
    seeded = seed_airports(default_catalog().airports)
    existing = count_scheduled_flights()
    logger.info(f"[api] {seeded} airports seeded, {existing} scheduled flights already stored")


# ---------------------------
# Request Models
# ---------------------------

class GenerateRequest(BaseModel):
    days: int = Field(..., ge=0, le=366)
    flights_per_day: int = Field(..., ge=0, le=1000)
    seed: Optional[int] = None
    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    window_start: Optional[datetime.time] = None
    window_end: Optional[datetime.time] = None
    base_date: Optional[datetime.date] = None


# ---------------------------
# Endpoints
# ---------------------------

@app.post("/generate")
def generate_endpoint(request: GenerateRequest) -> Dict[str, Any]:
    """
    Run one generation and persist it batch by batch.

    Example:
    POST /generate
    {"days": 15, "flights_per_day": 3, "seed": 42}
    """
    window = OperatingWindow()
    if request.window_start is not None or request.window_end is not None:
        window = OperatingWindow(
            start=request.window_start or window.start,
            end=request.window_end or window.end,
        )

    options: Dict[str, Any] = {
        "seed": request.seed,
        "batch_size": request.batch_size,
        "operating_window": window,
    }
    if request.base_date is not None:
        options["base_date"] = request.base_date

    catalog = default_catalog()
    persister = SQLitePersister()
    persister.prepare(catalog.airports)
    generator = FlightDataGenerator(GenerationConfig(**options), catalog, persister)

    try:
        summary = generator.generate_data(request.days, request.flights_per_day)
    except (CatalogEmptyError, InvalidWindowError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"tally": summary.tally(), "summary": summary.model_dump(mode="json")}


@app.get("/airports")
def airports_endpoint() -> List[Dict[str, Any]]:
    return list_airports()


@app.get("/scheduled-flights")
def search_flights(
    origin: Optional[str] = Query(None, min_length=3, max_length=4),
    destination: Optional[str] = Query(None, min_length=3, max_length=4),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    limit: int = Query(100, ge=1, le=1000),
) -> List[Dict[str, Any]]:
    """
    Search generated flights by origin, destination and/or date.

    Example:
    GET /scheduled-flights?origin=JFK&date=2025-12-01
    """
    if date is not None:
        try:
            datetime.date.fromisoformat(date)
        except ValueError:
            raise HTTPException(status_code=400, detail="Date must be in YYYY-MM-DD format")

    return search_scheduled_flights(origin, destination, date, limit)


@app.get("/scheduled-flights/{flight_number}")
def get_flight_endpoint(flight_number: str) -> Dict[str, Any]:
    """
    Get the most recent flight stored under this flight number.

    Example:
    GET /scheduled-flights/HL0001
    """
    flight = get_scheduled_flight(flight_number)
    if flight is None:
        raise HTTPException(status_code=404, detail="Flight not found")
    return flight
