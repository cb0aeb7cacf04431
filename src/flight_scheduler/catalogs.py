"""
Static reference data the generator draws from: airports, carriers, aircraft types.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from flight_scheduler.errors import CatalogEmptyError


class Airport(BaseModel):
    model_config = {"frozen": True}

    code: str = Field(..., pattern=r"^[A-Z0-9]{3,4}$")
    name: str
    city: str
    country: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    utc_offset: float = Field(..., ge=-12, le=14)  # hours


class Carrier(BaseModel):
    model_config = {"frozen": True}

    code: str = Field(..., pattern=r"^[A-Z0-9]{2}$")
    name: str


class AircraftType(BaseModel):
    model_config = {"frozen": True}

    code: str
    name: str
    seats: int = Field(..., gt=0)
    range_km: int = Field(..., gt=0)


# ---------------------------
# Built-in reference data
# ---------------------------

AIRPORTS: Tuple[Airport, ...] = tuple(
    Airport(code=c, name=n, city=city, country=ctry, latitude=lat, longitude=lon, utc_offset=tz)
    for c, n, city, ctry, lat, lon, tz in [
        ("JFK", "John F. Kennedy International", "New York", "USA", 40.6413, -73.7781, -5),
        ("LAX", "Los Angeles International", "Los Angeles", "USA", 33.9416, -118.4085, -8),
        ("ORD", "O'Hare International", "Chicago", "USA", 41.9742, -87.9073, -6),
        ("ATL", "Hartsfield-Jackson Atlanta International", "Atlanta", "USA", 33.6407, -84.4277, -5),
        ("DFW", "Dallas/Fort Worth International", "Dallas", "USA", 32.8998, -97.0403, -6),
        ("DEN", "Denver International", "Denver", "USA", 39.8561, -104.6737, -7),
        ("SEA", "Seattle-Tacoma International", "Seattle", "USA", 47.4502, -122.3088, -8),
        ("MIA", "Miami International", "Miami", "USA", 25.7959, -80.2870, -5),
        ("BOS", "Logan International", "Boston", "USA", 42.3656, -71.0096, -5),
        ("SFO", "San Francisco International", "San Francisco", "USA", 37.6213, -122.3790, -8),
        ("LHR", "Heathrow", "London", "UK", 51.4700, -0.4543, 0),
        ("CDG", "Charles de Gaulle", "Paris", "France", 49.0097, 2.5479, 1),
        ("FRA", "Frankfurt am Main", "Frankfurt", "Germany", 50.0379, 8.5622, 1),
        ("NRT", "Narita International", "Tokyo", "Japan", 35.7720, 140.3929, 9),
        ("DEL", "Indira Gandhi International", "Delhi", "India", 28.5562, 77.1000, 5.5),
    ]
)

CARRIERS: Tuple[Carrier, ...] = (
    Carrier(code="HL", name="Hellas Air"),
    Carrier(code="ES", name="EuroSky"),
    Carrier(code="GW", name="Global Wings"),
    Carrier(code="SL", name="SkyLink"),
    Carrier(code="CN", name="Air Continental"),
    Carrier(code="BJ", name="BlueJet"),
)

AIRCRAFT_TYPES: Tuple[AircraftType, ...] = (
    AircraftType(code="E175", name="Embraer 175", seats=76, range_km=3700),
    AircraftType(code="B738", name="Boeing 737-800", seats=189, range_km=5400),
    AircraftType(code="A20N", name="Airbus A320neo", seats=180, range_km=6300),
    AircraftType(code="A21N", name="Airbus A321neo", seats=220, range_km=7400),
    AircraftType(code="B789", name="Boeing 787-9", seats=296, range_km=14000),
    AircraftType(code="A359", name="Airbus A350-900", seats=325, range_km=15000),
)


def airports() -> Tuple[Airport, ...]:
    return AIRPORTS


def carriers() -> Tuple[Carrier, ...]:
    return CARRIERS


def aircraft_types() -> Tuple[AircraftType, ...]:
    return AIRCRAFT_TYPES


class Catalog:
    """
    Read-only bundle of reference data consulted during a run.
    Order is preserved so that seeded sampling is reproducible.
    """

    def __init__(
        self,
        airports: Sequence[Airport],
        carriers: Sequence[Carrier] = CARRIERS,
        aircraft_types: Sequence[AircraftType] = AIRCRAFT_TYPES,
    ):
        self.airports: Tuple[Airport, ...] = tuple(airports)
        self.carriers: Tuple[Carrier, ...] = tuple(carriers)
        self.aircraft_types: Tuple[AircraftType, ...] = tuple(aircraft_types)

        self._by_code: Dict[str, Airport] = {}
        for airport in self.airports:
            if airport.code in self._by_code:
                raise ValueError(f"Duplicate airport code in catalog: {airport.code}")
            self._by_code[airport.code] = airport

    def __contains__(self, code: str) -> bool:
        return code in self._by_code

    def airport(self, code: str) -> Airport:
        return self._by_code[code]

    def restricted_to(self, codes: Iterable[str]) -> "Catalog":
        """Subset of airports by code, keeping this catalog's order."""
        wanted = {c.upper() for c in codes}
        unknown = wanted - set(self._by_code)
        if unknown:
            raise KeyError(f"Unknown airport code(s): {', '.join(sorted(unknown))}")
        return Catalog(
            [a for a in self.airports if a.code in wanted],
            self.carriers,
            self.aircraft_types,
        )

    def require_routable(self, disallowed: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        """Raise CatalogEmptyError unless at least one flight can be formed."""
        if len(self.airports) < 2:
            raise CatalogEmptyError(
                f"At least 2 airports are required to form a route, catalog has {len(self.airports)}"
            )
        if not self.carriers:
            raise CatalogEmptyError("Catalog has no carriers")
        if not self.aircraft_types:
            raise CatalogEmptyError("Catalog has no aircraft types")

        blocked = set(disallowed or ())
        if blocked:
            codes: List[str] = [a.code for a in self.airports]
            if all((o, d) in blocked for o in codes for d in codes if o != d):
                raise CatalogEmptyError("Every airport pair in the catalog is disallowed")


def default_catalog() -> Catalog:
    return Catalog(airports(), carriers(), aircraft_types())
