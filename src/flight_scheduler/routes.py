import math
import random
from typing import Dict, Iterable, Optional, Tuple

from flight_scheduler.catalogs import Airport, Catalog
from flight_scheduler.errors import CatalogEmptyError, RouteSamplingError

EARTH_RADIUS_KM = 6371.0
MAX_ROUTE_DRAWS = 100

# Upper distance bound (exclusive) per category; anything beyond is long-haul.
SHORT_HAUL_KM = 1500
MEDIUM_HAUL_KM = 4000


def great_circle_km(a: Airport, b: Airport) -> float:
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def route_category(distance_km: float) -> str:
    if distance_km < SHORT_HAUL_KM:
        return "short"
    if distance_km < MEDIUM_HAUL_KM:
        return "medium"
    return "long"


class Route:
    """Ordered origin/destination pair. Not persisted."""

    __slots__ = ("origin", "destination", "distance_km", "category")

    def __init__(self, origin: Airport, destination: Airport):
        if origin.code == destination.code:
            raise ValueError(f"Route origin and destination are both {origin.code}")
        self.origin = origin
        self.destination = destination
        self.distance_km = great_circle_km(origin, destination)
        self.category = route_category(self.distance_km)

    def __repr__(self) -> str:
        return f"Route({self.origin.code}->{self.destination.code}, {self.distance_km:.0f} km, {self.category})"


def sample_route(
    catalog: Catalog,
    rng: random.Random,
    weights: Optional[Dict[str, float]] = None,
    disallowed: Optional[Iterable[Tuple[str, str]]] = None,
) -> Route:
    """
    Draw an ordered pair of distinct airports.

    Uniform by default; with `weights` (code -> weight, missing codes weigh 1.0)
    origin and destination are drawn independently. Self-pairs and disallowed
    pairs are redrawn here, never surfaced to the caller.
    """
    pool = catalog.airports
    if len(pool) < 2:
        raise CatalogEmptyError(f"Cannot sample a route from {len(pool)} airport(s)")

    blocked = set(disallowed or ())
    pool_weights = [weights.get(a.code, 1.0) for a in pool] if weights else None
    if pool_weights is not None and sum(pool_weights) <= 0:
        raise RouteSamplingError("Airport weights sum to zero")

    for _ in range(MAX_ROUTE_DRAWS):
        if pool_weights is None:
            origin, destination = rng.sample(pool, 2)  # ensures origin != destination
        else:
            origin, destination = rng.choices(pool, weights=pool_weights, k=2)
            if origin.code == destination.code:
                continue
        if (origin.code, destination.code) in blocked:
            continue
        return Route(origin, destination)

    raise RouteSamplingError(f"No allowed route found in {MAX_ROUTE_DRAWS} draws")
