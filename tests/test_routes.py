import random

import pytest

from flight_scheduler.errors import CatalogEmptyError, RouteSamplingError
from flight_scheduler.routes import Route, great_circle_km, route_category, sample_route


class TestRoute:
    def test_self_pair_rejected(self, catalog):
        jfk = catalog.airport("JFK")
        with pytest.raises(ValueError):
            Route(jfk, jfk)

    def test_distance_is_symmetric(self, catalog):
        lhr, jfk = catalog.airport("LHR"), catalog.airport("JFK")
        assert great_circle_km(lhr, jfk) == pytest.approx(great_circle_km(jfk, lhr))
        assert 5400 < great_circle_km(lhr, jfk) < 5700

    def test_categories(self, catalog):
        assert Route(catalog.airport("LHR"), catalog.airport("CDG")).category == "short"
        assert Route(catalog.airport("JFK"), catalog.airport("LHR")).category == "long"
        assert route_category(2500) == "medium"
        assert route_category(1500) == "medium"
        assert route_category(4000) == "long"


class TestSampleRoute:
    def test_never_self_pair(self, three_airports, rng):
        for _ in range(500):
            route = sample_route(three_airports, rng)
            assert route.origin.code != route.destination.code
            assert route.origin.code in three_airports
            assert route.destination.code in three_airports

    def test_covers_all_ordered_pairs(self, three_airports, rng):
        seen = {
            (r.origin.code, r.destination.code)
            for r in (sample_route(three_airports, rng) for _ in range(500))
        }
        assert len(seen) == 6

    def test_reproducible(self, catalog):
        rng_a, rng_b = random.Random(9), random.Random(9)
        a = [sample_route(catalog, rng_a) for _ in range(20)]
        b = [sample_route(catalog, rng_b) for _ in range(20)]
        assert repr(a) == repr(b)

    def test_weighted_excludes_zero_weight(self, three_airports, rng):
        weights = {"JFK": 1.0, "LAX": 1.0, "ORD": 0.0}
        for _ in range(200):
            route = sample_route(three_airports, rng, weights=weights)
            assert "ORD" not in (route.origin.code, route.destination.code)

    def test_zero_weights(self, three_airports, rng):
        with pytest.raises(RouteSamplingError):
            sample_route(three_airports, rng, weights={"JFK": 0, "LAX": 0, "ORD": 0})

    def test_disallowed_pairs_redrawn(self, three_airports, rng):
        allowed = ("JFK", "LAX")
        disallowed = [
            (o, d) for o in ("JFK", "LAX", "ORD") for d in ("JFK", "LAX", "ORD")
            if o != d and (o, d) != allowed
        ]
        for _ in range(50):
            route = sample_route(three_airports, rng, disallowed=disallowed)
            assert (route.origin.code, route.destination.code) == allowed

    def test_single_airport(self, catalog, rng):
        with pytest.raises(CatalogEmptyError):
            sample_route(catalog.restricted_to(["JFK"]), rng)

    def test_gives_up_when_nothing_allowed(self, catalog, rng):
        pair = catalog.restricted_to(["JFK", "LAX"])
        with pytest.raises(RouteSamplingError):
            sample_route(pair, rng, disallowed=[("JFK", "LAX"), ("LAX", "JFK")])
