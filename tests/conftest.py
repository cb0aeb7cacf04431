import random

import pytest

from flight_scheduler.catalogs import default_catalog
from flight_scheduler.config import GenerationConfig
from flight_scheduler.db import InMemoryPersister


class FailingPersister(InMemoryPersister):
    """Raises on the Nth persist_batch call (1-based), records the rest."""

    def __init__(self, fail_on_call: int):
        super().__init__()
        self.fail_on_call = fail_on_call
        self.calls = 0

    def persist_batch(self, records):
        self.calls += 1
        if self.calls == self.fail_on_call:
            raise ConnectionError("database went away")
        super().persist_batch(records)


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def three_airports(catalog):
    return catalog.restricted_to(["JFK", "LAX", "ORD"])


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def seeded_config():
    return GenerationConfig(seed=42)


@pytest.fixture
def persister():
    return InMemoryPersister()


@pytest.fixture
def failing_persister():
    return FailingPersister
