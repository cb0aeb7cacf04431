import random
from typing import Optional, Set

from flight_scheduler.config import FLIGHT_NUMBER_MAX, FLIGHT_NUMBER_START
from flight_scheduler.errors import ExhaustedIdentifierSpaceError


class FlightNumberAllocator:
    """
    Hands out flight numbers that never repeat within one run.

    The numeric part is unique on its own, so "HL0042" and "ES0042" can never
    both be issued. Strategies:
      - sequential: plain counter from `start` to `maximum`
      - random: collision-checked draw from the same range using the run's rng
    """

    def __init__(
        self,
        start: int = FLIGHT_NUMBER_START,
        maximum: int = FLIGHT_NUMBER_MAX,
        strategy: str = "sequential",
        rng: Optional[random.Random] = None,
    ):
        if maximum < start:
            raise ValueError(f"Empty flight number range [{start}, {maximum}]")
        if strategy not in ("sequential", "random"):
            raise ValueError(f"Unknown identifier strategy: {strategy}")
        if strategy == "random" and rng is None:
            raise ValueError("The random strategy needs the run's random source")

        self.start = start
        self.maximum = maximum
        self.strategy = strategy
        self._rng = rng
        self._next = start
        self._seen: Set[int] = set()
        self._issued: Set[str] = set()

    @property
    def capacity(self) -> int:
        return self.maximum - self.start + 1

    @property
    def issued(self) -> int:
        return len(self._seen)

    def is_issued(self, flight_number: str) -> bool:
        return flight_number in self._issued

    def next_flight_number(self, carrier_code: str) -> str:
        n = self._next_number()
        self._seen.add(n)
        flight_number = f"{carrier_code}{n:04d}"
        self._issued.add(flight_number)
        return flight_number

    def _next_number(self) -> int:
        if len(self._seen) >= self.capacity:
            raise ExhaustedIdentifierSpaceError(
                f"All {self.capacity} flight numbers in [{self.start}, {self.maximum}] are used"
            )

        if self.strategy == "sequential":
            n = self._next
            self._next += 1
            return n

        # after repeated collisions take the lowest free number
        for _ in range(32):
            n = self._rng.randint(self.start, self.maximum)
            if n not in self._seen:
                return n
        return next(n for n in range(self.start, self.maximum + 1) if n not in self._seen)
