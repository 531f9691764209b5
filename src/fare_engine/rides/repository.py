"""Ride storage seam used by the recalculator."""

import threading
from typing import Protocol

from fare_engine.rides.ride import RideSnapshot


class RideRepository(Protocol):
    """Where the recalculator reads and writes ride state.

    Implementations back onto the caller's persistence layer. ``get`` must
    return the latest committed state; the recalculator calls it while
    holding the ride's lock.
    """

    def get(self, ride_id: str) -> RideSnapshot | None: ...

    def save(self, ride: RideSnapshot) -> None: ...


class InMemoryRideRepository:
    """Process-local repository holding copies of ride snapshots."""

    def __init__(self, rides: list[RideSnapshot] | None = None) -> None:
        self._rides: dict[str, RideSnapshot] = {}
        self._guard = threading.Lock()
        for ride in rides or []:
            self.save(ride)

    def get(self, ride_id: str) -> RideSnapshot | None:
        """Get a ride by ID; callers receive their own copy."""
        with self._guard:
            ride = self._rides.get(ride_id)
            return ride.model_copy(deep=True) if ride is not None else None

    def save(self, ride: RideSnapshot) -> None:
        with self._guard:
            self._rides[ride.ride_id] = ride.model_copy(deep=True)

    def __len__(self) -> int:
        with self._guard:
            return len(self._rides)
