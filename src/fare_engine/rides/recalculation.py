"""Drop-off triggered repricing of a ride's remaining riders.

Every recalculation is a full recompute: the route is rebuilt from the
ride's active members and every active member's price is overwritten.
Members already dropped off keep the fare they were charged.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from fare_engine.core.correlation import with_correlation
from fare_engine.core.exceptions import NotFoundError
from fare_engine.fare_logging import log_ride_context
from fare_engine.pricing.engine import FareEngine
from fare_engine.pricing.models import FareBreakdown, RiderSegmentRequest
from fare_engine.rides.member import MemberStatus, RideMember
from fare_engine.rides.repository import RideRepository
from fare_engine.rides.ride import RideSnapshot

if TYPE_CHECKING:
    from fare_engine.redis_client.publisher import RedisPublisher

logger = logging.getLogger(__name__)


class FareChange(BaseModel):
    """One member's stored price before and after a recalculation."""

    member_id: str
    rider_id: str
    previous_price: int
    new_price: int
    fare: FareBreakdown


class RecalculationResult(BaseModel):
    """Updated ride snapshot plus the fares that produced it."""

    ride: RideSnapshot
    fares: dict[str, FareBreakdown] = Field(default_factory=dict)
    changes: list[FareChange] = Field(default_factory=list)
    dropped_member_id: str | None = None

    @property
    def ride_completed(self) -> bool:
        return bool(self.ride.members) and self.ride.all_members_settled


class RideLockRegistry:
    """Per-ride mutexes so concurrent mutations of one ride run one at a time.

    Locks are created on first use and dropped with ``discard`` once the
    ride is finished.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, ride_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(ride_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[ride_id] = lock
            return lock

    @contextmanager
    def hold(self, ride_id: str) -> Iterator[None]:
        with self.lock_for(ride_id):
            yield

    def discard(self, ride_id: str) -> None:
        """Forget a finished ride's lock."""
        with self._guard:
            self._locks.pop(ride_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def rider_requests(members: list[RideMember]) -> list[RiderSegmentRequest]:
    return [
        RiderSegmentRequest(
            rider_id=m.rider_id,
            pickup=m.pickup,
            drop=m.drop,
            drop_order=m.effective_drop_order,
            wait_minutes=m.wait_minutes,
        )
        for m in members
    ]


class FareRecalculator:
    """Reprices rides when their membership changes.

    Each mutation loads the ride from the repository, changes it and saves it
    back while holding that ride's lock, so concurrent drop-offs on one ride
    always see each other's writes. Different rides proceed in parallel.
    Fare updates are published after the ride's lock is released.
    """

    def __init__(
        self,
        engine: FareEngine,
        repository: RideRepository,
        publisher: "RedisPublisher | None" = None,
        locks: RideLockRegistry | None = None,
    ) -> None:
        self.engine = engine
        self.repository = repository
        self.publisher = publisher
        self.locks = locks or RideLockRegistry()

    def recalculate(self, ride_id: str) -> RecalculationResult:
        """Reprice every active member of the ride and store the new prices.

        Raises:
            NotFoundError: if the repository has no such ride.
        """
        with self.locks.hold(ride_id):
            result = self._reprice(self._load(ride_id))
            self.repository.save(result.ride)
        self._publish(result)
        return result

    def drop_off(
        self, ride_id: str, member_id: str, at: datetime | None = None
    ) -> RecalculationResult:
        """Mark a member dropped off and reprice the riders still aboard.

        Non-shared rides are not repriced: their single booking was quoted
        up front for every seat. Once every member is settled the ride's
        lock is released from the registry.

        Raises:
            NotFoundError: if the ride or the member does not exist.
            StateError: if the member cannot be dropped off from its status.
        """
        with self.locks.hold(ride_id):
            ride = self._load(ride_id)
            member = ride.get_member(member_id)
            member.transition_to(MemberStatus.DROPPED_OFF)
            member.dropped_off_at = at or datetime.now()

            with log_ride_context(ride_id, member_id=member_id, rider_id=member.rider_id):
                logger.info(f"Member {member_id} dropped off")

            if ride.is_shared:
                result = self._reprice(ride)
            else:
                result = RecalculationResult(ride=ride)
            result.dropped_member_id = member_id
            self.repository.save(result.ride)

        if result.ride_completed:
            self.locks.discard(ride_id)
            logger.info(f"Ride {ride_id} completed, lock released")

        self._publish(result)
        return result

    def _load(self, ride_id: str) -> RideSnapshot:
        ride = self.repository.get(ride_id)
        if ride is None:
            raise NotFoundError(f"Ride {ride_id} not found", details={"ride_id": ride_id})
        return ride

    def _reprice(self, ride: RideSnapshot) -> RecalculationResult:
        with with_correlation(ride.ride_id), log_ride_context(ride.ride_id):
            active = ride.active_members
            if not active:
                logger.info("No active members left, nothing to reprice")
                return RecalculationResult(ride=ride)

            fares = self.engine.price_ride(
                ride.origin,
                rider_requests(active),
                ride.departure_time,
                driver_location=ride.driver_location,
            )

            changes: list[FareChange] = []
            for member in active:
                fare = fares[member.rider_id]
                changes.append(
                    FareChange(
                        member_id=member.member_id,
                        rider_id=member.rider_id,
                        previous_price=member.price,
                        new_price=fare.total_fare,
                        fare=fare,
                    )
                )
                if member.original_price is None:
                    member.original_price = member.price
                member.price = fare.total_fare
                member.solo_distance_km = fare.solo_distance_km
                member.shared_distance_km = fare.shared_distance_km

            logger.info(
                f"Repriced {len(active)} active members: "
                + ", ".join(f"{c.rider_id} {c.previous_price}->{c.new_price}" for c in changes)
            )
            return RecalculationResult(ride=ride, fares=fares, changes=changes)

    def _publish(self, result: RecalculationResult) -> None:
        if self.publisher is None:
            return
        if result.dropped_member_id is not None:
            member = result.ride.get_member(result.dropped_member_id)
            self.publisher.publish_member_update(result.ride.ride_id, member)
        if result.changes:
            self.publisher.publish_fare_changes(result.ride.ride_id, result.changes)
