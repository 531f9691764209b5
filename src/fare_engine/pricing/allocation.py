"""Splits the cost of each route leg among the riders who caused or shared it.

Allocation rules per segment type:
- SOLO: the one rider aboard pays the full per-km rate.
- SHARED: the per-km cost is split evenly; every rider is credited with the
  full distance travelled.
- DETOUR: priced at the detour rate. The rider being picked up pays
  ``detour_creator_share`` of it and the riders already aboard split the rest.

Amounts are kept unrounded here; rounding happens once, at finalization.
"""

import logging
from collections.abc import Iterable, Mapping

from fare_engine.core.exceptions import AllocationError
from fare_engine.geo.distance import Coordinate, haversine_distance_km
from fare_engine.pricing.models import (
    FareBreakdown,
    RiderSegmentRequest,
    RouteSegment,
    SegmentType,
    round_currency,
)
from fare_engine.settings import PricingConfig

logger = logging.getLogger(__name__)


class _Ledger:
    """Breakdowns keyed by rider, remembering which riders the route touched."""

    def __init__(self, rider_ids: Iterable[str]):
        self.fares = {rider_id: FareBreakdown(rider_id=rider_id) for rider_id in rider_ids}
        self.seen: set[str] = set()

    def get(self, rider_id: str, context: str) -> FareBreakdown:
        try:
            fare = self.fares[rider_id]
        except KeyError:
            raise AllocationError(
                f"Rider {rider_id} is on the route but missing from the rider set",
                details={"rider_id": rider_id, "context": context},
            ) from None
        self.seen.add(rider_id)
        return fare

    def unseen(self) -> list[str]:
        return sorted(set(self.fares) - self.seen)


def pickup_distance_cost(
    driver_location: Coordinate, pickup: Coordinate, config: PricingConfig
) -> tuple[float, int]:
    """Distance the driver repositions to reach the pickup, and its charge.

    The first ``free_pickup_distance_km`` are free; the rest is billed at
    ``pickup_distance_rate`` and rounded to a whole currency unit.
    """
    distance = haversine_distance_km(driver_location, pickup)
    chargeable = max(0.0, distance - config.free_pickup_distance_km)
    return distance, round_currency(chargeable * config.pickup_distance_rate)


def wait_time_cost(wait_minutes: float, config: PricingConfig) -> float:
    """Charge for waiting at pickup beyond the free minutes."""
    if wait_minutes < 0:
        raise ValueError("Wait time must be non-negative")
    billable = max(0.0, wait_minutes - config.wait_time_free_minutes)
    return billable * config.wait_time_per_minute


def allocate_costs(
    segments: Iterable[RouteSegment],
    rider_ids: Iterable[str],
    config: PricingConfig,
    *,
    driver_location: Coordinate | None = None,
    first_rider: RiderSegmentRequest | None = None,
    wait_minutes: Mapping[str, float] | None = None,
) -> dict[str, FareBreakdown]:
    """Accumulate each rider's share of the route's cost.

    Args:
        segments: Legs from ``build_route``.
        rider_ids: Every rider in the ride; one breakdown is created per ID.
        config: Rate table.
        driver_location: Where the driver is now, if known. Together with
            ``first_rider`` this adds the repositioning charge.
        first_rider: Rider who is picked up first; the only one charged for
            driver repositioning.
        wait_minutes: Minutes the driver waited at each rider's pickup.

    Returns:
        Unfinalized breakdowns keyed by rider ID.

    Raises:
        AllocationError: if a segment names a rider outside ``rider_ids``,
            a rider in ``rider_ids`` never appears on the route, or a SOLO
            segment carries more than one rider.
    """
    ledger = _Ledger(rider_ids)

    for segment in segments:
        present = segment.riders_present
        if not present:
            continue

        if segment.segment_type == SegmentType.SOLO:
            if len(present) != 1:
                raise AllocationError(
                    f"Solo segment carries {len(present)} riders",
                    details={"riders_present": list(present)},
                )
            fare = ledger.get(present[0], "solo segment")
            fare.solo_distance_km += segment.distance_km
            fare.solo_cost += segment.distance_km * config.rate_per_km

        elif segment.segment_type == SegmentType.SHARED:
            cost_per_rider = segment.distance_km * config.rate_per_km / len(present)
            for rider_id in present:
                fare = ledger.get(rider_id, "shared segment")
                fare.shared_distance_km += segment.distance_km
                fare.shared_cost += cost_per_rider

        elif segment.segment_type == SegmentType.DETOUR:
            _allocate_detour(segment, config, ledger)

        logger.debug(
            f"{segment.segment_type.value} segment {segment.distance_km:.2f} km "
            f"allocated across {len(present)} riders"
        )

    missing = ledger.unseen()
    if missing:
        raise AllocationError(
            f"Riders never appear on the route: {', '.join(missing)}",
            details={"rider_ids": missing},
        )

    if driver_location is not None and first_rider is not None:
        distance, cost = pickup_distance_cost(driver_location, first_rider.pickup, config)
        ledger.get(first_rider.rider_id, "driver repositioning").pickup_distance_cost = cost
        logger.debug(
            f"Driver is {distance:.2f} km from first pickup, "
            f"charging {cost} to {first_rider.rider_id}"
        )

    for rider_id, minutes in (wait_minutes or {}).items():
        ledger.get(rider_id, "wait time").wait_time_cost = wait_time_cost(minutes, config)

    return ledger.fares


def _allocate_detour(segment: RouteSegment, config: PricingConfig, ledger: _Ledger) -> None:
    total_cost = segment.distance_km * config.detour_rate_per_km
    others = [r for r in segment.riders_present if r != segment.caused_by]

    if segment.caused_by is None:
        # No rider to weight toward, so everyone aboard shares equally
        for rider_id in others:
            fare = ledger.get(rider_id, "detour segment")
            fare.detour_distance_km += segment.distance_km
            fare.detour_cost += total_cost / len(others)
        return

    creator_share = config.detour_creator_share if others else 1.0
    creator = ledger.get(segment.caused_by, "detour segment")
    creator.detour_distance_km += segment.distance_km
    creator.detour_cost += total_cost * creator_share

    if others:
        per_other = (total_cost - total_cost * creator_share) / len(others)
        pro_rated_km = segment.distance_km * (1 - config.detour_creator_share)
        for rider_id in others:
            fare = ledger.get(rider_id, "detour segment")
            fare.detour_distance_km += pro_rated_km
            fare.detour_cost += per_other
