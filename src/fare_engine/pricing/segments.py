"""Turns a ride's stops into the legs the driver actually drives.

The driver picks every rider up in drop order, then drops them off in the
same order. Each leg records who was in the car while it was driven.
"""

import logging
from collections.abc import Iterable, Sequence

from fare_engine.core.exceptions import ValidationError
from fare_engine.geo.distance import Coordinate, haversine_distance_km
from fare_engine.pricing.models import RiderSegmentRequest, RouteSegment, SegmentType

logger = logging.getLogger(__name__)


def order_riders(riders: Iterable[RiderSegmentRequest]) -> list[RiderSegmentRequest]:
    """Sort riders by drop order, breaking ties by rider ID so ordering is stable."""
    return sorted(riders, key=lambda r: (r.drop_order, r.rider_id))


def build_route(
    origin: Coordinate, riders: Sequence[RiderSegmentRequest]
) -> list[RouteSegment]:
    """Build the ordered legs of a ride starting at origin.

    Returns an empty list when there are no riders.

    Raises:
        ValidationError: if two requests share a rider ID.
    """
    if not riders:
        return []

    seen: set[str] = set()
    for rider in riders:
        if rider.rider_id in seen:
            raise ValidationError(
                f"Duplicate rider {rider.rider_id} in route request",
                details={"rider_id": rider.rider_id},
            )
        seen.add(rider.rider_id)

    ordered = order_riders(riders)
    segments: list[RouteSegment] = []
    position = origin
    aboard: list[str] = []

    for rider in ordered:
        segment_type = SegmentType.DETOUR if aboard else SegmentType.SOLO
        segments.append(
            RouteSegment(
                start=position,
                end=rider.pickup,
                distance_km=haversine_distance_km(position, rider.pickup),
                riders_present=tuple(aboard),
                segment_type=segment_type,
                caused_by=rider.rider_id,
            )
        )
        aboard.append(rider.rider_id)
        position = rider.pickup

    for rider in ordered:
        segment_type = SegmentType.SHARED if len(aboard) > 1 else SegmentType.SOLO
        segments.append(
            RouteSegment(
                start=position,
                end=rider.drop,
                distance_km=haversine_distance_km(position, rider.drop),
                riders_present=tuple(aboard),
                segment_type=segment_type,
                caused_by=rider.rider_id,
            )
        )
        aboard.remove(rider.rider_id)
        position = rider.drop

    logger.debug(
        f"Built {len(segments)} segments for {len(ordered)} riders, "
        f"{route_length_km(segments):.2f} km total"
    )
    return segments


def route_length_km(segments: Iterable[RouteSegment]) -> float:
    """Total driven distance across all legs, including empty approach legs."""
    return sum(segment.distance_km for segment in segments)
