"""Centralized geographic distance calculations.

This module provides Haversine distance calculations between coordinates
and the small amount of plane geometry the pricing code needs: bounding
boxes for nearby-ride lookups, detour checks for join requests, and route
length over a list of waypoints.
"""

import math
from collections.abc import Sequence
from math import atan2, cos, radians, sin, sqrt

from pydantic import BaseModel, ConfigDict, Field

EARTH_RADIUS_KM = 6371.0

# 1 degree of latitude is ~111 km everywhere
KM_PER_DEGREE_LAT = 111.0


class Coordinate(BaseModel):
    """A point on the Earth's surface in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, point: Coordinate) -> bool:
        return (
            self.min_lat <= point.lat <= self.max_lat
            and self.min_lng <= point.lng <= self.max_lng
        )


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Uses the Haversine formula to calculate the shortest distance over
    the Earth's surface between two points.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance between the two points in kilometers. Exactly 0.0 when
        the points are equal.
    """
    if a == b:
        return 0.0

    lat1, lon1, lat2, lon2 = map(radians, [a.lat, a.lng, b.lat, b.lng])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(h), sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def distance_with_stop_km(
    origin: Coordinate, stop: Coordinate, destination: Coordinate
) -> float:
    """Length of origin -> stop -> destination using straight-line legs."""
    return haversine_distance_km(origin, stop) + haversine_distance_km(stop, destination)


def route_distance_km(waypoints: Sequence[Coordinate]) -> float:
    """Total length of a path through the waypoints in order.

    Returns 0.0 for fewer than two waypoints.
    """
    if len(waypoints) < 2:
        return 0.0
    return sum(
        haversine_distance_km(waypoints[i], waypoints[i + 1])
        for i in range(len(waypoints) - 1)
    )


def bounding_box(center: Coordinate, radius_km: float) -> BoundingBox:
    """Approximate lat/lng box of radius_km around center for coarse geo queries."""
    if radius_km < 0:
        raise ValueError("Radius must be non-negative")

    lat_delta = radius_km / KM_PER_DEGREE_LAT
    lng_delta = radius_km / (KM_PER_DEGREE_LAT * cos(radians(center.lat)))

    return BoundingBox(
        min_lat=center.lat - lat_delta,
        max_lat=center.lat + lat_delta,
        min_lng=center.lng - lng_delta,
        max_lng=center.lng + lng_delta,
    )


def detour_percent(a: Coordinate, b: Coordinate, via: Coordinate) -> float:
    """Extra distance of a -> via -> b over a -> b, as a percentage of a -> b.

    When a and b coincide any stop elsewhere is an unbounded detour, so the
    result is infinity unless via is that same point.
    """
    direct = haversine_distance_km(a, b)
    via_distance = distance_with_stop_km(a, via, b)
    if direct == 0.0:
        return 0.0 if via_distance == 0.0 else math.inf
    return (via_distance - direct) / direct * 100


def is_point_between(
    a: Coordinate,
    b: Coordinate,
    via: Coordinate,
    max_detour_percent: float = 20.0,
) -> bool:
    """Check whether stopping at via stays within max_detour_percent of the direct route."""
    return detour_percent(a, b, via) <= max_detour_percent


def estimate_eta_minutes(distance_km: float, average_speed_kmh: float = 20.0) -> int:
    """Whole minutes to cover distance_km at average_speed_kmh, rounded up.

    The default speed is typical of campus and inner-city traffic.
    """
    if distance_km < 0:
        raise ValueError("Distance must be non-negative")
    if average_speed_kmh <= 0:
        raise ValueError("Average speed must be positive")
    return math.ceil(distance_km / average_speed_kmh * 60)
