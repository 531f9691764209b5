from .distance import (
    EARTH_RADIUS_KM,
    BoundingBox,
    Coordinate,
    bounding_box,
    detour_percent,
    distance_with_stop_km,
    estimate_eta_minutes,
    haversine_distance_km,
    is_point_between,
    route_distance_km,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "BoundingBox",
    "Coordinate",
    "bounding_box",
    "detour_percent",
    "distance_with_stop_km",
    "estimate_eta_minutes",
    "haversine_distance_km",
    "is_point_between",
    "route_distance_km",
]
