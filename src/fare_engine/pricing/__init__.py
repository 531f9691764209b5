from .allocation import allocate_costs, pickup_distance_cost, wait_time_cost
from .engine import FareEngine
from .finalizer import finalize, format_breakdown, is_peak_hour
from .models import (
    DriverEarnings,
    FareBreakdown,
    RiderSegmentRequest,
    RouteSegment,
    SegmentType,
    SingleRideQuote,
    round_currency,
)
from .segments import build_route, order_riders, route_length_km

__all__ = [
    "DriverEarnings",
    "FareBreakdown",
    "FareEngine",
    "RiderSegmentRequest",
    "RouteSegment",
    "SegmentType",
    "SingleRideQuote",
    "allocate_costs",
    "build_route",
    "finalize",
    "format_breakdown",
    "is_peak_hour",
    "order_riders",
    "pickup_distance_cost",
    "round_currency",
    "route_length_km",
    "wait_time_cost",
]
