from .member import (
    ACTIVE_STATUSES,
    VALID_TRANSITIONS,
    MemberStatus,
    RideMember,
    parse_status,
)
from .recalculation import (
    FareChange,
    FareRecalculator,
    RecalculationResult,
    RideLockRegistry,
    rider_requests,
)
from .repository import InMemoryRideRepository, RideRepository
from .ride import RideSnapshot

__all__ = [
    "ACTIVE_STATUSES",
    "VALID_TRANSITIONS",
    "FareChange",
    "FareRecalculator",
    "InMemoryRideRepository",
    "MemberStatus",
    "RecalculationResult",
    "RideLockRegistry",
    "RideMember",
    "RideRepository",
    "RideSnapshot",
    "parse_status",
    "rider_requests",
]
