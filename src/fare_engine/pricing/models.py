"""Value objects flowing through the fare pipeline."""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fare_engine.geo.distance import Coordinate


def round_currency(amount: float) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class SegmentType(str, Enum):
    """Why a route leg exists and how its cost is split."""

    SOLO = "solo"
    SHARED = "shared"
    DETOUR = "detour"


class RiderSegmentRequest(BaseModel):
    """One rider's trip intent within a ride."""

    model_config = ConfigDict(frozen=True)

    rider_id: str = Field(min_length=1)
    pickup: Coordinate
    drop: Coordinate
    drop_order: int = Field(ge=1)
    wait_minutes: float = Field(default=0.0, ge=0.0)


class RouteSegment(BaseModel):
    """A directed leg of the driver's route."""

    model_config = ConfigDict(frozen=True)

    start: Coordinate
    end: Coordinate
    distance_km: float = Field(ge=0.0)
    # Riders physically in the car while this leg is driven
    riders_present: tuple[str, ...] = ()
    segment_type: SegmentType
    caused_by: str | None = None

    @field_validator("riders_present")
    @classmethod
    def validate_unique(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate rider in riders_present: {v}")
        return v


class FareBreakdown(BaseModel):
    """Per-rider cost accumulator and, once finalized, the rider's fare."""

    rider_id: str
    base_fare: float = 0.0
    solo_distance_km: float = 0.0
    solo_cost: float = 0.0
    shared_distance_km: float = 0.0
    shared_cost: float = 0.0
    detour_distance_km: float = 0.0
    detour_cost: float = 0.0
    pickup_distance_cost: float = 0.0
    wait_time_cost: float = 0.0
    subtotal: float = 0.0
    surge_multiplier: float = 1.0
    tax: float = 0.0
    total_fare: int = 0
    fare_per_km: float = 0.0
    breakdown: str = ""
    finalized: bool = False

    @property
    def total_distance_km(self) -> float:
        return self.solo_distance_km + self.shared_distance_km + self.detour_distance_km


class SingleRideQuote(BaseModel):
    """Fare for a non-shared booking covering one or more seats."""

    total_fare: int = Field(ge=0)
    fare_per_person: int = Field(ge=0)
    seats: int = Field(ge=1)
    breakdown: FareBreakdown


class DriverEarnings(BaseModel):
    """Driver's take from one ride after platform fee and tax."""

    total_revenue: int
    platform_fee: int
    tax: int
    net_earnings: int
    total_distance_km: float = Field(ge=0)
    avg_fare_per_km: float = Field(ge=0)
