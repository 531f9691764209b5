"""Pub/sub channel definitions and message schemas for fare broadcasts."""

from pydantic import BaseModel

# Channel names
CHANNEL_FARE_UPDATES = "fare-updates"
CHANNEL_MEMBER_UPDATES = "member-updates"

ALL_CHANNELS = [
    CHANNEL_FARE_UPDATES,
    CHANNEL_MEMBER_UPDATES,
]


class FareUpdateMessage(BaseModel):
    """A member's price after a ride was repriced."""

    ride_id: str
    member_id: str
    rider_id: str
    previous_price: int
    new_price: int
    solo_distance_km: float
    shared_distance_km: float
    breakdown: str
    timestamp: str


class MemberUpdateMessage(BaseModel):
    """Member status change, e.g. a drop-off that triggered repricing."""

    ride_id: str
    member_id: str
    rider_id: str
    status: str
    event_type: str
    timestamp: str
