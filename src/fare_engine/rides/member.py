"""Ride member state machine and models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from fare_engine.core.exceptions import StateError
from fare_engine.geo.distance import Coordinate


class MemberStatus(str, Enum):
    """Lifecycle of one rider's seat on a ride."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PICKED_UP = "PICKED_UP"
    DROPPED_OFF = "DROPPED_OFF"
    CANCELLED = "CANCELLED"

    def to_event_type(self) -> str:
        """Convert status to a notification event type (e.g., 'member.dropped_off')."""
        return f"member.{self.value.lower()}"


VALID_TRANSITIONS: dict[MemberStatus, set[MemberStatus]] = {
    MemberStatus.PENDING: {MemberStatus.CONFIRMED, MemberStatus.CANCELLED},
    MemberStatus.CONFIRMED: {MemberStatus.PICKED_UP, MemberStatus.CANCELLED},
    MemberStatus.PICKED_UP: {MemberStatus.DROPPED_OFF},
    MemberStatus.DROPPED_OFF: set(),
    MemberStatus.CANCELLED: set(),
}

# Members whose fare is still open and gets repriced on every recalculation
ACTIVE_STATUSES = frozenset({MemberStatus.CONFIRMED, MemberStatus.PICKED_UP})

SETTLED_STATUSES = frozenset({MemberStatus.DROPPED_OFF, MemberStatus.CANCELLED})

# Riders without an assigned drop order go last
UNORDERED_DROP_ORDER = 999


class RideMember(BaseModel):
    """A rider's booking on a ride, with the stops and price the caller stores."""

    member_id: str
    rider_id: str
    status: MemberStatus = Field(default=MemberStatus.PENDING)
    pickup: Coordinate
    drop: Coordinate
    drop_order: int | None = Field(default=None, ge=1)
    wait_minutes: float = Field(default=0.0, ge=0.0)
    price: int = Field(default=0, ge=0)
    original_price: int | None = None
    solo_distance_km: float | None = None
    shared_distance_km: float | None = None
    dropped_off_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def effective_drop_order(self) -> int:
        return self.drop_order if self.drop_order is not None else UNORDERED_DROP_ORDER

    def transition_to(self, new_status: MemberStatus) -> None:
        """Transition to a new status with validation."""
        if self.status in SETTLED_STATUSES:
            raise StateError(
                f"Cannot transition from terminal status {self.status.value}",
                details={"member_id": self.member_id, "status": self.status.value},
            )

        if new_status not in VALID_TRANSITIONS[self.status]:
            raise StateError(
                f"Invalid transition from {self.status.value} to {new_status.value}",
                details={
                    "member_id": self.member_id,
                    "from": self.status.value,
                    "to": new_status.value,
                },
            )

        self.status = new_status


def parse_status(value: str) -> MemberStatus:
    """Parse a caller-supplied status string, rejecting anything unknown."""
    try:
        return MemberStatus(value.upper())
    except ValueError:
        raise StateError(
            f"Unknown member status {value!r}",
            details={"allowed": [s.value for s in MemberStatus]},
        ) from None
