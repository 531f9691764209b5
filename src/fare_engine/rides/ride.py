from datetime import datetime

from pydantic import BaseModel, Field

from fare_engine.core.exceptions import NotFoundError
from fare_engine.geo.distance import Coordinate
from fare_engine.rides.member import SETTLED_STATUSES, RideMember


class RideSnapshot(BaseModel):
    """Point-in-time view of a ride as loaded by the persistence layer."""

    ride_id: str
    origin: Coordinate
    departure_time: datetime
    driver_location: Coordinate | None = None
    is_shared: bool = False
    members: list[RideMember] = Field(default_factory=list)

    def get_member(self, member_id: str) -> RideMember:
        for member in self.members:
            if member.member_id == member_id:
                return member
        raise NotFoundError(
            f"Member {member_id} not found in ride {self.ride_id}",
            details={"ride_id": self.ride_id, "member_id": member_id},
        )

    @property
    def active_members(self) -> list[RideMember]:
        return [m for m in self.members if m.is_active]

    @property
    def all_members_settled(self) -> bool:
        """True once every member has been dropped off or cancelled."""
        return all(m.status in SETTLED_STATUSES for m in self.members)
