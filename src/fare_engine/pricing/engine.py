import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from fare_engine.core.exceptions import ValidationError
from fare_engine.geo.distance import Coordinate
from fare_engine.pricing.allocation import allocate_costs
from fare_engine.pricing.finalizer import finalize
from fare_engine.pricing.models import (
    DriverEarnings,
    FareBreakdown,
    RiderSegmentRequest,
    SingleRideQuote,
    round_currency,
)
from fare_engine.pricing.segments import build_route, order_riders
from fare_engine.settings import PricingConfig

logger = logging.getLogger(__name__)

SINGLE_RIDER_ID = "single"


class FareEngine:
    """Prices shared rides with an injected, immutable rate table.

    Every call is a pure function of its arguments; an engine instance holds
    nothing but its config and can be shared between threads.
    """

    def __init__(self, config: PricingConfig | None = None) -> None:
        self.config = config or PricingConfig()

    def price_ride(
        self,
        origin: Coordinate,
        riders: Sequence[RiderSegmentRequest],
        departure_time: datetime,
        driver_location: Coordinate | None = None,
    ) -> dict[str, FareBreakdown]:
        """Compute every rider's finalized fare for one ride.

        Returns an empty mapping when there are no riders.
        """
        if not riders:
            return {}

        segments = build_route(origin, riders)
        first_rider = order_riders(riders)[0]
        allocated = allocate_costs(
            segments,
            [r.rider_id for r in riders],
            self.config,
            driver_location=driver_location,
            first_rider=first_rider,
            wait_minutes={r.rider_id: r.wait_minutes for r in riders if r.wait_minutes > 0},
        )
        fares = {
            rider_id: finalize(breakdown, departure_time, self.config)
            for rider_id, breakdown in allocated.items()
        }

        logger.info(
            f"Priced ride for {len(fares)} riders over {len(segments)} segments, "
            f"total {sum(f.total_fare for f in fares.values())}"
        )
        return fares

    def quote_single_ride(
        self,
        pickup: Coordinate,
        drop: Coordinate,
        seats: int = 1,
        driver_location: Coordinate | None = None,
        departure_time: datetime | None = None,
    ) -> SingleRideQuote:
        """Fare for a private booking: one route, charged per seat.

        Raises:
            ValidationError: if seats is less than 1.
        """
        if seats < 1:
            raise ValidationError(
                f"At least one seat is required, got {seats}", details={"seats": seats}
            )

        rider = RiderSegmentRequest(
            rider_id=SINGLE_RIDER_ID, pickup=pickup, drop=drop, drop_order=1
        )
        per_person = self.price_ride(
            pickup,
            [rider],
            departure_time or datetime.now(),
            driver_location=driver_location,
        )[SINGLE_RIDER_ID]

        total_fare = per_person.total_fare * seats
        if seats > 1:
            per_person = per_person.model_copy(
                update={
                    "breakdown": (
                        f"{per_person.breakdown}\n\n"
                        f"({seats} passengers × {self.config.currency_symbol}"
                        f"{per_person.total_fare}/person)"
                    )
                }
            )

        return SingleRideQuote(
            total_fare=total_fare,
            fare_per_person=per_person.total_fare,
            seats=seats,
            breakdown=per_person,
        )

    def driver_earnings(
        self, fares: Mapping[str, FareBreakdown], total_distance_km: float
    ) -> DriverEarnings:
        """Split a ride's revenue into platform fee, tax and the driver's net."""
        revenue = float(sum(fare.total_fare for fare in fares.values()))
        platform_fee = revenue * self.config.platform_fee_percent
        tax = revenue * self.config.tax_percent

        return DriverEarnings(
            total_revenue=round_currency(revenue),
            platform_fee=round_currency(platform_fee),
            tax=round_currency(tax),
            net_earnings=round_currency(revenue - platform_fee - tax),
            total_distance_km=total_distance_km,
            avg_fare_per_km=revenue / total_distance_km if total_distance_km > 0 else 0.0,
        )
