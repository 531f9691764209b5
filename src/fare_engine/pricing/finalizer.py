"""Turns an allocated cost breakdown into the fare a rider is charged."""

from datetime import datetime

from fare_engine.core.exceptions import StateError
from fare_engine.pricing.models import FareBreakdown, round_currency
from fare_engine.settings import PricingConfig


def is_peak_hour(departure_time: datetime, config: PricingConfig) -> bool:
    """Whether departure falls in a peak window.

    Uses the wall-clock hour of ``departure_time`` as given, so callers must
    pass local time (or an aware datetime in the ride's local zone), never UTC.
    """
    return config.is_peak_hour(departure_time.hour)


def surge_multiplier(departure_time: datetime, config: PricingConfig) -> float:
    return config.peak_hour_multiplier if is_peak_hour(departure_time, config) else 1.0


def finalize(
    breakdown: FareBreakdown, departure_time: datetime, config: PricingConfig
) -> FareBreakdown:
    """Apply base fare, surge, tax and the minimum-fare floor.

    Returns a new breakdown; the input is left untouched.

    Raises:
        StateError: if the breakdown was already finalized. Finalizing twice
            would compound surge and tax.
    """
    if breakdown.finalized:
        raise StateError(
            f"Fare for rider {breakdown.rider_id} is already finalized",
            details={"rider_id": breakdown.rider_id},
        )

    base_fare = config.base_fare
    subtotal = (
        base_fare
        + breakdown.solo_cost
        + breakdown.shared_cost
        + breakdown.detour_cost
        + breakdown.pickup_distance_cost
        + breakdown.wait_time_cost
    )
    multiplier = surge_multiplier(departure_time, config)
    after_surge = subtotal * multiplier
    tax = after_surge * config.tax_percent

    total_fare = max(round_currency(after_surge + tax), config.minimum_fare)

    total_distance = breakdown.total_distance_km
    fare_per_km = total_fare / total_distance if total_distance > 0 else 0.0

    finalized = breakdown.model_copy(
        update={
            "base_fare": base_fare,
            "subtotal": subtotal,
            "surge_multiplier": multiplier,
            "tax": tax,
            "total_fare": total_fare,
            "fare_per_km": fare_per_km,
            "finalized": True,
        }
    )
    finalized.breakdown = format_breakdown(finalized, config)
    return finalized


def _money(amount: float, config: PricingConfig) -> str:
    return f"{config.currency_symbol}{round_currency(amount)}"


def _percent(fraction: float) -> str:
    return f"{round(fraction * 100, 2):g}%"


def format_breakdown(fare: FareBreakdown, config: PricingConfig) -> str:
    """Itemized, human-readable explanation of a finalized fare.

    Only non-zero components are listed, always in the same order.
    """
    lines: list[str] = []

    if fare.base_fare > 0:
        lines.append(f"Base Fare: {_money(fare.base_fare, config)}")
    if fare.solo_cost > 0:
        lines.append(
            f"Solo Travel ({fare.solo_distance_km:.1f} km): {_money(fare.solo_cost, config)}"
        )
    if fare.shared_cost > 0:
        lines.append(
            f"Shared Travel ({fare.shared_distance_km:.1f} km): "
            f"{_money(fare.shared_cost, config)}"
        )
    if fare.detour_cost > 0:
        lines.append(
            f"Detour ({fare.detour_distance_km:.1f} km): {_money(fare.detour_cost, config)}"
        )
    if fare.pickup_distance_cost > 0:
        lines.append(f"Driver Pickup Distance: {_money(fare.pickup_distance_cost, config)}")
    if fare.wait_time_cost > 0:
        lines.append(f"Wait Time: {_money(fare.wait_time_cost, config)}")

    lines.append(f"Subtotal: {_money(fare.subtotal, config)}")

    if fare.surge_multiplier > 1.0:
        surge_amount = fare.subtotal * (fare.surge_multiplier - 1)
        lines.append(
            f"Peak Hour Surge ({_percent(fare.surge_multiplier - 1)}): "
            f"{_money(surge_amount, config)}"
        )
    if fare.tax > 0:
        lines.append(
            f"{config.tax_label} ({_percent(config.tax_percent)}): {_money(fare.tax, config)}"
        )

    lines.append(f"Total: {config.currency_symbol}{fare.total_fare}")
    return "\n".join(lines)
