"""Command-line fare quotes.

Usage:
    fare-engine quote ride.json [--at 2025-01-15T08:30] [--json]
    fare-engine single 26.93 75.92 26.85 75.80 [--seats 2]

The ride file holds an origin, an optional driver location and departure
time, and the riders with their pickup, drop and drop order. Rates come
from FARE_* environment variables.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from fare_engine.core.exceptions import FareEngineError
from fare_engine.fare_logging import setup_logging
from fare_engine.geo.distance import Coordinate
from fare_engine.pricing.engine import FareEngine
from fare_engine.pricing.models import FareBreakdown, RiderSegmentRequest
from fare_engine.settings import LoggingSettings, load_pricing_config

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2


class RideQuoteRequest(BaseModel):
    origin: Coordinate
    driver_location: Coordinate | None = None
    departure_time: datetime | None = None
    riders: list[RiderSegmentRequest] = Field(default_factory=list)


def _parse_time(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an ISO timestamp: {value}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fare-engine", description="Quote shared-ride fares"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Price every rider of a shared ride")
    quote.add_argument("ride_file", type=Path, help="JSON file describing the ride")
    quote.add_argument(
        "--at",
        type=_parse_time,
        default=None,
        help="Local departure time (ISO 8601); overrides the file, defaults to now",
    )
    quote.add_argument("--json", action="store_true", help="Print breakdowns as JSON")

    single = subparsers.add_parser("single", help="Quote a private ride")
    single.add_argument("pickup_lat", type=float)
    single.add_argument("pickup_lng", type=float)
    single.add_argument("drop_lat", type=float)
    single.add_argument("drop_lng", type=float)
    single.add_argument("--seats", type=int, default=1, help="Seats booked (default: 1)")
    single.add_argument("--at", type=_parse_time, default=None, help="Local departure time")
    single.add_argument("--json", action="store_true", help="Print the quote as JSON")

    return parser


def _render(fares: dict[str, FareBreakdown], as_json: bool) -> str:
    if as_json:
        return json.dumps(
            {rider_id: fare.model_dump() for rider_id, fare in fares.items()},
            indent=2,
            ensure_ascii=False,
        )
    blocks = [f"== {rider_id} ==\n{fare.breakdown}" for rider_id, fare in fares.items()]
    return "\n\n".join(blocks)


def run(args: argparse.Namespace) -> int:
    engine = FareEngine(load_pricing_config())

    if args.command == "quote":
        request = RideQuoteRequest.model_validate_json(args.ride_file.read_text())
        departure = args.at or request.departure_time or datetime.now()
        fares = engine.price_ride(
            request.origin,
            request.riders,
            departure,
            driver_location=request.driver_location,
        )
        print(_render(fares, args.json))
        return 0

    quote = engine.quote_single_ride(
        Coordinate(lat=args.pickup_lat, lng=args.pickup_lng),
        Coordinate(lat=args.drop_lat, lng=args.drop_lng),
        seats=args.seats,
        departure_time=args.at,
    )
    if args.json:
        print(json.dumps(quote.model_dump(), indent=2, ensure_ascii=False))
    else:
        print(quote.breakdown.breakdown)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        log_settings = LoggingSettings()
    except PydanticValidationError as e:
        # Logging is not configured yet
        print(f"error: invalid logging settings: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    setup_logging(
        level=log_settings.log_level,
        json_output=log_settings.log_format == "json",
        environment=log_settings.environment,
        stream=sys.stderr,
    )

    try:
        return run(args)
    except (FareEngineError, PydanticValidationError, OSError) as e:
        logger.error(f"Cannot quote fare: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT


if __name__ == "__main__":
    sys.exit(main())
