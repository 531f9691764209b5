import os
from datetime import datetime

import pytest

from fare_engine.geo.distance import Coordinate
from fare_engine.pricing.engine import FareEngine
from fare_engine.settings import PricingConfig
from tests.factories import RideFactory

# Noon on a weekday: outside every default peak window
OFF_PEAK = datetime(2025, 1, 15, 12, 0)
MORNING_PEAK = datetime(2025, 1, 15, 8, 30)


@pytest.fixture(autouse=True)
def clear_fare_env(monkeypatch):
    """Keep FARE_* variables from the developer's shell out of the rate table."""
    for key in list(os.environ):
        if key.startswith("FARE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config() -> PricingConfig:
    """Default INR rate table."""
    return PricingConfig()


@pytest.fixture
def engine(config: PricingConfig) -> FareEngine:
    return FareEngine(config)


@pytest.fixture
def off_peak() -> datetime:
    return OFF_PEAK


@pytest.fixture
def morning_peak() -> datetime:
    return MORNING_PEAK


@pytest.fixture
def equator_origin() -> Coordinate:
    return Coordinate(lat=0.0, lng=0.0)


@pytest.fixture
def ride_factory() -> RideFactory:
    return RideFactory()
