import logging

import pytest

from fare_engine.fare_logging import RideContextFilter, current_ride_fields, log_ride_context
from fare_engine.rides.recalculation import FareRecalculator
from fare_engine.rides.repository import InMemoryRideRepository


def make_record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="test.py", lineno=1,
        msg="hello", args=(), exc_info=None,
    )


class TestLogRideContext:
    def test_sets_and_restores(self):
        with log_ride_context("ride-1"):
            assert current_ride_fields() == {"ride_id": "ride-1"}
        assert current_ride_fields() == {}

    def test_extra_fields(self):
        with log_ride_context("ride-1", member_id="m1"):
            assert current_ride_fields() == {"ride_id": "ride-1", "member_id": "m1"}

    def test_nested_block_keeps_outer_fields(self):
        with log_ride_context("ride-1", rider_id="r1"):
            with log_ride_context("ride-1", member_id="m1"):
                assert current_ride_fields() == {
                    "ride_id": "ride-1",
                    "rider_id": "r1",
                    "member_id": "m1",
                }
            assert current_ride_fields() == {"ride_id": "ride-1", "rider_id": "r1"}

    def test_inner_value_overrides_then_restores(self):
        with log_ride_context("ride-1", rider_id="r1"):
            with log_ride_context("ride-1", rider_id="r2"):
                assert current_ride_fields()["rider_id"] == "r2"
            assert current_ride_fields()["rider_id"] == "r1"

    def test_restored_on_error(self):
        with log_ride_context("outer"):
            with pytest.raises(RuntimeError):
                with log_ride_context("inner"):
                    raise RuntimeError("boom")
            assert current_ride_fields() == {"ride_id": "outer"}
        assert current_ride_fields() == {}

    def test_returned_fields_are_a_copy(self):
        with log_ride_context("ride-1"):
            current_ride_fields()["ride_id"] = "tampered"
            assert current_ride_fields() == {"ride_id": "ride-1"}

    def test_drop_off_keeps_caller_fields(self, engine, ride_factory):
        repository = InMemoryRideRepository([ride_factory.three_rider_shared_ride()])
        recalculator = FareRecalculator(engine, repository)

        with log_ride_context("ride-1", request_id="req-9"):
            recalculator.drop_off("ride-1", "m1")
            assert current_ride_fields() == {"ride_id": "ride-1", "request_id": "req-9"}


class TestRideContextFilter:
    def test_injects_fields(self):
        record = make_record()
        with log_ride_context("ride-1", rider_id="r1"):
            assert RideContextFilter().filter(record)
        assert record.ride_id == "ride-1"
        assert record.rider_id == "r1"

    def test_no_context_adds_nothing(self):
        record = make_record()
        RideContextFilter().filter(record)
        assert not hasattr(record, "ride_id")

    def test_does_not_override_explicit_extra(self):
        record = make_record()
        record.ride_id = "explicit"
        with log_ride_context("ride-1"):
            RideContextFilter().filter(record)
        assert record.ride_id == "explicit"
