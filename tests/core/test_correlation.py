import logging

from fare_engine.core.correlation import (
    CorrelationFilter,
    get_current_correlation_id,
    with_correlation,
)


def make_record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="test.py", lineno=1,
        msg="hello", args=(), exc_info=None,
    )


class TestWithCorrelation:
    def test_sets_and_resets(self):
        assert get_current_correlation_id() is None
        with with_correlation("ride-1"):
            assert get_current_correlation_id() == "ride-1"
        assert get_current_correlation_id() is None

    def test_nested_restores_outer(self):
        with with_correlation("outer"):
            with with_correlation("inner"):
                assert get_current_correlation_id() == "inner"
            assert get_current_correlation_id() == "outer"


class TestCorrelationFilter:
    def test_adds_placeholder_without_context(self):
        record = make_record()
        assert CorrelationFilter().filter(record)
        assert record.correlation_id == "-"

    def test_adds_current_id(self):
        record = make_record()
        with with_correlation("ride-42"):
            CorrelationFilter().filter(record)
        assert record.correlation_id == "ride-42"
