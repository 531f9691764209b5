"""Ride fields attached to every log record emitted while pricing a ride."""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_ride_fields: ContextVar[Mapping[str, Any]] = ContextVar("ride_log_fields", default={})


def current_ride_fields() -> dict[str, Any]:
    """Fields the enclosing ``log_ride_context`` blocks have set."""
    return dict(_ride_fields.get())


@contextmanager
def log_ride_context(ride_id: str, **fields: Any) -> Iterator[None]:
    """Tag log records in this block with the ride and any extra fields.

    Blocks nest: inner fields are layered over the outer ones, and the outer
    set is restored when the block exits.

    Usage:
        with log_ride_context(ride.ride_id):
            with log_ride_context(ride.ride_id, member_id=member.member_id):
                logger.info("Member dropped off")  # ride_id and member_id
            logger.info("Repriced")  # ride_id only
    """
    token = _ride_fields.set({**_ride_fields.get(), "ride_id": ride_id, **fields})
    try:
        yield
    finally:
        _ride_fields.reset(token)


class RideContextFilter(logging.Filter):
    """Copies the current ride fields onto log records.

    Values passed explicitly through ``extra=`` win over the context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _ride_fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
