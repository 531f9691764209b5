"""Log formatters for JSON and human-readable output."""

import json
import logging
from datetime import UTC, datetime

# Record attributes set by RideContextFilter and CorrelationFilter
RIDE_FIELDS = ("ride_id", "member_id", "rider_id")
NO_CORRELATION = "-"


def _ride_fields(record: logging.LogRecord) -> dict[str, str]:
    return {field: getattr(record, field) for field in RIDE_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shipping.

    The timestamp is the time the record was created, in UTC. Ride fields
    appear only when set; a missing correlation id is omitted rather than
    written as the text placeholder.
    """

    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": self.environment,
            **_ride_fields(record),
        }

        correlation_id = getattr(record, "correlation_id", NO_CORRELATION)
        if correlation_id != NO_CORRELATION:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class DevFormatter(logging.Formatter):
    """Human-readable format for development.

    Ride fields, when present, trail the message as ``key=value`` pairs.
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] [corr=%(correlation_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_CORRELATION
        line = super().format(record)
        fields = _ride_fields(record)
        if not fields:
            return line

        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        head, sep, tail = line.partition("\n")
        return f"{head} ({suffix}){sep}{tail}"
