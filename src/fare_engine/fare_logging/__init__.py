"""Structured logging for the fare engine: formatters, PII masking and ride context."""

from .context import RideContextFilter, current_ride_fields, log_ride_context
from .filters import PIIFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "log_ride_context",
    "current_ride_fields",
    "JSONFormatter",
    "DevFormatter",
    "PIIFilter",
    "RideContextFilter",
]
