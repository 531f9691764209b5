"""Standardized exception hierarchy for the fare engine."""

from typing import Any


class FareEngineError(Exception):
    """Base exception for all fare engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(FareEngineError):
    """Errors that may succeed on retry."""

    pass


class PublishError(TransientError):
    """Broadcasting a fare update to subscribers failed."""

    pass


class PermanentError(FareEngineError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class NotFoundError(PermanentError):
    """Requested entity does not exist."""

    pass


class StateError(PermanentError):
    """Invalid state transition or reuse of a finalized value."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid pricing configuration."""

    pass


class AllocationError(PermanentError):
    """Route segments and rider set disagree, so cost cannot be allocated."""

    pass
