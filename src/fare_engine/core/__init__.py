from .correlation import get_current_correlation_id, with_correlation
from .exceptions import (
    AllocationError,
    ConfigurationError,
    FareEngineError,
    NotFoundError,
    PermanentError,
    PublishError,
    StateError,
    TransientError,
    ValidationError,
)

__all__ = [
    "AllocationError",
    "ConfigurationError",
    "FareEngineError",
    "NotFoundError",
    "PermanentError",
    "PublishError",
    "StateError",
    "TransientError",
    "ValidationError",
    "get_current_correlation_id",
    "with_correlation",
]
