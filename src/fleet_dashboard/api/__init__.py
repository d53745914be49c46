"""Fleet REST API client utilities."""

from .client import FleetClient, FleetClientConfig, FleetTelemetryEvent
from .errors import (
    AuthenticationError,
    FleetAPIError,
    FleetErrorCategory,
    PermissionError,
    RateLimitError,
)

__all__ = [
    "FleetAPIError",
    "FleetErrorCategory",
    "RateLimitError",
    "AuthenticationError",
    "PermissionError",
    "FleetClient",
    "FleetClientConfig",
    "FleetTelemetryEvent",
]
