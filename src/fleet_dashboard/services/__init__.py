"""Service layer: typed Fleet endpoints and event plumbing."""

from .base import EventHook, QueryErrorEvent, QueryResultEvent
from .fleet_api import FleetAPI

__all__ = [
    "EventHook",
    "FleetAPI",
    "QueryErrorEvent",
    "QueryResultEvent",
]
