from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from enum import Enum

import httpx

from fleet_dashboard.api.errors import FleetAPIError, FleetErrorCategory
from fleet_dashboard.errors import ConfigurationMismatch, TeamLookupError


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class ErrorDescriptor:
    headline: str
    detail: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    transient: bool = False
    suggestion: str | None = None


_NETWORK_ERRNOS = {
    getattr(socket, "EAI_AGAIN", None),
    getattr(socket, "EAI_FAIL", None),
    getattr(socket, "EAI_NONAME", None),
    getattr(socket, "EHOSTUNREACH", None),
    getattr(socket, "ENETDOWN", None),
    getattr(socket, "ENETUNREACH", None),
    getattr(socket, "ECONNREFUSED", None),
    getattr(socket, "ECONNRESET", None),
    getattr(socket, "ETIMEDOUT", None),
}
_NETWORK_ERRNOS.discard(None)


def describe_exception(error: BaseException) -> ErrorDescriptor:
    """Summarise an error for an inline card error state."""

    descriptor = ErrorDescriptor(
        headline="Something went wrong.",
        detail=f"{type(error).__name__}: {error}",
        severity=ErrorSeverity.ERROR,
        transient=False,
    )

    if isinstance(error, ConfigurationMismatch):
        descriptor.headline = f"{error.feature.capitalize()} is disabled."
        descriptor.detail = str(error)
        descriptor.severity = ErrorSeverity.INFO
        descriptor.suggestion = "Enable the feature in the team or organization settings."
        return descriptor

    if isinstance(error, TeamLookupError):
        descriptor.headline = "Team not found."
        descriptor.detail = str(error)
        descriptor.severity = ErrorSeverity.INFO
        return descriptor

    api_error = _locate_api_error(error)
    if api_error is not None:
        descriptor.detail = str(api_error)
        descriptor.suggestion = api_error.recovery_suggestion
        descriptor.transient = api_error.is_retriable
        if api_error.is_retriable:
            descriptor.severity = ErrorSeverity.WARNING
        descriptor.headline = _api_headline(api_error)
        return descriptor

    root = _unwrap_error(error)

    if isinstance(root, httpx.TimeoutException):
        descriptor.headline = "Timed out contacting the Fleet server."
        descriptor.detail = f"{type(root).__name__}: {root}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Check your network connection and retry shortly."
        return descriptor

    if isinstance(root, asyncio.TimeoutError):
        descriptor.headline = "Operation timed out before the Fleet server responded."
        descriptor.detail = "asyncio.TimeoutError: Operation timed out"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        return descriptor

    if isinstance(root, socket.gaierror):
        descriptor.headline = "DNS lookup failed while contacting the Fleet server."
        descriptor.detail = f"socket.gaierror: {root}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Verify the server URL and DNS configuration."
        return descriptor

    if isinstance(root, OSError) and getattr(root, "errno", None) in _NETWORK_ERRNOS:
        descriptor.headline = "Network connection issue encountered."
        descriptor.detail = f"OSError[{root.errno}]: {root.strerror}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Retry once your connection is stable."
        return descriptor

    return descriptor


def _locate_api_error(error: BaseException) -> FleetAPIError | None:
    current: BaseException | None = error
    visited: set[int] = set()
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        if isinstance(current, FleetAPIError):
            return current
        current = current.__cause__ or current.__context__
    return None


def _unwrap_error(error: BaseException) -> BaseException:
    current = error
    visited: set[int] = set()
    while True:
        visited.add(id(current))
        inner: BaseException | None = current.__cause__ or current.__context__
        if inner is None or id(inner) in visited:
            return current
        current = inner


def _api_headline(error: FleetAPIError) -> str:
    match error.category:
        case FleetErrorCategory.RATE_LIMIT:
            return "The Fleet server throttled the request."
        case FleetErrorCategory.NETWORK:
            return "Network issue contacting the Fleet server."
        case FleetErrorCategory.AUTHENTICATION:
            return "Your session with the Fleet server is not valid."
        case FleetErrorCategory.PERMISSION:
            return "You do not have access to this data."
        case FleetErrorCategory.VALIDATION:
            return "The Fleet server returned unexpected data."
        case FleetErrorCategory.CONFLICT:
            return "The request conflicts with the server state."
        case _:
            return "Fleet server request failed."


__all__ = [
    "ErrorDescriptor",
    "ErrorSeverity",
    "describe_exception",
]
