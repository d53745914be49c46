from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FleetErrorCategory(str, Enum):
    PERMISSION = "permission"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class FleetAPIError(Exception):
    message: str
    category: FleetErrorCategory = FleetErrorCategory.UNKNOWN
    status_code: int | None = None
    retry_after: str | None = None
    inner_error: Exception | None = None
    request_method: str | None = None
    request_url: str | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message

    @property
    def recovery_suggestion(self) -> str | None:
        if self.category is FleetErrorCategory.AUTHENTICATION:
            return "Generate a new API token and update the dashboard settings."
        if self.category is FleetErrorCategory.PERMISSION:
            return "Ask a global admin for access to this team."
        if self.category is FleetErrorCategory.RATE_LIMIT:
            if self.retry_after:
                return f"The Fleet server is throttling requests. Retry after {self.retry_after} seconds."
            return "The Fleet server is throttling requests. Retry shortly."
        if self.category is FleetErrorCategory.NETWORK:
            return "Check your connection to the Fleet server and try again."
        if self.category is FleetErrorCategory.VALIDATION:
            return "The Fleet server rejected the request. Check the server version."
        return None

    @property
    def is_retriable(self) -> bool:
        if self.category in {FleetErrorCategory.RATE_LIMIT, FleetErrorCategory.NETWORK}:
            return True
        if self.status_code and 500 <= self.status_code <= 599:
            return True
        return False


class RateLimitError(FleetAPIError):
    def __init__(
        self, message: str = "Rate limited", retry_after: str | None = None
    ) -> None:
        super().__init__(
            message=message,
            category=FleetErrorCategory.RATE_LIMIT,
            status_code=429,
            retry_after=retry_after,
        )


class AuthenticationError(FleetAPIError):
    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(
            message=message,
            category=FleetErrorCategory.AUTHENTICATION,
            status_code=401,
        )


class PermissionError(FleetAPIError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(
            message=message,
            category=FleetErrorCategory.PERMISSION,
            status_code=403,
        )


__all__ = [
    "FleetAPIError",
    "FleetErrorCategory",
    "RateLimitError",
    "AuthenticationError",
    "PermissionError",
]
