from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from fleet_dashboard.api.errors import (
    AuthenticationError,
    FleetAPIError,
    FleetErrorCategory,
    PermissionError,
    RateLimitError,
)
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)


@dataclass(slots=True)
class FleetTelemetryEvent:
    method: str
    url: str
    status_code: int | None
    duration_ms: float
    category: FleetErrorCategory | None
    success: bool


@dataclass(slots=True)
class FleetClientConfig:
    base_url: str
    token: str | None = None
    user_agent: str = "fleet-dashboard-python"
    verify: bool = True
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    enable_telemetry: bool = True
    telemetry_callback: Callable[[FleetTelemetryEvent], None] | None = None


def _map_response_to_error(response: httpx.Response) -> FleetAPIError:
    status = response.status_code
    retry_after = response.headers.get("Retry-After")
    body: object = {}
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = {}

    message = None
    if isinstance(body, dict):
        message = body.get("message")
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("reason"):
                message = f"{message}: {first['reason']}" if message else first["reason"]

    message = message or response.text or f"Fleet request failed with status {status}"

    if status == 401:
        return AuthenticationError(message=message)
    if status == 403:
        return PermissionError(message=message)
    if status == 429:
        return RateLimitError(message=message, retry_after=retry_after)

    category = FleetErrorCategory.UNKNOWN
    if status == 409:
        category = FleetErrorCategory.CONFLICT
    elif status in {400, 404, 422}:
        category = FleetErrorCategory.VALIDATION

    return FleetAPIError(
        message=message,
        category=category,
        status_code=status,
        retry_after=retry_after,
    )


class FleetClient:
    """Thin async wrapper over httpx that maps failures to ``FleetAPIError``."""

    def __init__(
        self,
        config: FleetClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._telemetry_callback = config.telemetry_callback
        if self._telemetry_callback is None and config.enable_telemetry:
            self._telemetry_callback = self._default_telemetry_callback
        self._http_client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> httpx.Response:
        client = self._get_http_client()
        url = self._absolute_url(path)
        query = _clean_params(params)
        start = time.perf_counter()
        try:
            response = await client.request(method, url, params=query, json=json_body)
        except httpx.TimeoutException as exc:
            self._publish_telemetry(method, url, start, None, FleetErrorCategory.NETWORK)
            raise FleetAPIError(
                message="Timed out communicating with the Fleet server",
                category=FleetErrorCategory.NETWORK,
                inner_error=exc,
                request_method=method.upper(),
                request_url=url,
            ) from exc
        except httpx.RequestError as exc:
            self._publish_telemetry(method, url, start, None, FleetErrorCategory.NETWORK)
            raise FleetAPIError(
                message=f"Network error communicating with the Fleet server: {exc}",
                category=FleetErrorCategory.NETWORK,
                inner_error=exc,
                request_method=method.upper(),
                request_url=url,
            ) from exc

        if response.status_code >= 400:
            error = _map_response_to_error(response)
            error.request_method = method.upper()
            error.request_url = str(response.request.url)
            self._publish_telemetry(
                method, url, start, response.status_code, error.category
            )
            raise error

        self._publish_telemetry(method, url, start, response.status_code, None)
        return response

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        response = await self.request(method, path, params=params, json_body=json_body)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise FleetAPIError(
                message="Fleet server returned a non-JSON response",
                category=FleetErrorCategory.VALIDATION,
                status_code=response.status_code,
                inner_error=exc,
                request_method=method.upper(),
                request_url=str(response.request.url),
            ) from exc

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ------------------------------------------------------------- Internals

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            headers = {"User-Agent": self._config.user_agent}
            if self._config.token:
                headers["Authorization"] = f"Bearer {self._config.token}"
            self._http_client = httpx.AsyncClient(
                headers=headers,
                verify=self._config.verify,
                transport=self._transport,
                timeout=httpx.Timeout(
                    connect=self._config.connect_timeout,
                    read=self._config.read_timeout,
                    write=30.0,
                    pool=5.0,
                ),
            )
        return self._http_client

    def _absolute_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _publish_telemetry(
        self,
        method: str,
        url: str,
        start: float,
        status_code: int | None,
        category: FleetErrorCategory | None,
    ) -> None:
        if not self._telemetry_callback:
            return
        event = FleetTelemetryEvent(
            method=method.upper(),
            url=url,
            status_code=status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
            category=category,
            success=category is None,
        )
        try:
            self._telemetry_callback(event)
        except Exception:  # pragma: no cover - telemetry shouldn't break requests
            logger.warning("Telemetry callback raised an exception", exc_info=True)

    def _default_telemetry_callback(self, event: FleetTelemetryEvent) -> None:
        logger.debug(
            "Fleet request",
            method=event.method,
            url=event.url,
            status_code=event.status_code,
            duration_ms=round(event.duration_ms, 2),
            success=event.success,
            category=event.category.value if event.category else None,
        )


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop unset query values and render booleans the way the server expects."""

    if not params:
        return None
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = value
    return cleaned or None


__all__ = [
    "FleetClient",
    "FleetClientConfig",
    "FleetTelemetryEvent",
]
