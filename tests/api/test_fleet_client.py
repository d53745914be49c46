from __future__ import annotations

import httpx
import pytest
import respx

from fleet_dashboard.api import (
    AuthenticationError,
    FleetAPIError,
    FleetClient,
    FleetClientConfig,
    FleetErrorCategory,
    FleetTelemetryEvent,
    PermissionError,
    RateLimitError,
)
from fleet_dashboard.services import FleetAPI


BASE_URL = "https://fleet.example.com/api/latest/fleet"


def _client(**overrides: object) -> FleetClient:
    values: dict[str, object] = {"base_url": BASE_URL, "token": "secret-token"}
    values.update(overrides)
    return FleetClient(FleetClientConfig(**values))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_request_sends_bearer_and_cleans_params(respx_mock: respx.Router) -> None:
    route = respx_mock.get(f"{BASE_URL}/software").mock(
        return_value=httpx.Response(200, json={"software": [], "counts_updated_at": None})
    )
    api = FleetAPI(_client())
    try:
        result = await api.load_software(
            page=0,
            per_page=8,
            order_key="hosts_count",
            order_dir="desc",
            vulnerable=True,
            team_id=None,
        )
    finally:
        await api.close()

    assert route.called
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert dict(request.url.params) == {
        "page": "0",
        "per_page": "8",
        "order_key": "hosts_count",
        "order_direction": "desc",
        "vulnerable": "true",
    }
    assert result.has_rows is False


@pytest.mark.parametrize(
    ("status", "error_type", "category"),
    [
        (401, AuthenticationError, FleetErrorCategory.AUTHENTICATION),
        (403, PermissionError, FleetErrorCategory.PERMISSION),
        (429, RateLimitError, FleetErrorCategory.RATE_LIMIT),
        (409, FleetAPIError, FleetErrorCategory.CONFLICT),
        (404, FleetAPIError, FleetErrorCategory.VALIDATION),
        (500, FleetAPIError, FleetErrorCategory.UNKNOWN),
    ],
)
@pytest.mark.asyncio
async def test_status_codes_map_to_categories(
    respx_mock: respx.Router,
    status: int,
    error_type: type[FleetAPIError],
    category: FleetErrorCategory,
) -> None:
    respx_mock.get(f"{BASE_URL}/teams").mock(
        return_value=httpx.Response(
            status,
            json={"message": "Request failed", "errors": [{"name": "base", "reason": "nope"}]},
            headers={"Retry-After": "7"},
        )
    )
    client = _client()
    try:
        with pytest.raises(FleetAPIError) as excinfo:
            await client.request_json("GET", "/teams")
    finally:
        await client.close()

    error = excinfo.value
    assert isinstance(error, error_type)
    assert error.category is category
    assert error.message == "Request failed: nope"
    assert error.request_method == "GET"
    assert error.is_retriable is (status in {429, 500})


@pytest.mark.asyncio
async def test_network_failures_become_network_errors(respx_mock: respx.Router) -> None:
    respx_mock.get(f"{BASE_URL}/teams").mock(side_effect=httpx.ConnectError("refused"))
    events: list[FleetTelemetryEvent] = []
    client = _client(telemetry_callback=events.append)
    try:
        with pytest.raises(FleetAPIError) as excinfo:
            await client.request("GET", "teams")
    finally:
        await client.close()

    assert excinfo.value.category is FleetErrorCategory.NETWORK
    assert isinstance(excinfo.value.inner_error, httpx.ConnectError)
    assert len(events) == 1
    assert events[0].success is False


@pytest.mark.asyncio
async def test_non_json_body_is_a_validation_error(respx_mock: respx.Router) -> None:
    respx_mock.get(f"{BASE_URL}/teams").mock(return_value=httpx.Response(200, text="<html>"))
    client = _client()
    try:
        with pytest.raises(FleetAPIError) as excinfo:
            await client.request_json("GET", "/teams")
    finally:
        await client.close()

    assert excinfo.value.category is FleetErrorCategory.VALIDATION


@pytest.mark.asyncio
async def test_global_secrets_are_unwrapped_from_spec(respx_mock: respx.Router) -> None:
    respx_mock.get(f"{BASE_URL}/spec/enroll_secret").mock(
        return_value=httpx.Response(
            200, json={"spec": {"secrets": [{"secret": "abc", "created_at": "2024-05-01T00:00:00Z"}]}}
        )
    )
    api = FleetAPI(_client())
    try:
        response = await api.get_global_enroll_secrets()
    finally:
        await api.close()

    assert [secret.secret for secret in response.secrets] == ["abc"]


@pytest.mark.asyncio
async def test_mdm_summary_omits_platform_for_all(respx_mock: respx.Router) -> None:
    route = respx_mock.get(f"{BASE_URL}/hosts/summary/mdm").mock(
        return_value=httpx.Response(
            200,
            json={
                "counts_updated_at": None,
                "mobile_device_management_enrollment_status": {
                    "enrolled_manual_hosts_count": 1,
                    "enrolled_automated_hosts_count": 2,
                    "unenrolled_hosts_count": 3,
                    "hosts_count": 6,
                },
                "mobile_device_management_solution": None,
            },
        )
    )
    api = FleetAPI(_client())
    try:
        summary = await api.get_mdm_summary("all", 4)
        await api.get_mdm_summary("darwin", None)
    finally:
        await api.close()

    first, second = route.calls
    assert dict(first.request.url.params) == {"team_id": "4"}
    assert dict(second.request.url.params) == {"platform": "darwin"}
    assert summary.enrollment_status.hosts_count == 6
    assert summary.solution is None


@pytest.mark.asyncio
async def test_host_summary_query_and_parsing(respx_mock: respx.Router) -> None:
    route = respx_mock.get(f"{BASE_URL}/host_summary").mock(
        return_value=httpx.Response(
            200,
            json={
                "totals_hosts_count": 3,
                "platforms": [{"platform": "darwin", "hosts_count": 2}],
                "all_linux_count": 1,
                "builtin_labels": [{"id": 7, "name": "macOS", "label_type": "builtin"}],
            },
        )
    )
    api = FleetAPI(_client())
    try:
        summary = await api.get_host_summary(team_id=2, platform="darwin", low_disk_space_gb=32)
    finally:
        await api.close()

    assert dict(route.calls.last.request.url.params) == {
        "team_id": "2",
        "platform": "darwin",
        "low_disk_space": "32",
    }
    assert summary.platform_count("darwin") == 2
    assert summary.platform_count("windows") == 0
    assert summary.builtin_labels[0].is_builtin


@pytest.mark.asyncio
async def test_malformed_payload_raises_validation_error(respx_mock: respx.Router) -> None:
    respx_mock.get(f"{BASE_URL}/macadmins").mock(
        return_value=httpx.Response(200, json=["not", "an", "object"])
    )
    api = FleetAPI(_client())
    try:
        with pytest.raises(FleetAPIError) as excinfo:
            await api.load_macadmins_aggregate(None)
    finally:
        await api.close()

    assert excinfo.value.category is FleetErrorCategory.VALIDATION
