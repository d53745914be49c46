from __future__ import annotations

from typing import Any, Type, TypeVar

from fleet_dashboard.api.client import FleetClient
from fleet_dashboard.api.errors import FleetAPIError, FleetErrorCategory
from fleet_dashboard.data import (
    EnrollSecretsResponse,
    FleetBaseModel,
    HostSummary,
    MacadminsResponse,
    MdmSummary,
    ResponseValidator,
    SoftwareResponse,
    TeamsResponse,
)
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=FleetBaseModel)


class FleetAPI:
    """Typed access to the Fleet endpoints the dashboard reads from."""

    def __init__(self, client: FleetClient) -> None:
        self._client = client

    async def get_host_summary(
        self,
        *,
        team_id: int | None = None,
        platform: str | None = None,
        low_disk_space_gb: int | None = None,
    ) -> HostSummary:
        params = {
            "team_id": team_id,
            "platform": platform,
            "low_disk_space": low_disk_space_gb,
        }
        payload = await self._client.request_json("GET", "/host_summary", params=params)
        return self._parse("host summary", HostSummary, payload)

    async def load_teams(self) -> TeamsResponse:
        payload = await self._client.request_json("GET", "/teams")
        return self._parse("teams", TeamsResponse, payload)

    async def get_global_enroll_secrets(self) -> EnrollSecretsResponse:
        payload = await self._client.request_json("GET", "/spec/enroll_secret")
        # The global endpoint nests the list under the spec document.
        if isinstance(payload, dict) and isinstance(payload.get("spec"), dict):
            payload = payload["spec"]
        return self._parse("global enroll secrets", EnrollSecretsResponse, payload)

    async def get_team_enroll_secrets(self, team_id: int) -> EnrollSecretsResponse:
        payload = await self._client.request_json("GET", f"/teams/{team_id}/secrets")
        return self._parse("team enroll secrets", EnrollSecretsResponse, payload)

    async def load_software(
        self,
        *,
        page: int,
        per_page: int,
        order_key: str,
        order_dir: str,
        vulnerable: bool,
        team_id: int | None = None,
    ) -> SoftwareResponse:
        params = {
            "page": page,
            "per_page": per_page,
            "order_key": order_key,
            "order_direction": order_dir,
            "vulnerable": vulnerable,
            "team_id": team_id,
        }
        payload = await self._client.request_json("GET", "/software", params=params)
        return self._parse("software", SoftwareResponse, payload)

    async def get_mdm_summary(
        self,
        platform: str | None = None,
        team_id: int | None = None,
    ) -> MdmSummary:
        params = {
            "platform": platform if platform and platform != "all" else None,
            "team_id": team_id,
        }
        payload = await self._client.request_json("GET", "/hosts/summary/mdm", params=params)
        return self._parse("mdm summary", MdmSummary, payload)

    async def load_macadmins_aggregate(self, team_id: int | None = None) -> MacadminsResponse:
        payload = await self._client.request_json(
            "GET", "/macadmins", params={"team_id": team_id}
        )
        return self._parse("macadmins", MacadminsResponse, payload)

    async def close(self) -> None:
        await self._client.close()

    @staticmethod
    def _parse(resource: str, model: Type[ModelT], payload: Any) -> ModelT:
        result = ResponseValidator(resource).parse(model, payload)
        if result is None:
            raise FleetAPIError(
                message=f"Fleet returned a malformed {resource} payload",
                category=FleetErrorCategory.VALIDATION,
            )
        return result


__all__ = ["FleetAPI"]
