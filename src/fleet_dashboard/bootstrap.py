from __future__ import annotations

from typing import Callable

from fleet_dashboard.api import FleetClient, FleetClientConfig
from fleet_dashboard.config import Settings
from fleet_dashboard.dashboard import (
    CardRenderer,
    DashboardContext,
    DashboardController,
    TextCardRenderer,
)
from fleet_dashboard.data import Features
from fleet_dashboard.services import FleetAPI
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)

ROLES = ("admin", "maintainer", "observer")
TIERS = ("free", "premium")


def build_api(settings: Settings) -> FleetAPI:
    """Create the typed API facade for a configured Fleet server."""

    config = FleetClientConfig(
        base_url=settings.api_base_url,
        token=settings.api_token,
        verify=settings.verify_tls,
    )
    logger.debug("Fleet client configured", base_url=config.base_url, verify=config.verify)
    return FleetAPI(FleetClient(config))


def build_context(
    *,
    tier: str = "free",
    role: str = "admin",
    on_global_team: bool = True,
    org_name: str | None = None,
    software_inventory: bool = True,
) -> DashboardContext:
    if tier not in TIERS:
        raise ValueError(f"Unknown tier {tier!r}")
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}")
    is_admin = role == "admin"
    is_maintainer = role == "maintainer"
    return DashboardContext(
        is_global_admin=on_global_team and is_admin,
        is_global_maintainer=on_global_team and is_maintainer,
        is_team_admin=not on_global_team and is_admin,
        is_team_maintainer=not on_global_team and is_maintainer,
        is_premium_tier=tier == "premium",
        is_on_global_team=on_global_team,
        org_name=org_name,
        org_features=Features(enable_software_inventory=software_inventory),
    )


async def run_dashboard(
    api: FleetAPI,
    context: DashboardContext,
    *,
    settings: Settings,
    pathname: str | None = None,
    team_id: int | None = None,
    renderer: CardRenderer | None = None,
    navigate: Callable[[str], None] | None = None,
) -> object:
    """Mount a controller, wait for every query to settle and render once."""

    controller = DashboardController(
        api,
        context,
        settings=settings,
        navigate=navigate,
        renderer=renderer or TextCardRenderer(),
        pathname=pathname,
    )
    try:
        controller.mount()
        await controller.settle()
        if team_id is not None:
            if not controller.select_team(team_id):
                logger.warning("Requested team could not be selected", team_id=team_id)
            await controller.settle()
        return controller.render()
    finally:
        await controller.close()


__all__ = ["ROLES", "TIERS", "build_api", "build_context", "run_dashboard"]
