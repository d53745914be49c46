from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Callable, Iterable
from urllib.parse import urlsplit

from fleet_dashboard.dashboard.context import DashboardContext
from fleet_dashboard.data import Team
from fleet_dashboard.errors import TeamLookupError
from fleet_dashboard.services.base import EventHook
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)


class Platform(StrEnum):
    ALL = "all"
    DARWIN = "darwin"
    WINDOWS = "windows"
    LINUX = "linux"

    @classmethod
    def _missing_(cls, value: object) -> "Platform | None":
        if isinstance(value, str):
            return PLATFORM_ALIASES.get(value.casefold())
        return None

    @classmethod
    def parse(cls, value: object) -> "Platform | None":
        try:
            return cls(value)
        except ValueError:
            return None


# Display names and route segments accepted in place of the canonical value.
PLATFORM_ALIASES: dict[str, Platform] = {
    "macos": Platform.DARWIN,
    "mac": Platform.DARWIN,
}


DASHBOARD_PATH = "/dashboard"
MANAGE_HOSTS_PATH = "/hosts/manage"
MANAGE_SOFTWARE_PATH = "/software/manage"

PLATFORM_PATHS: dict[Platform, str] = {
    Platform.ALL: DASHBOARD_PATH,
    Platform.DARWIN: f"{DASHBOARD_PATH}/mac",
    Platform.WINDOWS: f"{DASHBOARD_PATH}/windows",
    Platform.LINUX: f"{DASHBOARD_PATH}/linux",
}

PLATFORM_LABEL_NAMES: dict[Platform, str] = {
    Platform.DARWIN: "macOS",
    Platform.WINDOWS: "MS Windows",
    Platform.LINUX: "All Linux",
}


def platform_from_path(pathname: str | None) -> Platform:
    """Resolve the platform for a dashboard path; anything unknown is ``all``."""

    if not pathname:
        return Platform.ALL
    path = urlsplit(pathname).path
    if path != "/":
        path = path.rstrip("/")
    for platform, candidate in PLATFORM_PATHS.items():
        if candidate == path:
            return platform
    return Platform.ALL


def path_for_platform(platform: Platform) -> str:
    return PLATFORM_PATHS.get(platform, DASHBOARD_PATH)


@dataclass(frozen=True, slots=True)
class Selection:
    platform: Platform = Platform.ALL
    team: Team | None = None

    @property
    def team_id(self) -> int | None:
        return self.team.id if self.team is not None else None


@dataclass(frozen=True, slots=True)
class SoftwareTableState:
    page_index: int = 0
    nav_tab_index: int = 0

    @property
    def vulnerable(self) -> bool:
        return self.nav_tab_index != 0

    @property
    def action_url(self) -> str:
        if self.nav_tab_index == 1:
            return f"{MANAGE_SOFTWARE_PATH}?vulnerable=true"
        return MANAGE_SOFTWARE_PATH


@dataclass(slots=True)
class SelectionChangedEvent:
    previous: Selection
    current: Selection
    software: SoftwareTableState


class SelectionController:
    """Owns the operator's platform/team choice and the software table position."""

    def __init__(
        self,
        context: DashboardContext,
        *,
        navigate: Callable[[str], None],
        pathname: str | None = None,
    ) -> None:
        self._context = context
        self._navigate = navigate
        self._teams: tuple[Team, ...] = ()
        self._selection = Selection(
            platform=platform_from_path(pathname),
            team=context.current_team,
        )
        self._software = SoftwareTableState()
        self.changed: EventHook[SelectionChangedEvent] = EventHook()

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def software(self) -> SoftwareTableState:
        return self._software

    @property
    def teams(self) -> tuple[Team, ...]:
        return self._teams

    # ----------------------------------------------------------------- Platform

    def select_platform(self, value: Platform | str) -> bool:
        """Switch platform and push its canonical path. Unknown values are ignored."""

        platform = Platform.parse(value)
        if platform is None:
            logger.warning("Ignoring unknown platform selection", value=str(value))
            return False
        if platform is self._selection.platform:
            return False
        changed = self._apply(replace(self._selection, platform=platform))
        self._navigate(path_for_platform(platform))
        return changed

    def handle_navigation(self, pathname: str | None) -> bool:
        """Sync the platform with a route change that did not originate here."""

        platform = platform_from_path(pathname)
        if platform is self._selection.platform:
            return False
        return self._apply(replace(self._selection, platform=platform))

    # --------------------------------------------------------------------- Team

    def select_team(self, team_id: int | None) -> bool:
        """Switch team scope; ``None`` or ``0`` means all teams.

        Unknown or inaccessible teams leave the selection untouched.
        """

        if not team_id:
            if self._context.is_premium_tier and not self._context.is_on_global_team:
                logger.warning("Rejecting all-teams scope for a team-scoped user")
                return False
            return self._apply(replace(self._selection, team=None))

        try:
            team = self._find_team(team_id)
        except TeamLookupError as exc:
            logger.warning(
                "Ignoring selection of unavailable team",
                team_id=team_id,
                reason=str(exc),
            )
            return False

        if not self._context.can_view_team(team.id):
            logger.warning("Rejecting team outside the caller's scope", team_id=team.id)
            return False
        return self._apply(replace(self._selection, team=team))

    def update_teams(self, teams: Iterable[Team]) -> None:
        """Replace the loaded team list.

        Team-scoped callers with no team chosen land on the first team.
        """

        self._teams = tuple(teams)
        selected = self._selection.team
        if selected is not None:
            refreshed = next((t for t in self._teams if t.id == selected.id), None)
            if refreshed is not None and refreshed != selected:
                self._apply(replace(self._selection, team=refreshed))
            return
        if not self._context.is_on_global_team and self._teams:
            first = self._teams[0]
            logger.info("Defaulting to first available team", team_id=first.id)
            self._apply(replace(self._selection, team=first))

    # ----------------------------------------------------------------- Software

    def change_software_page(self, page_index: int) -> bool:
        if page_index < 0:
            raise ValueError("page_index cannot be negative")
        if page_index == self._software.page_index:
            return False
        self._software = replace(self._software, page_index=page_index)
        self._emit(self._selection)
        return True

    def change_software_tab(self, nav_tab_index: int) -> bool:
        if nav_tab_index < 0:
            raise ValueError("nav_tab_index cannot be negative")
        if nav_tab_index == self._software.nav_tab_index:
            return False
        self._software = replace(self._software, nav_tab_index=nav_tab_index)
        self._emit(self._selection)
        return True

    # ------------------------------------------------------------------ Helpers

    def _find_team(self, team_id: int) -> Team:
        for team in self._teams:
            if team.id == team_id:
                return team
        raise TeamLookupError(team_id)

    def _apply(self, selection: Selection) -> bool:
        if selection == self._selection:
            return False
        previous = self._selection
        self._selection = selection
        logger.info(
            "Dashboard selection changed",
            platform=selection.platform.value,
            team_id=selection.team_id,
            previous_platform=previous.platform.value,
            previous_team_id=previous.team_id,
        )
        self._emit(previous)
        return True

    def _emit(self, previous: Selection) -> None:
        self.changed.emit(
            SelectionChangedEvent(
                previous=previous,
                current=self._selection,
                software=self._software,
            )
        )


__all__ = [
    "DASHBOARD_PATH",
    "MANAGE_HOSTS_PATH",
    "MANAGE_SOFTWARE_PATH",
    "PLATFORM_LABEL_NAMES",
    "PLATFORM_PATHS",
    "Platform",
    "Selection",
    "SelectionChangedEvent",
    "SelectionController",
    "SoftwareTableState",
    "path_for_platform",
    "platform_from_path",
]
