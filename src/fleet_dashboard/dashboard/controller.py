"""Dashboard controller wiring selection, queries, view state and layout.

The controller is the only object that writes :class:`ViewState`. It folds
resolver results as they arrive, re-derives the platform label whenever the
labels or the platform change, and re-syncs the resolver on every selection
change. Rendering is delegated to a :class:`CardRenderer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from fleet_dashboard.config import Settings
from fleet_dashboard.dashboard.context import DashboardContext
from fleet_dashboard.dashboard.layout import DashboardLayout, compute_layout
from fleet_dashboard.dashboard.queries import QueryInputs, QueryRegistry, Source, build_registry
from fleet_dashboard.dashboard.render import CardRenderer, TextCardRenderer
from fleet_dashboard.dashboard.resolver import DependencyResolver, SourceStatus
from fleet_dashboard.dashboard.selection import (
    Platform,
    Selection,
    SelectionChangedEvent,
    SelectionController,
    SoftwareTableState,
)
from fleet_dashboard.dashboard.view_state import (
    ViewState,
    fold,
    fold_platform_label,
    reset,
)
from fleet_dashboard.data import Team
from fleet_dashboard.services import EventHook, FleetAPI, QueryErrorEvent, QueryResultEvent
from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AddHostsModalState:
    team: Team | None
    enroll_secret: str | None
    is_loading: bool
    is_sandbox_mode: bool


@dataclass(frozen=True, slots=True)
class DashboardHeader:
    """What the page header shows for the caller's tier and team membership."""

    org_name: str | None = None
    show_team_dropdown: bool = False
    team_name: str | None = None
    teams: tuple[Team, ...] = ()
    selected_team_id: int = 0


def _noop_navigate(path: str) -> None:
    logger.debug("Navigation requested", path=path)


class DashboardController:
    def __init__(
        self,
        api: FleetAPI,
        context: DashboardContext,
        *,
        settings: Settings | None = None,
        navigate: Callable[[str], None] | None = None,
        renderer: CardRenderer | None = None,
        pathname: str | None = None,
        clock: Callable[[], float] | None = None,
        registry: QueryRegistry | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._context = context
        self._renderer: CardRenderer = renderer or TextCardRenderer()
        self._resolver = DependencyResolver(
            api,
            registry or build_registry(self._settings),
            clock=clock,
        )
        self._selection = SelectionController(
            context,
            navigate=navigate or _noop_navigate,
            pathname=pathname,
        )
        self._view = ViewState()
        self._show_add_hosts_modal = False
        self._mounted = False

        self.updated: EventHook[ViewState] = EventHook()

        self._unsubscribers = [
            self._resolver.results.subscribe(self._on_result),
            self._resolver.errors.subscribe(self._on_error),
            self._resolver.resets.subscribe(self._on_reset),
            self._selection.changed.subscribe(self._on_selection_changed),
        ]

    # ---------------------------------------------------------------- Lifecycle

    def mount(self) -> None:
        """Start the initial fetches. Requires a running event loop."""

        if self._mounted:
            return
        self._mounted = True
        selection = self._selection.selection
        logger.info(
            "Mounting dashboard",
            platform=selection.platform.value,
            team_id=selection.team_id,
            premium=self._context.is_premium_tier,
        )
        self._resolver.sync(self._inputs())

    async def settle(self) -> None:
        await self._resolver.settle()

    def refresh(self) -> None:
        self._resolver.refresh()

    async def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        await self._resolver.close()
        self._mounted = False

    # ------------------------------------------------------------------ Actions

    def select_platform(self, value: Platform | str) -> bool:
        return self._selection.select_platform(value)

    def select_team(self, team_id: int | None) -> bool:
        return self._selection.select_team(team_id)

    def handle_navigation(self, pathname: str | None) -> bool:
        return self._selection.handle_navigation(pathname)

    def change_software_page(self, page_index: int) -> bool:
        return self._selection.change_software_page(page_index)

    def change_software_tab(self, nav_tab_index: int) -> bool:
        return self._selection.change_software_tab(nav_tab_index)

    def toggle_add_hosts_modal(self) -> bool:
        self._show_add_hosts_modal = not self._show_add_hosts_modal
        return self._show_add_hosts_modal

    # ------------------------------------------------------------------- Views

    @property
    def selection(self) -> Selection:
        return self._selection.selection

    @property
    def software(self) -> SoftwareTableState:
        return self._selection.software

    @property
    def view_state(self) -> ViewState:
        return self._view

    @property
    def resolver(self) -> DependencyResolver:
        return self._resolver

    def statuses(self) -> Mapping[Source, SourceStatus]:
        return self._resolver.statuses()

    def layout(self) -> DashboardLayout:
        return compute_layout(
            self._selection.selection,
            self._context,
            self._view,
            self._resolver.statuses(),
            software=self._selection.software,
            low_disk_space_gb=self._settings.low_disk_space_gb,
        )

    def render(self) -> Any:
        return self._renderer.render(self.layout().visible_cards, self._selection.selection)

    def add_hosts_modal(self) -> AddHostsModalState | None:
        if not self._show_add_hosts_modal:
            return None
        team = self._selection.selection.team
        sandbox = self._context.is_sandbox_mode
        secrets = (
            self._view.team_secrets
            if team is not None and not sandbox
            else self._view.global_secrets
        )
        return AddHostsModalState(
            team=team,
            enroll_secret=secrets[0].secret if secrets else None,
            is_loading=(
                self._resolver.status(Source.TEAMS).is_loading
                or self._resolver.status(Source.GLOBAL_SECRETS).is_loading
            ),
            is_sandbox_mode=sandbox,
        )

    def header(self) -> DashboardHeader:
        context = self._context
        selected_team_id = self._selection.selection.team_id or 0
        if context.is_free_tier:
            return DashboardHeader(org_name=context.org_name, selected_team_id=selected_team_id)
        teams = self._view.teams
        if not teams:
            return DashboardHeader(selected_team_id=selected_team_id)
        if len(teams) > 1 or context.is_on_global_team:
            return DashboardHeader(
                show_team_dropdown=True,
                teams=teams,
                selected_team_id=selected_team_id,
            )
        return DashboardHeader(
            team_name=teams[0].name,
            teams=teams,
            selected_team_id=selected_team_id,
        )

    # ----------------------------------------------------------------- Helpers

    def _inputs(self) -> QueryInputs:
        return QueryInputs(
            selection=self._selection.selection,
            context=self._context,
            software=self._selection.software,
        )

    def _publish(self) -> None:
        self.updated.emit(self._view)

    def _on_result(self, event: QueryResultEvent[Any]) -> None:
        source = Source(event.source)
        inputs = self._resolver.inputs or self._inputs()
        self._view = fold(self._view, source, event.payload, inputs)
        if source is Source.HOST_SUMMARY:
            self._view = fold_platform_label(self._view, self._selection.selection.platform)
        self._publish()
        if source is Source.TEAMS and self._view.teams is not None:
            self._selection.update_teams(self._view.teams)

    def _on_error(self, event: QueryErrorEvent) -> None:
        self._publish()

    def _on_reset(self, source: Source) -> None:
        self._view = reset(self._view, source)
        if source is Source.HOST_SUMMARY:
            self._view = fold_platform_label(self._view, self._selection.selection.platform)
        self._publish()

    def _on_selection_changed(self, event: SelectionChangedEvent) -> None:
        if event.previous.platform is not event.current.platform:
            self._view = fold_platform_label(self._view, event.current.platform)
        if self._mounted:
            self._resolver.sync(self._inputs())
        self._publish()


__all__ = ["AddHostsModalState", "DashboardController", "DashboardHeader"]
