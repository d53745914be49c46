"""Card layout for the dashboard as a single pure function.

``compute_layout`` is the only place that decides which cards appear and in
which order. It reads the selection, caller context, folded view state and
per-source query status, and never touches the network or mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping
from urllib.parse import urlencode

from fleet_dashboard.dashboard.context import DashboardContext
from fleet_dashboard.dashboard.queries import QueryInputs, Source, software_inventory_enabled
from fleet_dashboard.dashboard.resolver import SourceStatus
from fleet_dashboard.dashboard.selection import (
    MANAGE_HOSTS_PATH,
    Platform,
    Selection,
    SoftwareTableState,
)
from fleet_dashboard.dashboard.view_state import ViewState
from fleet_dashboard.errors import ConfigurationMismatch


class CardId(StrEnum):
    HOSTS = "hosts"
    MISSING_HOSTS = "missing_hosts"
    LOW_DISK_SPACE = "low_disk_space"
    WELCOME = "welcome"
    LEARN_FLEET = "learn_fleet"
    SOFTWARE = "software"
    ACTIVITY = "activity"
    MDM = "mdm"
    OPERATING_SYSTEMS = "operating_systems"
    MUNKI = "munki"


@dataclass(frozen=True, slots=True)
class CardAction:
    text: str
    path: str


@dataclass(frozen=True, slots=True)
class Card:
    id: CardId
    title: str
    visible: bool = True
    show_title: bool = True
    title_detail: str | None = None
    description: str | None = None
    action: CardAction | None = None
    content: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DashboardLayout:
    cards: tuple[Card, ...] = ()

    @property
    def visible_cards(self) -> tuple[Card, ...]:
        return tuple(card for card in self.cards if card.visible)

    @property
    def card_ids(self) -> tuple[CardId, ...]:
        return tuple(card.id for card in self.visible_cards)

    def get(self, card_id: CardId) -> Card | None:
        return next((card for card in self.cards if card.id == card_id), None)


def manage_hosts_path(label_id: int | None = None, team_id: int | None = None) -> str:
    path = MANAGE_HOSTS_PATH
    if label_id is not None:
        path = f"{path}/labels/{label_id}"
    if team_id is not None:
        path = f"{path}?{urlencode({'team_id': team_id})}"
    return path


def _status(statuses: Mapping[Source, SourceStatus], source: Source) -> SourceStatus:
    return statuses.get(source) or SourceStatus(source=source)


# --------------------------------------------------------------------- Cards


def _hosts_card(
    selection: Selection, view: ViewState, status: SourceStatus
) -> Card:
    suppressed = status.is_fetching or status.error is not None
    return Card(
        id=CardId.HOSTS,
        title="Hosts",
        title_detail=None if suppressed else _count_text(view.total_hosts_count),
        action=CardAction(
            text="View all hosts",
            path=manage_hosts_path(view.selected_platform_label_id, selection.team_id),
        ),
        content={
            "total_hosts_count": None if suppressed else view.total_hosts_count,
            "team_id": selection.team_id,
            "platform": selection.platform,
            "mac_count": view.mac_count,
            "windows_count": view.windows_count,
            "linux_count": view.linux_count,
            "is_loading": status.is_fetching,
            "show_hosts_ui": view.show_hosts_ui,
            "selected_platform_label_id": view.selected_platform_label_id,
            "labels": view.builtin_labels,
            "error": status.error,
        },
    )


def _count_text(value: int | None) -> str | None:
    return None if value is None else str(value)


def _missing_hosts_card(selection: Selection, view: ViewState, status: SourceStatus) -> Card:
    return Card(
        id=CardId.MISSING_HOSTS,
        title="Missing hosts",
        show_title=False,
        content={
            "missing_count": view.missing_count,
            "is_loading": status.is_fetching,
            "show_hosts_ui": view.show_hosts_ui,
            "selected_platform_label_id": view.selected_platform_label_id,
            "team_id": selection.team_id,
        },
    )


def _low_disk_space_card(
    selection: Selection,
    view: ViewState,
    status: SourceStatus,
    low_disk_space_gb: int,
) -> Card:
    return Card(
        id=CardId.LOW_DISK_SPACE,
        title="Low disk space hosts",
        show_title=False,
        content={
            "low_disk_space_gb": low_disk_space_gb,
            "low_disk_space_count": view.low_disk_space_count,
            "is_loading": status.is_fetching,
            "show_hosts_ui": view.show_hosts_ui,
            "selected_platform_label_id": view.selected_platform_label_id,
            "team_id": selection.team_id,
        },
    )


def _welcome_cards(view: ViewState) -> list[Card]:
    return [
        Card(
            id=CardId.WELCOME,
            title="Welcome to Fleet",
            content={"totals_hosts_count": view.total_hosts_count or 0},
        ),
        Card(id=CardId.LEARN_FLEET, title="Learn how to use Fleet"),
    ]


def _software_card(
    selection: Selection,
    context: DashboardContext,
    view: ViewState,
    status: SourceStatus,
    software: SoftwareTableState,
) -> Card:
    inputs = QueryInputs(selection=selection, context=context, software=software)
    enabled = software_inventory_enabled(inputs)
    error: Exception | None = status.error
    if not enabled:
        error = ConfigurationMismatch("software inventory", team_id=selection.team_id)
    return Card(
        id=CardId.SOFTWARE,
        title="Software",
        show_title=not status.is_fetching,
        title_detail=view.software_title_detail.text if view.software_title_detail else None,
        action=CardAction(text="View all software", path=software.action_url),
        content={
            "software": view.software,
            "error": error,
            "is_collecting_inventory": view.is_collecting_inventory,
            "is_fetching": status.is_fetching,
            "is_software_enabled": enabled,
            "page_index": software.page_index,
            "nav_tab_index": software.nav_tab_index,
        },
    )


def _activity_card(context: DashboardContext) -> Card:
    return Card(
        id=CardId.ACTIVITY,
        title="Activity",
        content={"is_premium_tier": context.is_premium_tier},
    )


def _mdm_card(view: ViewState, status: SourceStatus) -> Card:
    return Card(
        id=CardId.MDM,
        title="Mobile device management (MDM)",
        show_title=not status.is_fetching,
        title_detail=view.mdm_title_detail.text if view.mdm_title_detail else None,
        description="MDM can be used to manage configuration on your workstations.",
        content={
            "is_fetching": status.is_fetching,
            "error": status.error,
            "enrollment": view.mdm_enrollment,
            "solutions": view.mdm_solutions,
            "selected_platform_label_id": view.selected_platform_label_id,
        },
    )


def _munki_card(view: ViewState, status: SourceStatus) -> Card:
    return Card(
        id=CardId.MUNKI,
        title="Munki",
        show_title=not status.is_fetching,
        title_detail=view.munki_title_detail.text if view.munki_title_detail else None,
        description="Munki is a tool for managing software on macOS devices.",
        content={
            "is_fetching": status.is_fetching,
            "error": status.error,
            "versions": view.munki_versions,
            "issues": view.munki_issues,
        },
    )


def _operating_systems_card(selection: Selection) -> Card:
    return Card(
        id=CardId.OPERATING_SYSTEMS,
        title="Operating systems",
        content={"team_id": selection.team_id, "platform": selection.platform},
    )


# -------------------------------------------------------------------- Policy


def compute_layout(
    selection: Selection,
    context: DashboardContext,
    view: ViewState,
    statuses: Mapping[Source, SourceStatus],
    *,
    software: SoftwareTableState | None = None,
    low_disk_space_gb: int = 32,
) -> DashboardLayout:
    """Return the ordered cards for one render pass."""

    software = software or SoftwareTableState()
    hosts_status = _status(statuses, Source.HOST_SUMMARY)
    mdm_status = _status(statuses, Source.MDM)

    cards: list[Card] = [_hosts_card(selection, view, hosts_status)]
    if context.is_premium_tier:
        cards.append(_missing_hosts_card(selection, view, hosts_status))
        cards.append(_low_disk_space_card(selection, view, hosts_status, low_disk_space_gb))

    platform = selection.platform
    if platform is Platform.ALL:
        if (
            selection.team is None
            and context.can_enroll_global_hosts
            and hosts_status.has_data
            and view.total_hosts_count is not None
            and view.total_hosts_count < 2
        ):
            cards.extend(_welcome_cards(view))
        cards.append(
            _software_card(
                selection, context, view, _status(statuses, Source.SOFTWARE), software
            )
        )
        if selection.team is None and context.is_on_global_team:
            cards.append(_activity_card(context))
        if view.show_mdm_card:
            cards.append(_mdm_card(view, mdm_status))
    elif platform is Platform.DARWIN:
        cards.append(_operating_systems_card(selection))
        if view.show_mdm_card:
            cards.append(_mdm_card(view, mdm_status))
        if view.show_munki_card:
            cards.append(_munki_card(view, _status(statuses, Source.MACADMINS)))
    elif platform is Platform.WINDOWS:
        cards.append(_operating_systems_card(selection))
        if view.show_mdm_card:
            cards.append(_mdm_card(view, mdm_status))

    return DashboardLayout(cards=tuple(cards))


__all__ = [
    "Card",
    "CardAction",
    "CardId",
    "DashboardLayout",
    "compute_layout",
    "manage_hosts_path",
]
