"""Per-source fold rules producing the dashboard's immutable view state.

Every field of :class:`ViewState` belongs to exactly one owner in
``FIELD_OWNERSHIP``. A reducer returns only the fields its source owns, so
results from different sources can be folded in any completion order.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Callable, Mapping

from fleet_dashboard.dashboard.queries import QueryInputs, Source
from fleet_dashboard.dashboard.selection import PLATFORM_LABEL_NAMES, Platform
from fleet_dashboard.data import (
    EnrollSecret,
    EnrollSecretsResponse,
    HostSummary,
    LabelSummary,
    MacadminsResponse,
    MdmEnrollmentBucket,
    MdmSolution,
    MdmSummary,
    MunkiIssue,
    MunkiVersion,
    SoftwareResponse,
    Team,
    TeamsResponse,
)


PLATFORM_LABEL_OWNER = "platform_label"


@dataclass(frozen=True, slots=True)
class LastUpdated:
    """Title decoration telling when a source's counts were last computed."""

    what: str
    updated_at: datetime | None

    @property
    def text(self) -> str:
        if self.updated_at is None:
            return "Last updated never"
        return f"Last updated {self.updated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}"


@dataclass(frozen=True, slots=True)
class ViewState:
    # host summary
    total_hosts_count: int | None = None
    mac_count: int = 0
    windows_count: int = 0
    linux_count: int = 0
    missing_count: int = 0
    low_disk_space_count: int = 0
    builtin_labels: tuple[LabelSummary, ...] | None = None
    show_hosts_ui: bool = False
    # labels + selected platform
    selected_platform_label_id: int | None = None
    # teams
    teams: tuple[Team, ...] | None = None
    # enroll secrets
    global_secrets: tuple[EnrollSecret, ...] | None = None
    team_secrets: tuple[EnrollSecret, ...] | None = None
    # software
    software: SoftwareResponse | None = None
    software_title_detail: LastUpdated | None = None
    is_collecting_inventory: bool = False
    # device management
    mdm_enrollment: tuple[MdmEnrollmentBucket, ...] = ()
    mdm_solutions: tuple[MdmSolution, ...] | None = ()
    mdm_title_detail: LastUpdated | None = None
    show_mdm_card: bool = True
    # munki
    munki_versions: tuple[MunkiVersion, ...] = ()
    munki_issues: tuple[MunkiIssue, ...] = ()
    munki_title_detail: LastUpdated | None = None
    show_munki_card: bool = True


FIELD_OWNERSHIP: Mapping[str, frozenset[str]] = {
    Source.HOST_SUMMARY.value: frozenset(
        {
            "total_hosts_count",
            "mac_count",
            "windows_count",
            "linux_count",
            "missing_count",
            "low_disk_space_count",
            "builtin_labels",
            "show_hosts_ui",
        }
    ),
    PLATFORM_LABEL_OWNER: frozenset({"selected_platform_label_id"}),
    Source.TEAMS.value: frozenset({"teams"}),
    Source.GLOBAL_SECRETS.value: frozenset({"global_secrets"}),
    Source.TEAM_SECRETS.value: frozenset({"team_secrets"}),
    Source.SOFTWARE.value: frozenset(
        {"software", "software_title_detail", "is_collecting_inventory"}
    ),
    Source.MDM.value: frozenset(
        {"mdm_enrollment", "mdm_solutions", "mdm_title_detail", "show_mdm_card"}
    ),
    Source.MACADMINS.value: frozenset(
        {"munki_versions", "munki_issues", "munki_title_detail", "show_munki_card"}
    ),
}

# Card visibility survives a reset and only changes when a new result folds.
RESET_PRESERVES: frozenset[str] = frozenset({"show_mdm_card", "show_munki_card"})

_INITIAL = ViewState()


# ------------------------------------------------------------------ Reducers


def reduce_host_summary(payload: HostSummary, inputs: QueryInputs) -> dict[str, Any]:
    premium = inputs.context.is_premium_tier
    return {
        "total_hosts_count": payload.totals_hosts_count,
        "mac_count": payload.platform_count("darwin"),
        "windows_count": payload.platform_count("windows"),
        "linux_count": payload.all_linux_count,
        "missing_count": (payload.missing_30_days_count or 0) if premium else 0,
        "low_disk_space_count": (payload.low_disk_space_count or 0) if premium else 0,
        "builtin_labels": tuple(payload.builtin_labels),
        "show_hosts_ui": True,
    }


def reduce_teams(payload: TeamsResponse, inputs: QueryInputs) -> dict[str, Any]:
    return {"teams": sort_teams(payload.teams)}


def reduce_global_secrets(payload: EnrollSecretsResponse, inputs: QueryInputs) -> dict[str, Any]:
    return {"global_secrets": tuple(payload.secrets)}


def reduce_team_secrets(payload: EnrollSecretsResponse, inputs: QueryInputs) -> dict[str, Any]:
    return {"team_secrets": tuple(payload.secrets)}


def reduce_software(payload: SoftwareResponse, inputs: QueryInputs) -> dict[str, Any]:
    has_rows = payload.has_rows
    return {
        "software": payload,
        "software_title_detail": (
            LastUpdated("software", payload.counts_updated_at) if has_rows else None
        ),
        "is_collecting_inventory": is_collecting_inventory(
            team_id=inputs.team_id,
            page_index=inputs.software.page_index,
            software=payload,
        ),
    }


def reduce_mdm(payload: MdmSummary, inputs: QueryInputs) -> dict[str, Any]:
    status = payload.enrollment_status
    if status.hosts_count == 0 and payload.solution is None:
        return {
            "mdm_enrollment": (),
            "mdm_solutions": None,
            "mdm_title_detail": None,
            "show_mdm_card": False,
        }
    return {
        "mdm_enrollment": (
            MdmEnrollmentBucket(status="Enrolled (manual)", hosts=status.enrolled_manual_hosts_count),
            MdmEnrollmentBucket(
                status="Enrolled (automatic)", hosts=status.enrolled_automated_hosts_count
            ),
            MdmEnrollmentBucket(status="Unenrolled", hosts=status.unenrolled_hosts_count),
        ),
        "mdm_solutions": tuple(payload.solution) if payload.solution is not None else None,
        "mdm_title_detail": LastUpdated("MDM information", payload.counts_updated_at),
        "show_mdm_card": True,
    }


def reduce_macadmins(payload: MacadminsResponse, inputs: QueryInputs) -> dict[str, Any]:
    aggregate = payload.macadmins
    versions = tuple(aggregate.munki_versions or ())
    return {
        "munki_versions": versions,
        "munki_issues": tuple(aggregate.munki_issues or ()),
        "munki_title_detail": LastUpdated("Munki", aggregate.counts_updated_at),
        "show_munki_card": bool(versions),
    }


REDUCERS: Mapping[Source, Callable[[Any, QueryInputs], dict[str, Any]]] = {
    Source.HOST_SUMMARY: reduce_host_summary,
    Source.TEAMS: reduce_teams,
    Source.GLOBAL_SECRETS: reduce_global_secrets,
    Source.TEAM_SECRETS: reduce_team_secrets,
    Source.SOFTWARE: reduce_software,
    Source.MDM: reduce_mdm,
    Source.MACADMINS: reduce_macadmins,
}


# ------------------------------------------------------------------- Helpers


def sort_teams(teams: list[Team] | tuple[Team, ...]) -> tuple[Team, ...]:
    return tuple(sorted(teams, key=lambda team: team.name.casefold()))


def is_collecting_inventory(
    *,
    team_id: int | None,
    page_index: int,
    software: SoftwareResponse | None,
) -> bool:
    """True only while the first global inventory run has not produced counts.

    The vulnerable-only tab is not considered.
    """

    if software is None:
        return False
    return (
        team_id is None
        and page_index == 0
        and not software.has_rows
        and software.counts_updated_at is None
    )


def resolve_platform_label_id(
    labels: tuple[LabelSummary, ...] | None,
    platform: Platform,
) -> int | None:
    if platform is Platform.ALL or not labels:
        return None
    label_name = PLATFORM_LABEL_NAMES.get(platform)
    for label in labels:
        if label.is_builtin and label.name == label_name:
            return label.id
    return None


def _merge(state: ViewState, owner: str, updates: Mapping[str, Any]) -> ViewState:
    owned = FIELD_OWNERSHIP[owner]
    foreign = set(updates) - owned
    if foreign:
        raise ValueError(f"{owner} may not write {sorted(foreign)}")
    return replace(state, **updates)


def fold(state: ViewState, source: Source, payload: Any, inputs: QueryInputs) -> ViewState:
    """Fold one successful result into the view state."""

    return _merge(state, source.value, REDUCERS[source](payload, inputs))


def fold_platform_label(state: ViewState, platform: Platform) -> ViewState:
    return _merge(
        state,
        PLATFORM_LABEL_OWNER,
        {"selected_platform_label_id": resolve_platform_label_id(state.builtin_labels, platform)},
    )


def reset(state: ViewState, source: Source) -> ViewState:
    """Return the source's owned fields to their initial values.

    Fields in ``RESET_PRESERVES`` keep their last folded value.
    """

    owned = FIELD_OWNERSHIP[source.value] - RESET_PRESERVES
    return replace(state, **{name: getattr(_INITIAL, name) for name in owned})


def unowned_fields() -> set[str]:
    owned: set[str] = set()
    for names in FIELD_OWNERSHIP.values():
        owned |= names
    return {f.name for f in fields(ViewState)} - owned


__all__ = [
    "FIELD_OWNERSHIP",
    "LastUpdated",
    "REDUCERS",
    "RESET_PRESERVES",
    "ViewState",
    "fold",
    "fold_platform_label",
    "is_collecting_inventory",
    "reset",
    "resolve_platform_label_id",
    "sort_teams",
    "unowned_fields",
]
