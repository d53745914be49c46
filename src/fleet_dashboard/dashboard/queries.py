"""Query descriptors for every remote source the dashboard reads.

Each descriptor is immutable. Its cache key covers every input the result
depends on, and its ``enabled`` predicate decides whether the source may be
fetched for the current inputs at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Awaitable, Callable, Hashable, Iterator

from fleet_dashboard.config import Settings
from fleet_dashboard.dashboard.context import DashboardContext
from fleet_dashboard.dashboard.selection import Platform, Selection, SoftwareTableState
from fleet_dashboard.services import FleetAPI


class Source(StrEnum):
    HOST_SUMMARY = "host_summary"
    TEAMS = "teams"
    GLOBAL_SECRETS = "global_secrets"
    TEAM_SECRETS = "team_secrets"
    SOFTWARE = "software"
    MDM = "mdm"
    MACADMINS = "macadmins"


CacheKey = tuple[Hashable, ...]

SOFTWARE_ORDER_KEY = "hosts_count"
SOFTWARE_ORDER_DIRECTION = "desc"


@dataclass(frozen=True, slots=True)
class QueryInputs:
    selection: Selection
    context: DashboardContext
    software: SoftwareTableState = field(default_factory=SoftwareTableState)

    @property
    def team_id(self) -> int | None:
        return self.selection.team_id

    @property
    def platform(self) -> Platform:
        return self.selection.platform


def _team_scope(inputs: QueryInputs) -> Hashable:
    return inputs.team_id


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    source: Source
    key: Callable[[QueryInputs], CacheKey]
    fetch: Callable[[FleetAPI, QueryInputs], Awaitable[Any]]
    enabled: Callable[[QueryInputs], bool]
    stale_time: float = 0.0
    keep_previous_data: bool = False
    scope: Callable[[QueryInputs], Hashable] = _team_scope


# ---------------------------------------------------------------- Predicates


def host_summary_enabled(inputs: QueryInputs) -> bool:
    return True


def teams_enabled(inputs: QueryInputs) -> bool:
    return inputs.context.is_premium_tier


def global_secrets_enabled(inputs: QueryInputs) -> bool:
    return inputs.context.can_enroll_global_hosts


def team_secrets_enabled(inputs: QueryInputs) -> bool:
    return inputs.team_id is not None and inputs.context.can_enroll_hosts


def software_inventory_enabled(inputs: QueryInputs) -> bool:
    """Feature flag for the effective scope; a team setting beats the org default."""

    team = inputs.selection.team
    if team is not None and team.features is not None:
        team_flag = team.features.enable_software_inventory
        if team_flag is not None:
            return team_flag
    org_features = inputs.context.org_features
    return bool(org_features and org_features.enable_software_inventory)


def software_enabled(inputs: QueryInputs) -> bool:
    if not software_inventory_enabled(inputs):
        return False
    context = inputs.context
    return context.is_on_global_team or context.belongs_to_team(inputs.team_id)


def mdm_enabled(inputs: QueryInputs) -> bool:
    return inputs.platform is not Platform.LINUX


def macadmins_enabled(inputs: QueryInputs) -> bool:
    return inputs.platform is Platform.DARWIN


# ------------------------------------------------------------------ Registry


class QueryRegistry:
    """Ordered collection of query descriptors keyed by source."""

    def __init__(self, descriptors: list[QueryDescriptor]) -> None:
        self._descriptors: dict[Source, QueryDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.source in self._descriptors:
                raise ValueError(f"Duplicate query descriptor for {descriptor.source}")
            self._descriptors[descriptor.source] = descriptor

    def __iter__(self) -> Iterator[QueryDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, source: object) -> bool:
        return source in self._descriptors

    def get(self, source: Source) -> QueryDescriptor:
        return self._descriptors[source]


def build_registry(settings: Settings | None = None) -> QueryRegistry:
    settings = settings or Settings()
    per_page = settings.software_page_size
    low_disk_space_gb = settings.low_disk_space_gb

    def host_summary_key(inputs: QueryInputs) -> CacheKey:
        return (
            "host summary",
            inputs.team_id,
            inputs.context.is_premium_tier,
            inputs.platform.value,
        )

    def fetch_host_summary(api: FleetAPI, inputs: QueryInputs) -> Awaitable[Any]:
        platform = inputs.platform
        return api.get_host_summary(
            team_id=inputs.team_id,
            platform=None if platform is Platform.ALL else platform.value,
            low_disk_space_gb=low_disk_space_gb if inputs.context.is_premium_tier else None,
        )

    def software_key(inputs: QueryInputs) -> CacheKey:
        return (
            "software",
            inputs.software.page_index,
            per_page,
            SOFTWARE_ORDER_DIRECTION,
            SOFTWARE_ORDER_KEY,
            inputs.team_id,
            inputs.software.vulnerable,
        )

    def fetch_software(api: FleetAPI, inputs: QueryInputs) -> Awaitable[Any]:
        return api.load_software(
            page=inputs.software.page_index,
            per_page=per_page,
            order_key=SOFTWARE_ORDER_KEY,
            order_dir=SOFTWARE_ORDER_DIRECTION,
            vulnerable=inputs.software.vulnerable,
            team_id=inputs.team_id,
        )

    def fetch_team_secrets(api: FleetAPI, inputs: QueryInputs) -> Awaitable[Any]:
        team_id = inputs.team_id
        if team_id is None:  # pragma: no cover - guarded by the predicate
            raise ValueError("team secrets requested without a team")
        return api.get_team_enroll_secrets(team_id)

    return QueryRegistry(
        [
            QueryDescriptor(
                source=Source.HOST_SUMMARY,
                key=host_summary_key,
                fetch=fetch_host_summary,
                enabled=host_summary_enabled,
            ),
            QueryDescriptor(
                source=Source.TEAMS,
                key=lambda inputs: ("teams",),
                fetch=lambda api, inputs: api.load_teams(),
                enabled=teams_enabled,
                scope=lambda inputs: None,
            ),
            QueryDescriptor(
                source=Source.GLOBAL_SECRETS,
                key=lambda inputs: ("global secrets",),
                fetch=lambda api, inputs: api.get_global_enroll_secrets(),
                enabled=global_secrets_enabled,
                scope=lambda inputs: None,
            ),
            QueryDescriptor(
                source=Source.TEAM_SECRETS,
                key=lambda inputs: ("team secrets", inputs.team_id),
                fetch=fetch_team_secrets,
                enabled=team_secrets_enabled,
            ),
            QueryDescriptor(
                source=Source.SOFTWARE,
                key=software_key,
                fetch=fetch_software,
                enabled=software_enabled,
                stale_time=settings.software_stale_seconds,
                keep_previous_data=True,
            ),
            QueryDescriptor(
                source=Source.MDM,
                key=lambda inputs: (f"mdm-{inputs.platform.value}", inputs.team_id),
                fetch=lambda api, inputs: api.get_mdm_summary(
                    inputs.platform.value, inputs.team_id
                ),
                enabled=mdm_enabled,
            ),
            QueryDescriptor(
                source=Source.MACADMINS,
                key=lambda inputs: ("macAdmins", inputs.team_id),
                fetch=lambda api, inputs: api.load_macadmins_aggregate(inputs.team_id),
                enabled=macadmins_enabled,
                keep_previous_data=True,
            ),
        ]
    )


__all__ = [
    "CacheKey",
    "QueryDescriptor",
    "QueryInputs",
    "QueryRegistry",
    "Source",
    "build_registry",
    "global_secrets_enabled",
    "host_summary_enabled",
    "macadmins_enabled",
    "mdm_enabled",
    "software_enabled",
    "software_inventory_enabled",
    "team_secrets_enabled",
    "teams_enabled",
]
