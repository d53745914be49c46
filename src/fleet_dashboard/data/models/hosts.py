from __future__ import annotations

from pydantic import Field

from .common import FleetBaseModel


class LabelSummary(FleetBaseModel):
    id: int
    name: str
    description: str | None = None
    label_type: str = "regular"

    @property
    def is_builtin(self) -> bool:
        return self.label_type == "builtin"


class HostSummaryPlatform(FleetBaseModel):
    platform: str
    hosts_count: int = 0


class HostSummary(FleetBaseModel):
    team_id: int | None = None
    totals_hosts_count: int = 0
    online_count: int | None = None
    offline_count: int | None = None
    mia_count: int | None = None
    new_count: int | None = None
    all_linux_count: int = 0
    missing_30_days_count: int | None = None
    low_disk_space_count: int | None = None
    platforms: list[HostSummaryPlatform] | None = None
    builtin_labels: list[LabelSummary] = Field(default_factory=list)

    def platform_count(self, platform: str) -> int:
        """Host count for an exact platform string, 0 when absent."""

        for entry in self.platforms or []:
            if entry.platform == platform:
                return entry.hosts_count
        return 0
