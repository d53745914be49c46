from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import FleetBaseModel


class MunkiVersion(FleetBaseModel):
    version: str
    hosts_count: int = 0


class MunkiIssue(FleetBaseModel):
    id: int
    name: str
    type: str
    hosts_count: int = 0


class MacadminAggregate(FleetBaseModel):
    counts_updated_at: datetime | None = None
    munki_versions: list[MunkiVersion] | None = None
    munki_issues: list[MunkiIssue] | None = None


class MacadminsResponse(FleetBaseModel):
    macadmins: MacadminAggregate = Field(default_factory=MacadminAggregate)
