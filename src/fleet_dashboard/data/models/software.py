from __future__ import annotations

from datetime import datetime

from .common import FleetBaseModel


class Vulnerability(FleetBaseModel):
    cve: str
    details_link: str | None = None
    cvss_score: float | None = None
    epss_probability: float | None = None
    cisa_known_exploit: bool | None = None


class Software(FleetBaseModel):
    id: int
    name: str
    version: str | None = None
    source: str | None = None
    bundle_identifier: str | None = None
    hosts_count: int | None = None
    vulnerabilities: list[Vulnerability] | None = None


class SoftwareResponse(FleetBaseModel):
    counts_updated_at: datetime | None = None
    software: list[Software] | None = None

    @property
    def has_rows(self) -> bool:
        return bool(self.software)
