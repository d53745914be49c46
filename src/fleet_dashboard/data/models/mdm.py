from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import FleetBaseModel


class MdmEnrollmentStatus(FleetBaseModel):
    enrolled_manual_hosts_count: int = 0
    enrolled_automated_hosts_count: int = 0
    unenrolled_hosts_count: int = 0
    hosts_count: int = 0


class MdmSolution(FleetBaseModel):
    id: int | None = None
    name: str | None = None
    server_url: str
    hosts_count: int = 0


class MdmSummary(FleetBaseModel):
    counts_updated_at: datetime | None = None
    enrollment_status: MdmEnrollmentStatus = Field(
        default_factory=MdmEnrollmentStatus,
        alias="mobile_device_management_enrollment_status",
    )
    solution: list[MdmSolution] | None = Field(
        default=None,
        alias="mobile_device_management_solution",
    )


class MdmEnrollmentBucket(FleetBaseModel):
    """One row of the MDM card's enrollment table."""

    status: str
    hosts: int
