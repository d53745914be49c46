from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import FleetBaseModel


class Features(FleetBaseModel):
    enable_host_users: bool | None = None
    enable_software_inventory: bool | None = None


class Team(FleetBaseModel):
    id: int
    name: str
    description: str | None = None
    user_count: int | None = None
    host_count: int | None = None
    features: Features | None = None


class TeamsResponse(FleetBaseModel):
    teams: list[Team] = Field(default_factory=list)


class EnrollSecret(FleetBaseModel):
    secret: str
    created_at: datetime | None = None
    team_id: int | None = None


class EnrollSecretsResponse(FleetBaseModel):
    secrets: list[EnrollSecret] = Field(default_factory=list)
