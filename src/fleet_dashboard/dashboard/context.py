from __future__ import annotations

from dataclasses import dataclass

from fleet_dashboard.data import Features, Team


@dataclass(frozen=True, slots=True)
class DashboardContext:
    """Read-only caller and organization facts computed outside the dashboard.

    ``available_teams`` holds the teams the caller is a member of; callers on
    the global team may see every team regardless.
    """

    is_global_admin: bool = False
    is_global_maintainer: bool = False
    is_team_admin: bool = False
    is_team_maintainer: bool = False
    is_premium_tier: bool = False
    is_sandbox_mode: bool = False
    is_on_global_team: bool = False
    available_teams: tuple[Team, ...] = ()
    current_team: Team | None = None
    org_name: str | None = None
    org_features: Features | None = None

    @property
    def is_free_tier(self) -> bool:
        return not self.is_premium_tier

    @property
    def can_enroll_hosts(self) -> bool:
        return (
            self.is_global_admin
            or self.is_global_maintainer
            or self.is_team_admin
            or self.is_team_maintainer
        )

    @property
    def can_enroll_global_hosts(self) -> bool:
        return self.is_global_admin or self.is_global_maintainer

    def belongs_to_team(self, team_id: int | None) -> bool:
        if team_id is None:
            return False
        return any(team.id == team_id for team in self.available_teams)

    def can_view_team(self, team_id: int) -> bool:
        return self.is_on_global_team or self.belongs_to_team(team_id)


__all__ = ["DashboardContext"]
