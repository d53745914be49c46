"""Error taxonomy for the dashboard state layer.

Every error here is scoped to a single source or card. None of them is
allowed to take the whole page down.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard orchestration errors."""


class FetchError(DashboardError):
    """A source's fetch failed (network, HTTP status or malformed payload)."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"{source} fetch failed: {cause}")
        self.source = source
        self.cause = cause
        self.__cause__ = cause


class TeamLookupError(DashboardError, LookupError):
    """The requested team is not among the loaded teams."""

    def __init__(self, team_id: int) -> None:
        super().__init__(f"Team {team_id} is not available")
        self.team_id = team_id


class ConfigurationMismatch(DashboardError):
    """A feature needed by a source is disabled for the current scope."""

    def __init__(self, feature: str, team_id: int | None = None) -> None:
        scope = f"team {team_id}" if team_id is not None else "the organization"
        super().__init__(f"{feature} is disabled for {scope}")
        self.feature = feature
        self.team_id = team_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationMismatch):
            return NotImplemented
        return (self.feature, self.team_id) == (other.feature, other.team_id)

    def __hash__(self) -> int:
        return hash((type(self), self.feature, self.team_id))


__all__ = [
    "DashboardError",
    "FetchError",
    "TeamLookupError",
    "ConfigurationMismatch",
]
