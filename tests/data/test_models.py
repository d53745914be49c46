from __future__ import annotations

import pytest
from pydantic import ValidationError

from fleet_dashboard.data import (
    HostSummary,
    ResponseValidator,
    Team,
    TeamsResponse,
    ValidationIssue,
)


def test_team_round_trip_serialization() -> None:
    payload = {
        "id": 4,
        "name": "Servers",
        "host_count": 12,
        "features": {"enable_software_inventory": False},
        "unrelated": "ignored",
    }
    team = Team.from_api(payload)

    assert team.name == "Servers"
    assert team.features is not None
    assert team.features.enable_software_inventory is False

    serialized = team.to_api()
    assert serialized["name"] == "Servers"
    assert serialized["features"] == {"enable_software_inventory": False}
    assert "unrelated" not in serialized
    assert "description" not in serialized


def test_models_are_frozen() -> None:
    team = Team(id=1, name="Laptops")

    with pytest.raises(ValidationError):
        team.name = "Desktops"  # type: ignore[misc]


def test_model_validation_errors_surface_fields() -> None:
    with pytest.raises(ValidationError) as excinfo:
        TeamsResponse.from_api({"teams": [{"id": "not-a-number", "name": "x"}]})

    locations = [error["loc"] for error in excinfo.value.errors()]
    assert ("teams", 0, "id") in locations


def test_response_validator_records_issues() -> None:
    issues: list[ValidationIssue] = []
    validator = ResponseValidator("host_summary", issue_callback=issues.append)

    good = validator.parse(HostSummary, {"totals_hosts_count": 2})
    bad = validator.parse(HostSummary, {"totals_hosts_count": "many"})
    not_object = validator.parse(HostSummary, ["nope"])

    assert good is not None and good.totals_hosts_count == 2
    assert bad is None
    assert not_object is None
    assert len(validator.issues()) == 2
    assert issues[0].fields == ("totals_hosts_count",)
    assert issues[1].detail == "list"

    validator.reset()
    assert validator.issues() == []
