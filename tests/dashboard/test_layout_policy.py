from __future__ import annotations

import pytest

from fleet_dashboard.dashboard import (
    CardId,
    Platform,
    Selection,
    Source,
    SourceStatus,
    ViewState,
    compute_layout,
    fold,
    manage_hosts_path,
)
from fleet_dashboard.dashboard.selection import SoftwareTableState
from fleet_dashboard.data import Features
from fleet_dashboard.errors import ConfigurationMismatch, FetchError
from tests.factories import (
    make_context,
    make_host_summary,
    make_inputs,
    make_mdm_summary,
    make_premium_context,
    make_team,
)


def _loaded(*sources: Source) -> dict[Source, SourceStatus]:
    return {
        source: SourceStatus(source=source, enabled=True, has_data=True) for source in sources
    }


def _view(total: int = 10) -> ViewState:
    return fold(
        ViewState(),
        Source.HOST_SUMMARY,
        make_host_summary(total=total, mac=total, windows=0, linux=0),
        make_inputs(),
    )


@pytest.mark.parametrize(
    ("platform", "expected"),
    [
        (
            Platform.ALL,
            [CardId.HOSTS, CardId.SOFTWARE, CardId.ACTIVITY, CardId.MDM],
        ),
        (
            Platform.DARWIN,
            [CardId.HOSTS, CardId.OPERATING_SYSTEMS, CardId.MDM, CardId.MUNKI],
        ),
        (Platform.WINDOWS, [CardId.HOSTS, CardId.OPERATING_SYSTEMS, CardId.MDM]),
        (Platform.LINUX, [CardId.HOSTS]),
    ],
)
def test_free_tier_platform_matrix(platform, expected) -> None:
    layout = compute_layout(
        Selection(platform=platform),
        make_context(),
        _view(),
        _loaded(Source.HOST_SUMMARY),
    )

    assert list(layout.card_ids) == expected


@pytest.mark.parametrize("platform", list(Platform))
def test_premium_adds_missing_and_low_disk_cards(platform) -> None:
    layout = compute_layout(
        Selection(platform=platform),
        make_premium_context(),
        _view(),
        _loaded(Source.HOST_SUMMARY),
    )

    assert list(layout.card_ids[:3]) == [
        CardId.HOSTS,
        CardId.MISSING_HOSTS,
        CardId.LOW_DISK_SPACE,
    ]
    low_disk = layout.get(CardId.LOW_DISK_SPACE)
    assert low_disk is not None and low_disk.content["low_disk_space_gb"] == 32


def test_layout_is_deterministic() -> None:
    args = (
        Selection(platform=Platform.ALL),
        make_context(org_features=Features(enable_software_inventory=False)),
        _view(),
        _loaded(Source.HOST_SUMMARY),
    )

    assert compute_layout(*args) == compute_layout(*args)


def test_onboarding_cards_for_nearly_empty_fleet() -> None:
    view = fold(
        ViewState(),
        Source.HOST_SUMMARY,
        make_host_summary(
            total=1,
            platforms=[{"platform": "darwin", "hosts_count": 1}],
            all_linux_count=0,
        ),
        make_inputs(),
    )

    layout = compute_layout(
        Selection(platform=Platform.ALL),
        make_context(),
        view,
        _loaded(Source.HOST_SUMMARY),
    )

    assert list(layout.card_ids) == [
        CardId.HOSTS,
        CardId.WELCOME,
        CardId.LEARN_FLEET,
        CardId.SOFTWARE,
        CardId.ACTIVITY,
        CardId.MDM,
    ]


def test_onboarding_requires_loaded_summary_global_enroll_and_no_team() -> None:
    view = _view(total=0)
    observer = make_context(is_global_admin=False)
    team = make_team(3)

    not_loaded = compute_layout(Selection(), make_context(), ViewState(), {})
    cannot_enroll = compute_layout(Selection(), observer, view, _loaded(Source.HOST_SUMMARY))
    with_team = compute_layout(
        Selection(team=team), make_context(), view, _loaded(Source.HOST_SUMMARY)
    )

    for layout in (not_loaded, cannot_enroll, with_team):
        assert CardId.WELCOME not in layout.card_ids
    assert CardId.ACTIVITY not in with_team.card_ids


def test_mdm_card_hidden_on_every_platform() -> None:
    view = fold(_view(), Source.MDM, make_mdm_summary(hosts_count=0), make_inputs())

    for platform in Platform:
        layout = compute_layout(
            Selection(platform=platform), make_context(), view, _loaded(Source.HOST_SUMMARY)
        )
        assert CardId.MDM not in layout.card_ids


def test_hosts_total_suppressed_while_fetching_or_failed() -> None:
    view = _view(total=12)
    fetching = {
        Source.HOST_SUMMARY: SourceStatus(
            source=Source.HOST_SUMMARY, enabled=True, is_fetching=True, has_data=True
        )
    }
    failed = {
        Source.HOST_SUMMARY: SourceStatus(
            source=Source.HOST_SUMMARY,
            enabled=True,
            has_data=True,
            error=FetchError("host_summary", RuntimeError("boom")),
        )
    }

    settled = compute_layout(Selection(), make_context(), view, _loaded(Source.HOST_SUMMARY))

    assert settled.cards[0].content["total_hosts_count"] == 12
    assert settled.cards[0].title_detail == "12"
    for statuses in (fetching, failed):
        card = compute_layout(Selection(), make_context(), view, statuses).cards[0]
        assert card.content["total_hosts_count"] is None
        assert card.title_detail is None


def test_software_card_reports_disabled_inventory() -> None:
    team = make_team(4, features={"enable_software_inventory": False})

    layout = compute_layout(
        Selection(team=team),
        make_premium_context(),
        _view(),
        _loaded(Source.HOST_SUMMARY),
    )

    software = layout.get(CardId.SOFTWARE)
    assert software is not None
    assert software.content["error"] == ConfigurationMismatch("software inventory", team_id=4)
    assert software.content["is_software_enabled"] is False


def test_software_card_carries_fetch_error_and_action_url() -> None:
    error = FetchError("software", RuntimeError("boom"))
    statuses = _loaded(Source.HOST_SUMMARY)
    statuses[Source.SOFTWARE] = SourceStatus(source=Source.SOFTWARE, enabled=True, error=error)

    layout = compute_layout(
        Selection(),
        make_context(),
        _view(),
        statuses,
        software=SoftwareTableState(nav_tab_index=1),
    )

    software = layout.get(CardId.SOFTWARE)
    assert software is not None
    assert software.content["error"] is error
    assert software.action is not None
    assert software.action.path == "/software/manage?vulnerable=true"


def test_hosts_card_link_carries_label_and_team() -> None:
    assert manage_hosts_path() == "/hosts/manage"
    assert manage_hosts_path(7) == "/hosts/manage/labels/7"
    assert manage_hosts_path(7, 3) == "/hosts/manage/labels/7?team_id=3"
    assert manage_hosts_path(None, 3) == "/hosts/manage?team_id=3"
