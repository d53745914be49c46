from __future__ import annotations

import pytest

from fleet_dashboard.dashboard import (
    Platform,
    SelectionChangedEvent,
    SelectionController,
    path_for_platform,
    platform_from_path,
)
from tests.factories import make_context, make_premium_context, make_team


def _controller(context=None, pathname=None):
    navigations: list[str] = []
    events: list[SelectionChangedEvent] = []
    controller = SelectionController(
        context or make_context(),
        navigate=navigations.append,
        pathname=pathname,
    )
    controller.changed.subscribe(events.append)
    return controller, navigations, events


@pytest.mark.parametrize(
    ("pathname", "expected"),
    [
        ("/dashboard", Platform.ALL),
        ("/dashboard/mac", Platform.DARWIN),
        ("/dashboard/windows", Platform.WINDOWS),
        ("/dashboard/linux", Platform.LINUX),
        ("/dashboard/linux/", Platform.LINUX),
        ("/dashboard/mac?team_id=3", Platform.DARWIN),
        ("/dashboard/chromeos", Platform.ALL),
        ("/hosts/manage", Platform.ALL),
        (None, Platform.ALL),
    ],
)
def test_platform_from_path(pathname, expected) -> None:
    assert platform_from_path(pathname) is expected


def test_path_for_platform_round_trips_known_paths() -> None:
    for platform in Platform:
        assert platform_from_path(path_for_platform(platform)) is platform


def test_initial_platform_comes_from_pathname() -> None:
    controller, navigations, _ = _controller(pathname="/dashboard/windows")

    assert controller.selection.platform is Platform.WINDOWS
    assert controller.selection.team is None
    assert navigations == []


def test_select_platform_navigates_and_emits() -> None:
    controller, navigations, events = _controller()

    assert controller.select_platform("darwin") is True

    assert controller.selection.platform is Platform.DARWIN
    assert navigations == ["/dashboard/mac"]
    assert len(events) == 1
    assert events[0].previous.platform is Platform.ALL
    assert events[0].current.platform is Platform.DARWIN


def test_select_platform_ignores_unknown_and_repeated_values() -> None:
    controller, navigations, events = _controller()

    assert controller.select_platform("chromeos") is False
    assert controller.select_platform(Platform.ALL) is False

    assert navigations == []
    assert events == []


@pytest.mark.parametrize("value", ["macOS", "mac", "MACOS"])
def test_select_platform_accepts_macos_aliases(value: str) -> None:
    controller, navigations, _ = _controller()

    assert controller.select_platform(value) is True

    assert controller.selection.platform is Platform.DARWIN
    assert navigations == ["/dashboard/mac"]


def test_select_platform_reports_change_when_router_echoes_route() -> None:
    events: list[SelectionChangedEvent] = []
    controller: SelectionController

    def echo(path: str) -> None:
        controller.handle_navigation(path)

    controller = SelectionController(make_context(), navigate=echo)
    controller.changed.subscribe(events.append)

    assert controller.select_platform(Platform.WINDOWS) is True

    assert controller.selection.platform is Platform.WINDOWS
    assert len(events) == 1


def test_handle_navigation_does_not_push_a_route() -> None:
    controller, navigations, events = _controller()

    assert controller.handle_navigation("/dashboard/linux") is True

    assert controller.selection.platform is Platform.LINUX
    assert navigations == []
    assert len(events) == 1


def test_select_unknown_team_leaves_selection_untouched() -> None:
    controller, _, events = _controller(make_premium_context())
    controller.update_teams([make_team(5), make_team(7)])
    before = controller.selection

    assert controller.select_team(42) is False

    assert controller.selection == before
    assert events == []


def test_select_team_and_back_to_all_teams() -> None:
    controller, _, events = _controller(make_premium_context())
    controller.update_teams([make_team(5), make_team(7)])

    assert controller.select_team(7) is True
    assert controller.selection.team_id == 7

    assert controller.select_team(0) is True
    assert controller.selection.team is None
    assert len(events) == 2


def test_team_scoped_user_cannot_select_all_teams_or_foreign_team() -> None:
    own = make_team(5)
    context = make_premium_context(
        is_global_admin=False,
        is_on_global_team=False,
        is_team_admin=True,
        available_teams=(own,),
        current_team=own,
    )
    controller, _, events = _controller(context)
    controller.update_teams([own, make_team(9)])

    assert controller.select_team(None) is False
    assert controller.select_team(9) is False
    assert controller.selection.team_id == 5
    assert events == []


def test_update_teams_defaults_team_scoped_user_to_first_team() -> None:
    context = make_premium_context(
        is_global_admin=False,
        is_on_global_team=False,
        available_teams=(make_team(3, "Alpha"), make_team(4, "beta")),
    )
    controller, _, events = _controller(context)

    controller.update_teams([make_team(3, "Alpha"), make_team(4, "beta")])

    assert controller.selection.team_id == 3
    assert len(events) == 1


def test_update_teams_keeps_global_user_on_all_teams() -> None:
    controller, _, events = _controller(make_premium_context())

    controller.update_teams([make_team(3)])

    assert controller.selection.team is None
    assert events == []


def test_software_table_changes() -> None:
    controller, _, events = _controller()

    assert controller.change_software_page(2) is True
    assert controller.change_software_page(2) is False
    assert controller.change_software_tab(1) is True

    assert controller.software.page_index == 2
    assert controller.software.vulnerable is True
    assert controller.software.action_url == "/software/manage?vulnerable=true"
    assert len(events) == 2
    assert events[-1].software.nav_tab_index == 1

    controller.change_software_tab(0)
    assert controller.software.action_url == "/software/manage"


def test_software_table_rejects_negative_indices() -> None:
    controller, _, _ = _controller()

    with pytest.raises(ValueError):
        controller.change_software_page(-1)
    with pytest.raises(ValueError):
        controller.change_software_tab(-1)
