from __future__ import annotations

from typing import Any, Protocol, Sequence

from fleet_dashboard.dashboard.layout import Card, CardId
from fleet_dashboard.dashboard.selection import Selection
from fleet_dashboard.data import SoftwareResponse
from fleet_dashboard.utils.errors import describe_exception


class CardRenderer(Protocol):
    """Presentation primitive: draws an ordered card list for a selection."""

    def render(self, cards: Sequence[Card], selection: Selection) -> Any: ...


class TextCardRenderer:
    """Plain-text renderer used by the command line and in tests."""

    def __init__(self, *, width: int = 72) -> None:
        self._width = width

    def render(self, cards: Sequence[Card], selection: Selection) -> str:
        team = selection.team.name if selection.team is not None else "All teams"
        lines = [f"Platform: {selection.platform.value}  Team: {team}", "=" * self._width]
        for card in cards:
            if not card.visible:
                continue
            lines.extend(self._render_card(card))
            lines.append("-" * self._width)
        return "\n".join(lines)

    def _render_card(self, card: Card) -> list[str]:
        heading = card.title if card.show_title else f"({card.title})"
        if card.id is CardId.HOSTS and card.content.get("total_hosts_count") is not None:
            heading = f"{heading} ({card.content['total_hosts_count']})"
        lines = [heading]
        if card.title_detail:
            lines.append(f"  {card.title_detail}")
        if card.description:
            lines.append(f"  {card.description}")

        error = card.content.get("error")
        if isinstance(error, BaseException):
            descriptor = describe_exception(error)
            lines.append(f"  ! {descriptor.headline}")
            if descriptor.detail:
                lines.append(f"    {descriptor.detail}")
        else:
            for name, value in card.content.items():
                if name == "error" or value is None:
                    continue
                lines.append(f"  {name}: {_format_value(value)}")

        if card.action is not None:
            lines.append(f"  -> {card.action.text}: {card.action.path}")
        return lines


def _format_value(value: Any) -> str:
    if isinstance(value, tuple):
        return f"{len(value)} item(s)"
    if isinstance(value, SoftwareResponse):
        return f"{len(value.software or [])} row(s)"
    return str(value)


__all__ = ["CardRenderer", "TextCardRenderer"]
