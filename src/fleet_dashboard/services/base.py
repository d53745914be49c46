from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

from fleet_dashboard.utils import get_logger


logger = get_logger(__name__)

T_co = TypeVar("T_co", covariant=True)


class EventHook(Generic[T_co]):
    """Simple observer pattern helper."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T_co], None]] = []

    def subscribe(self, callback: Callable[[T_co], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:  # pragma: no cover - best effort cleanup
                pass

        return unsubscribe

    def emit(self, payload: T_co) -> None:
        for callback in list(self._subscribers):
            try:
                callback(payload)
            except Exception:  # pragma: no cover - subscribers should not crash the resolver
                logger.exception("Event callback failed")


@dataclass(slots=True)
class QueryResultEvent(Generic[T_co]):
    source: str
    key: tuple[Hashable, ...]
    payload: T_co
    from_cache: bool


@dataclass(slots=True)
class QueryErrorEvent:
    source: str
    key: tuple[Hashable, ...]
    error: Exception


__all__ = [
    "EventHook",
    "QueryResultEvent",
    "QueryErrorEvent",
]
