"""Dashboard state orchestration: queries, selection, view state and layout."""

from .context import DashboardContext
from .controller import AddHostsModalState, DashboardController, DashboardHeader
from .layout import Card, CardAction, CardId, DashboardLayout, compute_layout, manage_hosts_path
from .queries import (
    CacheKey,
    QueryDescriptor,
    QueryInputs,
    QueryRegistry,
    Source,
    build_registry,
)
from .render import CardRenderer, TextCardRenderer
from .resolver import DependencyResolver, SourceStatus
from .selection import (
    Platform,
    Selection,
    SelectionChangedEvent,
    SelectionController,
    SoftwareTableState,
    path_for_platform,
    platform_from_path,
)
from .view_state import LastUpdated, ViewState, fold, fold_platform_label, reset

__all__ = [
    "AddHostsModalState",
    "CacheKey",
    "Card",
    "CardAction",
    "CardId",
    "CardRenderer",
    "DashboardContext",
    "DashboardController",
    "DashboardHeader",
    "DashboardLayout",
    "DependencyResolver",
    "LastUpdated",
    "Platform",
    "QueryDescriptor",
    "QueryInputs",
    "QueryRegistry",
    "Selection",
    "SelectionChangedEvent",
    "SelectionController",
    "SoftwareTableState",
    "Source",
    "SourceStatus",
    "TextCardRenderer",
    "ViewState",
    "build_registry",
    "compute_layout",
    "fold",
    "fold_platform_label",
    "manage_hosts_path",
    "path_for_platform",
    "platform_from_path",
    "reset",
]
