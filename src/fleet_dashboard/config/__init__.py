"""Configuration helpers for the Fleet dashboard."""

from .settings import (
    DEFAULT_LOW_DISK_SPACE_GB,
    DEFAULT_SOFTWARE_PAGE_SIZE,
    DEFAULT_SOFTWARE_STALE_SECONDS,
    Settings,
    SettingsManager,
)

__all__ = [
    "DEFAULT_LOW_DISK_SPACE_GB",
    "DEFAULT_SOFTWARE_PAGE_SIZE",
    "DEFAULT_SOFTWARE_STALE_SECONDS",
    "Settings",
    "SettingsManager",
]
