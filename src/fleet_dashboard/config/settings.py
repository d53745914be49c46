from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_cache_dir, user_config_dir

APP_NAME = "FleetDashboard"
ENV_PREFIX = "FLEET_DASHBOARD_"
ENV_FILE_NAME = "settings.env"

DEFAULT_LOW_DISK_SPACE_GB = 32
DEFAULT_SOFTWARE_PAGE_SIZE = 8
DEFAULT_SOFTWARE_STALE_SECONDS = 30.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _config_dir() -> Path:
    path = Path(user_config_dir(APP_NAME, roaming=True))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_dir() -> Path:
    return _config_dir()


def cache_dir() -> Path:
    return _cache_dir()


def log_dir() -> Path:
    override = os.getenv(f"{ENV_PREFIX}LOG_DIR")
    path = Path(override).expanduser() if override else cache_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_file_path(explicit: Path | None) -> Path:
    if explicit is not None:
        return explicit
    return _config_dir() / ENV_FILE_NAME


@dataclass(slots=True)
class Settings:
    """Connection details for the Fleet server plus dashboard tuning knobs.

    ``low_disk_space_gb`` is the premium low-disk threshold sent with the host
    summary request; the server accepts values between 1 and 100.
    """

    server_url: str | None = None
    api_token: str | None = None
    verify_tls: bool = True
    low_disk_space_gb: int = DEFAULT_LOW_DISK_SPACE_GB
    software_page_size: int = DEFAULT_SOFTWARE_PAGE_SIZE
    software_stale_seconds: float = DEFAULT_SOFTWARE_STALE_SECONDS

    def __post_init__(self) -> None:
        if not 1 <= self.low_disk_space_gb <= 100:
            raise ValueError(
                f"low_disk_space_gb must be between 1 and 100, got {self.low_disk_space_gb}"
            )
        if self.software_page_size < 1:
            raise ValueError("software_page_size must be positive")
        if self.software_stale_seconds < 0:
            raise ValueError("software_stale_seconds cannot be negative")

    @property
    def is_configured(self) -> bool:
        """True when the server URL and API token are both set."""
        return bool(self.server_url and self.api_token)

    @property
    def api_base_url(self) -> str:
        if not self.server_url:
            raise ValueError("Fleet server URL is not configured")
        return f"{self.server_url.rstrip('/')}/api/latest/fleet"


class SettingsManager:
    """Load and persist dashboard settings with environment overrides."""

    def __init__(self, env_file: Path | None = None) -> None:
        self._env_file = _env_file_path(env_file)

    @property
    def env_file(self) -> Path:
        return self._env_file

    def load(self) -> Settings:
        """Load settings from environment, falling back to persisted file."""
        load_dotenv(self._env_file, override=False)

        overrides: dict[str, object] = {}
        verify = self._get_bool("VERIFY_TLS")
        if verify is not None:
            overrides["verify_tls"] = verify
        low_disk = self._get_int("LOW_DISK_SPACE_GB")
        if low_disk is not None:
            overrides["low_disk_space_gb"] = low_disk
        page_size = self._get_int("SOFTWARE_PAGE_SIZE")
        if page_size is not None:
            overrides["software_page_size"] = page_size
        stale = self._get_float("SOFTWARE_STALE_SECONDS")
        if stale is not None:
            overrides["software_stale_seconds"] = stale

        return Settings(
            server_url=self._get_env("SERVER_URL"),
            api_token=self._get_env("API_TOKEN"),
            **overrides,  # type: ignore[arg-type]
        )

    def save(self, settings: Settings) -> None:
        """Persist settings to the managed env file."""
        self._env_file.parent.mkdir(parents=True, exist_ok=True)
        content = [
            f"{ENV_PREFIX}SERVER_URL={settings.server_url or ''}",
            f"{ENV_PREFIX}API_TOKEN={settings.api_token or ''}",
            f"{ENV_PREFIX}VERIFY_TLS={'true' if settings.verify_tls else 'false'}",
            f"{ENV_PREFIX}LOW_DISK_SPACE_GB={settings.low_disk_space_gb}",
            f"{ENV_PREFIX}SOFTWARE_PAGE_SIZE={settings.software_page_size}",
            f"{ENV_PREFIX}SOFTWARE_STALE_SECONDS={settings.software_stale_seconds}",
        ]
        self._env_file.write_text("\n".join(content) + "\n", encoding="utf-8")

    def _get_env(self, name: str) -> str | None:
        return os.getenv(f"{ENV_PREFIX}{name}") or None

    def _get_int(self, name: str) -> int | None:
        raw = self._get_env(name)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc

    def _get_float(self, name: str) -> float | None:
        raw = self._get_env(name)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc

    def _get_bool(self, name: str) -> bool | None:
        raw = self._get_env(name)
        if raw is None:
            return None
        lowered = raw.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


__all__ = [
    "DEFAULT_LOW_DISK_SPACE_GB",
    "DEFAULT_SOFTWARE_PAGE_SIZE",
    "DEFAULT_SOFTWARE_STALE_SECONDS",
    "Settings",
    "SettingsManager",
    "cache_dir",
    "config_dir",
    "log_dir",
]
