from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

# Must be set before the package configures its default log sink.
os.environ.setdefault("FLEET_DASHBOARD_LOG_DIR", tempfile.mkdtemp(prefix="fleet-dashboard-logs-"))

from fleet_dashboard.config import Settings  # noqa: E402
from fleet_dashboard.utils import LoggingOptions, configure_logging  # noqa: E402
from tests.factories import make_settings  # noqa: E402
from tests.stubs import StubFleetAPI  # noqa: E402


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Route log files into the test's temp directory."""

    monkeypatch.setenv("FLEET_DASHBOARD_LOG_DIR", str(tmp_path / "logs"))
    log_path = configure_logging(
        LoggingOptions(level="DEBUG", console=False, log_path=tmp_path / "logs" / "test.log")
    )
    yield log_path


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def stub_api() -> StubFleetAPI:
    return StubFleetAPI()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def navigations() -> list[str]:
    return []
