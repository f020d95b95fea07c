"""Shared test fixtures and fakes."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from chime.scheduling import Scheduler, TickDriver

# =============================================================================
# Fakes
# =============================================================================


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.current = now or datetime(2014, 1, 1, 0, 0, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 1.0) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now


class RecordingDispatcher:
    """Dispatcher that holds bodies until the test runs them."""

    def __init__(self) -> None:
        self.dispatched: list[tuple[str, Callable[[], Any]]] = []

    def dispatch(self, body: Callable[[], Any], *, name: str) -> None:
        self.dispatched.append((name, body))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.dispatched]

    def run_all(self) -> None:
        pending, self.dispatched = self.dispatched, []
        for _, body in pending:
            body()


class InlineDispatcher:
    """Dispatcher that runs bodies on the calling thread."""

    def __init__(self) -> None:
        self.count = 0

    def dispatch(self, body: Callable[[], Any], *, name: str) -> None:
        self.count += 1
        body()


class FailingDispatcher:
    """Dispatcher that cannot start anything."""

    def dispatch(self, body: Callable[[], Any], *, name: str) -> None:
        raise RuntimeError("can't start new thread")


# =============================================================================
# Scheduler Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    """Clock fixed at 2014-01-01T00:00:00Z."""
    return FixedClock()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def scheduler(clock: FixedClock, dispatcher: RecordingDispatcher) -> Scheduler:
    """Scheduler on a fixed clock whose runs are held by the dispatcher."""
    return Scheduler(
        clock=clock,
        dispatcher=dispatcher,
        driver=TickDriver(clock=clock, join_timeout=1.0),
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config_toml_content() -> str:
    """Valid TOML config content."""
    return """
[logging]
level = "DEBUG"

[scheduler]
heartbeat_interval = 30

[tasks.ping]
target = "tests.task_targets:record_run"
schedule = "* * * * *"

[tasks.nightly]
target = "tests.task_targets:record_run"
schedule = "* * * 2 30 0"
enabled = false
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture(autouse=True)
def _isolate_chime_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point CHIME_HOME at a temp dir so tests never read ~/.chime."""
    from chime.config.paths import get_chime_home

    monkeypatch.setenv("CHIME_HOME", str(tmp_path / "chime-home"))
    monkeypatch.delenv("CHIME_LOG_LEVEL", raising=False)
    get_chime_home.cache_clear()
    yield
    get_chime_home.cache_clear()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
