"""Collaborators the scheduler calls into: a clock and a dispatcher."""

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol


class Clock(Protocol):
    """Source of the current time. Must return an aware UTC datetime."""

    def now(self) -> datetime: ...


class Dispatcher(Protocol):
    """Runs a body outside the calling thread, fire-and-forget."""

    def dispatch(self, body: Callable[[], Any], *, name: str) -> None: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class ThreadDispatcher:
    """Starts one daemon thread per run so no run can block another."""

    def __init__(self, thread_prefix: str = "chime-task") -> None:
        self._thread_prefix = thread_prefix

    def dispatch(self, body: Callable[[], Any], *, name: str) -> None:
        thread = threading.Thread(
            target=body,
            name=f"{self._thread_prefix}-{name}",
            daemon=True,
        )
        thread.start()
