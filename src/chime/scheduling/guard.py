"""Execution guard: at most one run per slot, never two runs at once."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from chime.scheduling.matcher import (
    already_fired_this_second,
    due_now,
    to_utc,
    truncate_to_second,
)
from chime.scheduling.types import ExecutionState, Schedule

logger = logging.getLogger(__name__)


class ExecutionGuard:
    """Tracks the last fired slot and the in-flight marker of every task.

    The fire decision and the completion of a run are the only two writers
    of an ExecutionState. Both go through ``_lock`` so an ad hoc
    ``check_runnable_tasks()`` on a caller thread cannot race the driver.
    """

    def __init__(self) -> None:
        self._states: dict[str, ExecutionState] = {}
        self._lock = threading.Lock()
        self._finished = threading.Condition(self._lock)

    def should_fire(self, name: str, schedule: Schedule, now: datetime) -> bool:
        """Return True if the task is idle, due now and not fired this second."""
        with self._lock:
            return self._can_fire(self._states.get(name), schedule, now)

    def try_start(
        self, name: str, schedule: Schedule, now: datetime
    ) -> ExecutionState | None:
        """Atomically check ``should_fire`` and mark the task started.

        Returns:
            The task's ExecutionState when it should be dispatched, else None.
        """
        with self._lock:
            state = self._states.get(name)
            if not self._can_fire(state, schedule, now):
                return None
            if state is None:
                state = self._states[name] = ExecutionState()
            self._mark(state, now)
            return state

    def _can_fire(
        self, state: ExecutionState | None, schedule: Schedule, now: datetime
    ) -> bool:
        if state is not None and state.is_running:
            return False
        if not due_now(schedule, now):
            return False
        last_fired = state.last_fired_slot if state is not None else None
        return not already_fired_this_second(last_fired, now)

    def mark_started(self, name: str, now: datetime) -> ExecutionState:
        with self._lock:
            state = self._states.setdefault(name, ExecutionState())
            self._mark(state, now)
            return state

    def mark_finished(self, state: ExecutionState) -> None:
        """Clear the running flag of one specific run's state."""
        with self._lock:
            state.running_since = None
            self._finished.notify_all()

    def _mark(self, state: ExecutionState, now: datetime) -> None:
        state.running_since = to_utc(now)
        state.last_fired_slot = truncate_to_second(now)
        state.run_count += 1

    def wrap(
        self, name: str, body: Callable[[], Any], state: ExecutionState
    ) -> Callable[[], None]:
        """Wrap a run body so failures are logged and the flag always clears.

        The wrapper holds ``state`` itself rather than looking it up by name,
        so a run orphaned by ``forget`` never clears a newer task's state.
        """

        def run() -> None:
            logger.debug(f"Task {name} started")
            try:
                body()
            except Exception as e:
                logger.error(
                    "task_run_failed",
                    extra={"task.name": name, "error.message": str(e)},
                    exc_info=True,
                )
            else:
                logger.debug(f"Task {name} finished")
            finally:
                self.mark_finished(state)

        return run

    def forget(self, name: str) -> None:
        with self._lock:
            self._states.pop(name, None)
            self._finished.notify_all()

    def state(self, name: str) -> ExecutionState | None:
        with self._lock:
            return self._states.get(name)

    def running(self) -> list[str]:
        with self._lock:
            return [name for name, s in self._states.items() if s.is_running]

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no tracked run is in flight.

        Returns False if ``timeout`` elapsed first.
        """
        with self._finished:
            return self._finished.wait_for(
                lambda: not any(s.is_running for s in self._states.values()),
                timeout=timeout,
            )
