"""Scheduler: registry + guard + driver behind one chainable API."""

import logging
import threading
from collections.abc import Callable
from typing import Any

from chime.scheduling.driver import TickDriver
from chime.scheduling.guard import ExecutionGuard
from chime.scheduling.registry import Descriptor, TaskRegistry
from chime.scheduling.runtime import Clock, Dispatcher, SystemClock, ThreadDispatcher
from chime.scheduling.types import DEFAULT_SCHEDULE, Task, TaskDescriptor

logger = logging.getLogger(__name__)


class Scheduler:
    """Cron-style in-process scheduler.

    Example:
        scheduler = Scheduler()

        @scheduler.task("cleanup", schedule="* * * * */5")
        def cleanup():
            ...

        scheduler.add_task("report", {"run": send_report, "schedule": "* * * 9 0 0"})
        scheduler.start()

    Every registered task is evaluated once per tick. A task fires when its
    schedule matches, it has not fired in the current second and its previous
    run has finished. Runs are handed to the dispatcher and never block the
    driver.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        dispatcher: Dispatcher | None = None,
        driver: TickDriver | None = None,
        registry: TaskRegistry | None = None,
        guard: ExecutionGuard | None = None,
    ):
        self._clock = clock or SystemClock()
        self._dispatcher = dispatcher or ThreadDispatcher()
        self._driver = driver or TickDriver(clock=self._clock)
        self._registry = registry or TaskRegistry()
        self._guard = guard or ExecutionGuard()
        # Serializes the fire decision with remove_task().
        self._membership_lock = threading.Lock()

    @property
    def registry(self) -> TaskRegistry:
        return self._registry

    @property
    def guard(self) -> ExecutionGuard:
        return self._guard

    @property
    def driver(self) -> TickDriver:
        return self._driver

    @property
    def is_running(self) -> bool:
        return self._driver.is_running

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_task(self, name: str, descriptor: Descriptor) -> "Scheduler":
        """Register a new task. Raises DuplicateTaskError if the name is taken."""
        self._registry.add(name, descriptor)
        return self

    def update_task(self, name: str, descriptor: Descriptor) -> "Scheduler":
        """Register or replace a task. Its execution state is kept."""
        self._registry.update(name, descriptor)
        return self

    def remove_task(self, name: str) -> "Scheduler":
        """Remove a task. An in-flight run is left to finish on its own."""
        with self._membership_lock:
            self._registry.remove(name)
            self._guard.forget(name)
        return self

    def task(
        self, name: str | None = None, *, schedule: str = DEFAULT_SCHEDULE
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
        """Decorator to register a function as a task."""

        def decorator(func: Callable[[], Any]) -> Callable[[], Any]:
            self.add_task(
                name or func.__name__, TaskDescriptor(run=func, schedule=schedule)
            )
            return func

        return decorator

    def get_task(self, name: str) -> Task | None:
        return self._registry.get(name)

    def list_tasks(self) -> list[Task]:
        return sorted(self._registry.snapshot(), key=lambda t: t.name)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def check_runnable_tasks(self) -> "Scheduler":
        """Evaluate every task once against the current time.

        Safe to call ad hoc, e.g. right after adding a task: nothing fires
        twice within the same second.
        """
        now = self._clock.now()
        for name in self._registry.names():
            try:
                with self._membership_lock:
                    task = self._registry.get(name)
                    if task is None:
                        continue
                    state = self._guard.try_start(name, task.schedule, now)
            except Exception as e:
                logger.error(
                    "task_evaluation_failed",
                    extra={"task.name": name, "error.message": str(e)},
                    exc_info=True,
                )
                continue
            if state is None:
                continue

            try:
                self._dispatcher.dispatch(
                    self._guard.wrap(task.name, task.run, state), name=task.name
                )
            except Exception as e:
                # Nothing will run, so nothing will clear the flag.
                self._guard.mark_finished(state)
                logger.error(
                    "task_dispatch_failed",
                    extra={"task.name": task.name, "error.message": str(e)},
                    exc_info=True,
                )
                continue

            logger.info(
                "task_dispatched",
                extra={
                    "task.name": task.name,
                    "task.schedule": task.schedule.expression,
                    "task.slot": state.last_fired_slot.isoformat()
                    if state.last_fired_slot
                    else None,
                },
            )
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "Scheduler":
        if not self._driver.is_running:
            self._driver.start(self.check_runnable_tasks)
            logger.info("scheduler_started", extra={"task.count": len(self._registry)})
        return self

    def stop(self) -> "Scheduler":
        if self._driver.is_running:
            self._driver.stop()
            logger.info("scheduler_stopped")
        return self

    def get_stats(self) -> dict[str, Any]:
        return {
            "total": len(self._registry),
            "running": len(self._guard.running()),
            "driver": self._driver.state.value,
            "ticks": self._driver.tick_count,
        }
