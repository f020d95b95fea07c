"""Tick driver: wakes on every second boundary and runs a tick callback.

The driver owns one background thread and a stop event. Each wait is
recomputed from the live clock, so a slow tick delays only itself and drift
never accumulates.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from chime.scheduling.runtime import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 60  # ticks, ~1 min
DEFAULT_JOIN_TIMEOUT = 2.0


class DriverState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def compute_delay(now: datetime) -> float:
    """Seconds until the next whole second after ``now``, never negative."""
    return max(0.0, 1.0 - now.microsecond / 1_000_000)


class TickDriver:
    """Runs ``tick`` once per second on a background thread.

    Example:
        driver = TickDriver()
        driver.start(scheduler.check_runnable_tasks)
        ...
        driver.stop()

    Starting a running driver and stopping a stopped one are no-ops. A
    stopped driver can be started again.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        heartbeat_interval: int = DEFAULT_HEARTBEAT_INTERVAL,
        join_timeout: float = DEFAULT_JOIN_TIMEOUT,
        thread_name: str = "chime-tick-driver",
    ):
        self._clock = clock or SystemClock()
        self._heartbeat_interval = max(1, heartbeat_interval)
        self._join_timeout = join_timeout
        self._thread_name = thread_name
        self._state = DriverState.STOPPED
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._lifecycle_lock = threading.Lock()
        self._tick_count = 0

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is DriverState.RUNNING

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def start(self, tick: Callable[[], Any]) -> None:
        with self._lifecycle_lock:
            if self._state is DriverState.RUNNING:
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(tick, stop_event),
                name=self._thread_name,
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            self._state = DriverState.RUNNING
            thread.start()
        logger.info("tick_driver_started", extra={"thread.name": self._thread_name})

    def stop(self) -> None:
        with self._lifecycle_lock:
            if self._state is DriverState.STOPPED:
                return
            self._state = DriverState.STOPPED
            stop_event, thread = self._stop_event, self._thread
            self._stop_event = None
            self._thread = None
        if stop_event is not None:
            stop_event.set()
        # A tick callback may stop the driver from inside the loop thread.
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._join_timeout)
            if thread.is_alive():
                logger.warning(
                    "tick_driver_join_timeout",
                    extra={"thread.name": thread.name, "timeout": self._join_timeout},
                )
        logger.info("tick_driver_stopped", extra={"tick.count": self._tick_count})

    def _run_loop(self, tick: Callable[[], Any], stop_event: threading.Event) -> None:
        delay = 0.0
        while not stop_event.wait(delay):
            self._tick_count += 1
            if self._tick_count % self._heartbeat_interval == 0:
                logger.info(
                    "tick_driver_heartbeat", extra={"tick.count": self._tick_count}
                )
            try:
                tick()
            except Exception as e:
                logger.error(
                    "tick_failed", extra={"error.message": str(e)}, exc_info=True
                )
            delay = compute_delay(self._clock.now())
