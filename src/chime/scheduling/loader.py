"""Build a scheduler from configuration."""

import importlib
import logging
from collections.abc import Callable
from typing import Any

from chime.config.models import ChimeConfig, ConfigError
from chime.scheduling.driver import TickDriver
from chime.scheduling.runtime import Clock, Dispatcher, SystemClock
from chime.scheduling.scheduler import Scheduler
from chime.scheduling.types import TaskDescriptor

logger = logging.getLogger(__name__)


def resolve_target(target: str) -> Callable[[], Any]:
    """Import ``package.module:attr`` and return the callable it names.

    Raises:
        ConfigError: If the module or attribute is missing or not callable.
    """
    module_name, _, attr_path = target.partition(":")
    if not module_name or not attr_path:
        raise ConfigError(f"Invalid task target {target!r}, expected 'module:callable'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module for target {target!r}: {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ConfigError(
                f"Target {target!r} not found: {module_name!r} has no {attr!r}"
            ) from None

    if not callable(obj):
        raise ConfigError(f"Target {target!r} is not callable")
    return obj


def create_scheduler(
    config: ChimeConfig,
    *,
    clock: Clock | None = None,
    dispatcher: Dispatcher | None = None,
) -> Scheduler:
    """Create a scheduler with every enabled configured task registered."""
    clock = clock or SystemClock()
    driver = TickDriver(
        clock=clock,
        heartbeat_interval=config.scheduler.heartbeat_interval,
        join_timeout=config.scheduler.join_timeout,
        thread_name=config.scheduler.thread_name,
    )
    scheduler = Scheduler(clock=clock, dispatcher=dispatcher, driver=driver)

    for name in config.list_tasks():
        task_config = config.tasks[name]
        if not task_config.enabled:
            logger.info("task_disabled", extra={"task.name": name})
            continue
        scheduler.add_task(
            name,
            TaskDescriptor(
                run=resolve_target(task_config.target),
                schedule=task_config.schedule,
            ),
        )

    return scheduler
