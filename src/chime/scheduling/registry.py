"""Task registry: name -> validated task."""

import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any

from chime.scheduling.expression import parse_schedule
from chime.scheduling.types import (
    DuplicateTaskError,
    InvalidTaskError,
    Task,
    TaskDescriptor,
)

logger = logging.getLogger(__name__)

Descriptor = TaskDescriptor | Mapping[str, Any]


def build_task(name: str, descriptor: Descriptor) -> Task:
    """Validate a descriptor and build the Task for it.

    Raises:
        InvalidTaskError: If the name is empty or the run body is not callable.
        ScheduleParseError: If the schedule cannot be parsed.
    """
    if not isinstance(name, str) or not name:
        raise InvalidTaskError("Task name must be a non-empty string")
    if isinstance(descriptor, TaskDescriptor):
        desc = descriptor
    elif isinstance(descriptor, Mapping):
        desc = TaskDescriptor.from_dict(descriptor)
    else:
        raise InvalidTaskError(
            f"Task descriptor must be a TaskDescriptor or a mapping, "
            f"got {type(descriptor).__name__}"
        )
    return Task(name=name, descriptor=desc, schedule=parse_schedule(desc.schedule))


class TaskRegistry:
    """Keyed store of tasks with duplicate-name rejection.

    Validation happens before the map is touched, so a failed add or update
    leaves the registry as it was.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()

    def add(self, name: str, descriptor: Descriptor) -> Task:
        task = build_task(name, descriptor)
        with self._lock:
            if name in self._tasks:
                raise DuplicateTaskError(name)
            self._tasks[name] = task
        logger.info(
            "task_added",
            extra={"task.name": name, "task.schedule": task.schedule.expression},
        )
        return task

    def update(self, name: str, descriptor: Descriptor) -> Task:
        task = build_task(name, descriptor)
        with self._lock:
            self._tasks[name] = task
        logger.info(
            "task_updated",
            extra={"task.name": name, "task.schedule": task.schedule.expression},
        )
        return task

    def remove(self, name: str) -> Task | None:
        with self._lock:
            task = self._tasks.pop(name, None)
        if task is not None:
            logger.info("task_removed", extra={"task.name": name})
        return task

    def get(self, name: str) -> Task | None:
        with self._lock:
            return self._tasks.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._tasks)

    def snapshot(self) -> list[Task]:
        """Copy of the registered tasks, safe to iterate while others mutate."""
        with self._lock:
            return list(self._tasks.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tasks

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.snapshot())
