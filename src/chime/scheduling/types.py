"""Scheduling types.

Public types:
- ScheduleField: Wildcard | Exact | AnyOf | Step, decided once at parse time
- Schedule: Six parsed fields plus the normalized expression
- TaskDescriptor: What a caller registers (run body + schedule string)
- Task: A validated, registered task
- ExecutionState: Per-task bookkeeping owned by the execution guard
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_SCHEDULE = "* * * * * 0"


class FieldName(str, Enum):
    """Calendar components, ordered coarse to fine."""

    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


FIELD_ORDER: tuple[FieldName, ...] = tuple(FieldName)


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class ScheduleParseError(SchedulerError, ValueError):
    """Unable to parse a schedule expression."""

    def __init__(self, message: str, *, field: str, value: Any = None) -> None:
        super().__init__(f"Unable to parse schedule ({field}): {message}")
        self.field = field
        self.value = value


class InvalidTaskError(SchedulerError, ValueError):
    """Task descriptor is missing a callable run body."""


class DuplicateTaskError(SchedulerError, ValueError):
    """A task with this name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unable to add already registered task: {name}")
        self.name = name


@dataclass(frozen=True)
class Wildcard:
    """Matches any value (``*``)."""

    def matches(self, observed: int, *, offset: int = 0) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class Exact:
    """Matches a single value."""

    value: int

    def matches(self, observed: int, *, offset: int = 0) -> bool:
        return observed == self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class AnyOf:
    """Matches when any listed value equals the observed one."""

    values: frozenset[int]

    def matches(self, observed: int, *, offset: int = 0) -> bool:
        return observed in self.values

    def __str__(self) -> str:
        return ",".join(str(v) for v in sorted(self.values))


@dataclass(frozen=True)
class Step:
    """Matches every Nth unit (``*/N``).

    ``offset`` is added to the observed value before the modulus; the
    matcher passes 1 for the month so the step applies to one-based months.
    """

    divisor: int

    def matches(self, observed: int, *, offset: int = 0) -> bool:
        return (observed + offset) % self.divisor == 0

    def __str__(self) -> str:
        return f"*/{self.divisor}"


ScheduleField = Wildcard | Exact | AnyOf | Step


@dataclass(frozen=True)
class Schedule:
    """A parsed schedule: exactly six fields, year through second."""

    expression: str
    fields: tuple[ScheduleField, ...]

    def __post_init__(self) -> None:
        if len(self.fields) != len(FIELD_ORDER):
            raise ValueError(
                f"Schedule needs {len(FIELD_ORDER)} fields, got {len(self.fields)}"
            )

    def __iter__(self) -> Iterator[tuple[FieldName, ScheduleField]]:
        return iter(zip(FIELD_ORDER, self.fields, strict=True))

    def __getitem__(self, name: FieldName | str) -> ScheduleField:
        return self.fields[FIELD_ORDER.index(FieldName(name))]

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class TaskDescriptor:
    """What a caller hands to the registry.

    Example:
        TaskDescriptor(run=send_report, schedule="* * * 9 0 0")
    """

    run: Callable[[], Any]
    schedule: str = DEFAULT_SCHEDULE

    def __post_init__(self) -> None:
        if self.run is None or not callable(self.run):
            raise InvalidTaskError(
                "Task descriptor run must not be empty and has to be callable"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaskDescriptor":
        """Build a descriptor from the ``{"run": ..., "schedule": ...}`` shape."""
        schedule = data.get("schedule")
        if schedule is None or schedule == "":
            schedule = DEFAULT_SCHEDULE
        return cls(run=data.get("run"), schedule=schedule)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Task:
    """A registered task. Replaced as a whole on update."""

    name: str
    descriptor: TaskDescriptor
    schedule: Schedule

    @property
    def run(self) -> Callable[[], Any]:
        return self.descriptor.run


@dataclass
class ExecutionState:
    """Per-task bookkeeping: the last fired slot and the in-flight marker."""

    last_fired_slot: datetime | None = None
    running_since: datetime | None = None
    run_count: int = field(default=0)

    @property
    def is_running(self) -> bool:
        return self.running_since is not None
