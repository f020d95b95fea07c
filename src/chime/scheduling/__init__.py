"""Scheduling subsystem: cron-style in-process task execution.

Public API:
- Scheduler: Register tasks, evaluate them, start/stop the driver
- TaskRegistry: Name -> validated task
- ExecutionGuard: At most one run per slot, no overlapping runs
- TickDriver: Background thread ticking on every second boundary
- parse_schedule / due_now / already_fired_this_second: the matching core

Types:
- Schedule, ScheduleField (Wildcard, Exact, AnyOf, Step)
- Task, TaskDescriptor, ExecutionState
"""

from chime.scheduling.driver import DriverState, TickDriver, compute_delay
from chime.scheduling.expression import check_schedule_element, parse_schedule
from chime.scheduling.guard import ExecutionGuard
from chime.scheduling.matcher import already_fired_this_second, due_now
from chime.scheduling.registry import TaskRegistry
from chime.scheduling.runtime import Clock, Dispatcher, SystemClock, ThreadDispatcher
from chime.scheduling.scheduler import Scheduler
from chime.scheduling.types import (
    DEFAULT_SCHEDULE,
    AnyOf,
    DuplicateTaskError,
    Exact,
    ExecutionState,
    FieldName,
    InvalidTaskError,
    Schedule,
    ScheduleField,
    ScheduleParseError,
    SchedulerError,
    Step,
    Task,
    TaskDescriptor,
    Wildcard,
)

__all__ = [
    "DEFAULT_SCHEDULE",
    "AnyOf",
    "Clock",
    "Dispatcher",
    "DriverState",
    "DuplicateTaskError",
    "Exact",
    "ExecutionGuard",
    "ExecutionState",
    "FieldName",
    "InvalidTaskError",
    "Schedule",
    "ScheduleField",
    "ScheduleParseError",
    "Scheduler",
    "SchedulerError",
    "Step",
    "SystemClock",
    "Task",
    "TaskDescriptor",
    "TaskRegistry",
    "ThreadDispatcher",
    "TickDriver",
    "Wildcard",
    "already_fired_this_second",
    "check_schedule_element",
    "compute_delay",
    "due_now",
    "parse_schedule",
]
