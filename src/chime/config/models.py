"""Configuration models using Pydantic."""

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from chime.scheduling.expression import parse_schedule
from chime.scheduling.types import DEFAULT_SCHEDULE, ScheduleParseError


_TARGET_RE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")


class SchedulerConfig(BaseModel):
    """Configuration for the tick driver."""

    # Ticks between heartbeat log lines (one tick per second)
    heartbeat_interval: int = Field(default=60, ge=1)
    # Seconds to wait for the driver thread on stop
    join_timeout: float = Field(default=2.0, ge=0)
    thread_name: str = "chime-tick-driver"


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False
    retention_days: int = Field(default=7, ge=1)


class TaskConfig(BaseModel):
    """A task declared in config.

    ``target`` points at a zero-argument callable as ``package.module:name``.
    """

    target: str
    schedule: str = DEFAULT_SCHEDULE
    enabled: bool = True

    @field_validator("target")
    @classmethod
    def _validate_target(cls, value: str) -> str:
        if not _TARGET_RE.match(value):
            raise ValueError(
                f"target must look like 'package.module:callable', got {value!r}"
            )
        return value

    @field_validator("schedule")
    @classmethod
    def _validate_schedule(cls, value: str) -> str:
        try:
            return parse_schedule(value).expression
        except ScheduleParseError as e:
            raise ValueError(str(e)) from None


class ConfigError(Exception):
    """Configuration error."""

    pass


class ChimeConfig(BaseModel):
    """Root configuration model."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tasks: dict[str, TaskConfig] = Field(default_factory=dict)

    def get_task(self, name: str) -> TaskConfig:
        """Get task config by name.

        Raises:
            ConfigError: If no task with that name is configured.
        """
        if name not in self.tasks:
            available = ", ".join(sorted(self.tasks.keys())) or "none"
            raise ConfigError(f"Unknown task '{name}'. Available: {available}")
        return self.tasks[name]

    def list_tasks(self) -> list[str]:
        """Sorted names of configured tasks."""
        return sorted(self.tasks.keys())
