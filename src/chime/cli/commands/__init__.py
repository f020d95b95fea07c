"""CLI command modules."""

from chime.cli.commands import config, schedule, tasks

__all__ = [
    "config",
    "schedule",
    "tasks",
]
