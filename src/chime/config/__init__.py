"""Configuration module."""

from chime.config.loader import get_default_config, load_config
from chime.config.models import (
    ChimeConfig,
    ConfigError,
    LoggingConfig,
    SchedulerConfig,
    TaskConfig,
)
from chime.config.paths import get_chime_home, get_config_path, get_logs_path

__all__ = [
    "ChimeConfig",
    "ConfigError",
    "LoggingConfig",
    "SchedulerConfig",
    "TaskConfig",
    "get_chime_home",
    "get_config_path",
    "get_default_config",
    "get_logs_path",
    "load_config",
]
