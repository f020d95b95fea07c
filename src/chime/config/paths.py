"""Centralized path management for chime.

All state (config, logs) is stored under a single base directory.
The base directory can be overridden with the CHIME_HOME environment variable.

Default locations:
- Linux/macOS: ~/.chime
- Windows: %USERPROFILE%\\.chime
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "CHIME_HOME"


@lru_cache(maxsize=1)
def get_chime_home() -> Path:
    """Get the base directory for all chime data.

    Resolution order:
    1. CHIME_HOME environment variable (if set)
    2. Platform default (~/.chime)

    Returns:
        Path to the chime home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".chime"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_chime_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the logs directory path."""
    return get_chime_home() / "logs"
