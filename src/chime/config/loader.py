"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from chime.config.models import ChimeConfig
from chime.config.paths import get_config_path

LOG_LEVEL_ENV_VAR = "CHIME_LOG_LEVEL"


def _get_default_config_paths() -> list[Path]:
    """Config locations in search order: cwd, CHIME_HOME, system-wide."""
    return [
        Path("config.toml"),
        get_config_path(),
        Path("/etc/chime/config.toml"),
    ]


def _find_config_file(path: Path | None) -> Path:
    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.exists():
            raise FileNotFoundError(f"Config file not found: {explicit}")
        return explicit

    candidates = _get_default_config_paths()
    for candidate in candidates:
        if candidate.expanduser().exists():
            return candidate.expanduser()
    searched = ", ".join(str(p) for p in candidates)
    raise FileNotFoundError(f"No config file found. Searched: {searched}")


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    if level := os.environ.get(LOG_LEVEL_ENV_VAR):
        config.setdefault("logging", {})["level"] = level.upper()
    return config


def load_config(path: Path | None = None) -> ChimeConfig:
    """Load and validate a TOML config file.

    Without ``path`` the default locations are searched in order and the
    first existing file wins.

    Raises:
        FileNotFoundError: No config file exists.
        tomllib.TOMLDecodeError: The file is not valid TOML.
        pydantic.ValidationError: The file does not match ChimeConfig.
    """
    config_path = _find_config_file(path)
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    return ChimeConfig.model_validate(_apply_env_overrides(raw))


def get_default_config() -> ChimeConfig:
    """Configuration with no tasks, honouring environment overrides."""
    return ChimeConfig.model_validate(_apply_env_overrides({}))
