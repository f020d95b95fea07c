"""Tests for configuration loading and models."""

import pytest
from pydantic import ValidationError

from chime.config.loader import get_default_config, load_config
from chime.config.models import (
    ChimeConfig,
    ConfigError,
    LoggingConfig,
    SchedulerConfig,
    TaskConfig,
)
from chime.config.paths import ENV_VAR, get_chime_home, get_config_path, get_logs_path


class TestSchedulerConfig:
    """Tests for SchedulerConfig model."""

    def test_defaults(self):
        config = SchedulerConfig()
        assert config.heartbeat_interval == 60
        assert config.join_timeout == 2.0
        assert config.thread_name == "chime-tick-driver"

    def test_heartbeat_must_be_positive(self):
        with pytest.raises(ValidationError):
            SchedulerConfig(heartbeat_interval=0)


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.log_to_file is False
        assert config.retention_days == 7

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")


class TestTaskConfig:
    """Tests for TaskConfig model."""

    def test_schedule_normalized(self):
        config = TaskConfig(target="myapp.jobs:cleanup", schedule="* * * * */5")
        assert config.schedule == "* * * * */5 0"
        assert config.enabled is True

    def test_default_schedule(self):
        assert TaskConfig(target="jobs:run").schedule == "* * * * * 0"

    def test_invalid_schedule(self):
        with pytest.raises(ValidationError) as exc_info:
            TaskConfig(target="jobs:run", schedule="* * * *")
        assert "Unable to parse schedule" in str(exc_info.value)

    @pytest.mark.parametrize("target", ["jobs", "jobs:", ":run", "jobs:run:extra", "1jobs:run"])
    def test_invalid_target(self, target):
        with pytest.raises(ValidationError):
            TaskConfig(target=target)


class TestChimeConfig:
    """Tests for the root config model."""

    def test_empty(self):
        config = ChimeConfig()
        assert config.tasks == {}
        assert config.list_tasks() == []

    def test_get_task(self):
        config = ChimeConfig(tasks={"ping": TaskConfig(target="jobs:ping")})
        assert config.get_task("ping").target == "jobs:ping"

    def test_get_unknown_task(self):
        config = ChimeConfig(tasks={"ping": TaskConfig(target="jobs:ping")})
        with pytest.raises(ConfigError) as exc_info:
            config.get_task("pong")
        assert "ping" in str(exc_info.value)


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_from_path(self, config_file):
        config = load_config(config_file)
        assert config.logging.level == "DEBUG"
        assert config.scheduler.heartbeat_interval == 30
        assert config.list_tasks() == ["nightly", "ping"]
        assert config.tasks["ping"].schedule == "* * * * * 0"
        assert config.tasks["nightly"].enabled is False

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_no_config_anywhere(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "chime.config.loader._get_default_config_paths",
            lambda: [tmp_path / "nope.toml"],
        )
        with pytest.raises(FileNotFoundError) as exc_info:
            load_config()
        assert "No config file found" in str(exc_info.value)

    def test_finds_config_in_chime_home(self, config_toml_content, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        home = get_chime_home()
        home.mkdir(parents=True)
        (home / "config.toml").write_text(config_toml_content)

        config = load_config()
        assert "ping" in config.tasks

    def test_env_overrides_log_level(self, config_file, monkeypatch):
        monkeypatch.setenv("CHIME_LOG_LEVEL", "warning")
        assert load_config(config_file).logging.level == "WARNING"

    def test_invalid_task_schedule(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[tasks.bad]\ntarget = "jobs:run"\nschedule = "* *"\n')
        with pytest.raises(ValidationError):
            load_config(path)

    def test_default_config(self):
        config = get_default_config()
        assert config.tasks == {}
        assert config.logging.level == "INFO"


class TestPaths:
    """Tests for path helpers."""

    def test_home_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(ENV_VAR, str(tmp_path / "custom"))
        get_chime_home.cache_clear()
        assert get_chime_home() == (tmp_path / "custom").resolve()
        assert get_config_path() == (tmp_path / "custom").resolve() / "config.toml"
        assert get_logs_path() == (tmp_path / "custom").resolve() / "logs"
