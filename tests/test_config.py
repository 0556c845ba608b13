"""Tests for GcLogConfig environment loading."""

from datetime import timedelta

import pytest

from gclog.levels import LogLevel
from gclog.utils import config as config_module
from gclog.utils.config import GcLogConfig, get_config, reload_config

_VARS = [
    "GCLOG_FILE",
    "GCLOG_LEVEL",
    "GCLOG_SLICE_INTERVAL",
    "GCLOG_STORAGE_TIME",
    "GCLOG_POLL_INTERVAL",
    "GCLOG_STRICT_RETENTION",
    "GCLOG_ADMIN_ENABLED",
    "GCLOG_ADMIN_HOST",
    "GCLOG_ADMIN_PORT",
    "GCLOG_ADMIN_TOKEN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_config", None)


class TestGcLogConfig:
    def test_defaults(self):
        config = GcLogConfig()

        assert config.log_file is None
        assert config.log_level is LogLevel.NOTICE
        assert config.slice_interval == timedelta(days=1)
        assert config.storage_time == timedelta(days=7)
        assert config.poll_interval == 30.0
        assert config.strict_retention is False
        assert config.admin_enabled is False
        assert config.admin_port == 8766
        assert config.admin_token is None

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GCLOG_FILE", str(tmp_path / "app.log"))
        monkeypatch.setenv("GCLOG_LEVEL", "debug")
        monkeypatch.setenv("GCLOG_SLICE_INTERVAL", "1h")
        monkeypatch.setenv("GCLOG_STORAGE_TIME", "2 days")
        monkeypatch.setenv("GCLOG_POLL_INTERVAL", "5s")
        monkeypatch.setenv("GCLOG_STRICT_RETENTION", "true")
        monkeypatch.setenv("GCLOG_ADMIN_ENABLED", "yes")
        monkeypatch.setenv("GCLOG_ADMIN_PORT", "9000")
        monkeypatch.setenv("GCLOG_ADMIN_TOKEN", "secret")

        config = GcLogConfig()

        assert config.log_file == str(tmp_path / "app.log")
        assert config.log_level is LogLevel.DEBUG
        assert config.slice_interval == timedelta(hours=1)
        assert config.storage_time == timedelta(days=2)
        assert config.poll_interval == 5.0
        assert config.strict_retention is True
        assert config.admin_enabled is True
        assert config.admin_port == 9000
        assert config.admin_token == "secret"

    def test_log_file_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("GCLOG_FILE", "~/logs/app.log")

        assert GcLogConfig().log_file == str((tmp_path / "logs" / "app.log").resolve())

    def test_negative_storage_time_normalized(self, monkeypatch):
        monkeypatch.setenv("GCLOG_STORAGE_TIME", "-3d")
        assert GcLogConfig().storage_time == timedelta(days=3)

    def test_invalid_level(self, monkeypatch):
        monkeypatch.setenv("GCLOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="Unknown log level"):
            GcLogConfig()

    def test_invalid_duration(self, monkeypatch):
        monkeypatch.setenv("GCLOG_SLICE_INTERVAL", "daily")
        with pytest.raises(ValueError, match="Could not parse duration"):
            GcLogConfig()

    def test_repr(self):
        text = repr(GcLogConfig())
        assert "slice_interval=1d" in text
        assert "storage_time=1w" in text


class TestSingleton:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_picks_up_changes(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("GCLOG_LEVEL", "warning")

        second = reload_config()

        assert second is not first
        assert second.log_level is LogLevel.WARNING
        assert get_config() is second
