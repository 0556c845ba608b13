"""Tests for the module-level functions acting on the default GcLogger."""

import inspect
import io
from datetime import timedelta

import pytest

import gclog
from gclog import GcLogger, LogLevel


@pytest.fixture
def default_logger():
    """Install a buffered default logger, restoring a fresh one afterwards."""
    buffer = io.StringIO()
    service = gclog.reset_logger(GcLogger(console=buffer))
    yield service, buffer
    gclog.reset_logger()


def test_get_logger_returns_same_instance(default_logger):
    service, _ = default_logger
    assert gclog.get_logger() is service


def test_module_entry_points_report_caller(default_logger):
    _, buffer = default_logger

    lineno = inspect.currentframe().f_lineno + 1
    gclog.notice("hello %s", "world")

    line = buffer.getvalue().rstrip("\n")
    assert line.endswith("[NOTICE] hello world")
    assert f"test_module_api.py:{lineno}:" in line


def test_module_level_control(default_logger):
    service, buffer = default_logger

    gclog.set_level(LogLevel.WARNING)
    gclog.info("dropped")
    gclog.error("kept")
    assert "dropped" not in buffer.getvalue()
    assert "[ERROR] kept" in buffer.getvalue()

    assert gclog.level_down() is LogLevel.NOTICE
    assert gclog.level_up() is LogLevel.WARNING
    assert service.level is LogLevel.WARNING


def test_all_levels_exported(default_logger):
    _, buffer = default_logger
    gclog.set_level(LogLevel.VERBOSE)

    gclog.verbose("v")
    gclog.debug("d")
    gclog.info("i")
    gclog.notice("n")
    gclog.warning("w")
    gclog.error("e")

    tags = [line.split(": ", 1)[1].split(" ")[0] for line in buffer.getvalue().splitlines()]
    assert tags == ["[VERB]", "[DEBUG]", "[INFO]", "[NOTICE]", "[WARNING]", "[ERROR]"]


def test_module_file_and_policy(default_logger, log_path):
    service, _ = default_logger

    gclog.init_log_file(log_path)
    gclog.set_slice_interval(timedelta(hours=6))
    gclog.set_storage_time(timedelta(days=-14))
    gclog.notice("to file")
    gclog.close_file()

    with open(log_path, encoding="utf-8") as f:
        assert f.read().rstrip("\n").endswith("[NOTICE] to file")
    assert service.policy.slice_interval == timedelta(hours=6)
    assert service.policy.storage_time == timedelta(days=14)
    assert service.target.active is False


def test_reset_logger_closes_previous(default_logger, log_path):
    service, _ = default_logger
    service.init_log_file(log_path)

    replacement = gclog.reset_logger()

    assert service.target.active is False
    assert replacement is not service
