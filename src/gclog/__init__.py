"""
gclog - leveled logging with time-based file rotation.

Usage from Python:
    import gclog

    gclog.init_log_file("./app.log")
    gclog.set_slice_interval(timedelta(hours=1))
    gclog.notice("listening on port %d", 8080)

The module functions act on a default GcLogger created on first use.
Components that want their own instance (tests, embedded services) build a
GcLogger directly and pass it around.

Background rotation and signal-driven level control run inside a LogDaemon:
    await LogDaemon(get_config(), service=gclog.get_logger()).start()
"""

from datetime import timedelta
from typing import Any, Optional, Union

from gclog.levels import LogLevel
from gclog.rotation import RotationPolicy, RotationScheduler
from gclog.writer import GcLogger

__all__ = [
    "GcLogger",
    "LogLevel",
    "RotationPolicy",
    "RotationScheduler",
    "get_logger",
    "reset_logger",
    "init_log_file",
    "close_file",
    "set_slice_interval",
    "set_storage_time",
    "set_level",
    "level_up",
    "level_down",
    "verbose",
    "debug",
    "info",
    "notice",
    "warning",
    "error",
]

# Default service instance
_logger: Optional[GcLogger] = None


def get_logger() -> GcLogger:
    """Get the default GcLogger (created on first use)."""
    global _logger
    if _logger is None:
        _logger = GcLogger()
    return _logger


def reset_logger(service: Optional[GcLogger] = None) -> GcLogger:
    """
    Replace the default GcLogger, closing the old one's file.

    Useful for testing, or to install an instance built from configuration.
    """
    global _logger
    if _logger is not None:
        _logger.close_file()
    _logger = service or GcLogger()
    return _logger


def init_log_file(path: str) -> None:
    get_logger().init_log_file(path)


def close_file() -> None:
    get_logger().close_file()


def set_slice_interval(interval: timedelta) -> None:
    get_logger().set_slice_interval(interval)


def set_storage_time(storage_time: timedelta) -> None:
    get_logger().set_storage_time(storage_time)


def set_level(level: Union[LogLevel, int]) -> bool:
    return get_logger().set_level(level)


def level_up() -> Optional[LogLevel]:
    return get_logger().level_up()


def level_down() -> Optional[LogLevel]:
    return get_logger().level_down()


# Leveled entry points; stacklevel=2 attributes the line to our caller.


def verbose(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.VERBOSE, msg, *args, stacklevel=2)


def debug(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.DEBUG, msg, *args, stacklevel=2)


def info(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.INFO, msg, *args, stacklevel=2)


def notice(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.NOTICE, msg, *args, stacklevel=2)


def warning(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.WARNING, msg, *args, stacklevel=2)


def error(msg: str, *args: Any) -> None:
    get_logger().log(LogLevel.ERROR, msg, *args, stacklevel=2)
