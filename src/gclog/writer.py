"""
GcLogger - the leveled logging service.

One instance owns the level threshold, the file target and the rotation
policy. Applications normally use the default instance through the module
functions in ``gclog``; tests build their own.

Output format (one line per call):
    2018/04/08 16:00:00 app.py:12: [NOTICE] hello
"""

import logging
from datetime import datetime, timedelta
from typing import IO, Any, Optional, Union

from gclog.file_target import Clock, FileTarget
from gclog.level_state import LevelState
from gclog.levels import LogLevel
from gclog.rotation import RotationPolicy

LINE_FORMAT = "%(asctime)s %(filename)s:%(lineno)d: %(tag)s%(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"

# Frames between the record builder and the caller of an entry point:
# findCaller -> _emit -> entry point -> caller
_CALLER_DEPTH = 3


class GcLogger:
    """
    Leveled logger with a rotating file sink and runtime-adjustable level.

    Example:
        >>> log = GcLogger()
        >>> log.init_log_file("./app.log")
        >>> log.notice("listening on port %d", 8080)
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NOTICE,
        policy: Optional[RotationPolicy] = None,
        clock: Clock = datetime.now,
        console: Optional[IO[str]] = None,
        name: str = "gclog",
    ):
        self.level_state = LevelState(level)
        self.policy = policy or RotationPolicy()
        self.clock = clock
        self.target = FileTarget(clock=clock, console=console, report=self._report)

        # Never registered with logging.getLogger(): only used to build records
        # (caller lookup, timestamps, %-args), it has no handlers.
        self._record_logger = logging.Logger(name)
        self._formatter = logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT)

    # ========================================================================
    # File target
    # ========================================================================

    def init_log_file(self, path: str) -> None:
        """
        Send output to ``path`` (appending, created if missing).

        Raises:
            OSError: If the file cannot be opened
        """
        self.target.initialize(path)

    def close_file(self) -> None:
        """Close the log file; output returns to the console."""
        self.target.close()

    def set_slice_interval(self, interval: timedelta) -> None:
        self.policy.slice_interval = interval

    def set_storage_time(self, storage_time: timedelta) -> None:
        self.policy.storage_time = storage_time

    # ========================================================================
    # Level control
    # ========================================================================

    @property
    def level(self) -> LogLevel:
        return self.level_state.level

    def is_enabled(self, level: Union[LogLevel, int]) -> bool:
        return self.level_state.is_enabled(level)

    def set_level(self, level: Union[LogLevel, int]) -> bool:
        """Set the threshold; values outside [VERBOSE, ERROR) are ignored."""
        return self.level_state.set_level(level)

    def level_up(self) -> Optional[LogLevel]:
        new_level = self.level_state.level_up()
        if new_level is not None:
            self._report(LogLevel.WARNING, "log level up to %s", new_level)
        return new_level

    def level_down(self) -> Optional[LogLevel]:
        new_level = self.level_state.level_down()
        if new_level is not None:
            self._report(LogLevel.WARNING, "log level down to %s", new_level)
        return new_level

    # ========================================================================
    # Leveled entry points
    # ========================================================================

    def verbose(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.VERBOSE):
            self._emit(LogLevel.VERBOSE, msg, args)

    def debug(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.DEBUG):
            self._emit(LogLevel.DEBUG, msg, args)

    def info(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.INFO):
            self._emit(LogLevel.INFO, msg, args)

    def notice(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.NOTICE):
            self._emit(LogLevel.NOTICE, msg, args)

    def warning(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.WARNING):
            self._emit(LogLevel.WARNING, msg, args)

    def error(self, msg: str, *args: Any) -> None:
        if self.level_state.is_enabled(LogLevel.ERROR):
            self._emit(LogLevel.ERROR, msg, args)

    def log(self, level: LogLevel, msg: str, *args: Any, stacklevel: int = 1) -> None:
        """
        Log at a level chosen at runtime.

        Args:
            stacklevel: Extra frames to skip when locating the caller, for
                wrappers that forward to this method
        """
        if self.level_state.is_enabled(level):
            self._emit(LogLevel(level), msg, args, _CALLER_DEPTH + stacklevel - 1)

    def write_record(self, record: logging.LogRecord) -> None:
        """
        Write a record produced by a stdlib logger.

        The record keeps its own timestamp and call site; only the threshold
        and the tag come from this service.
        """
        level = LogLevel.from_stdlib(record.levelno)
        if not self.level_state.is_enabled(level):
            return
        record.tag = level.tag
        self.target.write(self._formatter.format(record))

    def status(self) -> dict:
        """Snapshot of the sink and policy, for the admin API."""
        target = self.target
        return {
            "level": str(self.level),
            "file": target.path,
            "active": target.active,
            "last_rotation_time": (
                target.last_rotation_time.isoformat() if target.last_rotation_time else None
            ),
            "slice_interval_seconds": self.policy.slice_interval.total_seconds(),
            "storage_time_seconds": self.policy.storage_time.total_seconds(),
            "strict_match": self.policy.strict_match,
        }

    # ========================================================================
    # Internals
    # ========================================================================

    def _report(self, level: LogLevel, msg: str, *args: Any) -> None:
        """Diagnostics from the service itself, attributed to the calling line."""
        if self.level_state.is_enabled(level):
            self._emit(level, msg, args)

    def _emit(self, level: LogLevel, msg: str, args: tuple, stacklevel: int = _CALLER_DEPTH) -> None:
        record_logger = self._record_logger
        fn, lno, func, sinfo = record_logger.findCaller(False, stacklevel)
        record = record_logger.makeRecord(
            record_logger.name,
            level.stdlib_level,
            fn,
            lno,
            msg,
            args,
            None,
            func,
            {"tag": level.tag},
            sinfo,
        )
        try:
            line = self._formatter.format(record)
        except (TypeError, ValueError, KeyError):
            # Bad format string/args: keep the message rather than lose it
            record.msg = f"{msg} {args!r}"
            record.args = None
            line = self._formatter.format(record)

        self.target.write(line)
