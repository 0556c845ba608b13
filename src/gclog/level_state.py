"""Current verbosity threshold shared by every log call."""

import threading
from typing import Optional, Union

from gclog.levels import LogLevel


class LevelState:
    """
    Holds the level threshold behind a dedicated lock.

    Writes (set, up, down) take the lock. ``is_enabled`` reads the threshold
    without it: the value is a single scalar, a stale read affects at most the
    one call that races with a change, and the next call sees the new level.
    Keep it lock-free, it sits on the hot path of every log call.
    """

    def __init__(self, level: LogLevel = LogLevel.NOTICE):
        self._lock = threading.Lock()
        self._level = LogLevel(level)

    @property
    def level(self) -> LogLevel:
        return self._level

    def is_enabled(self, level: Union[LogLevel, int]) -> bool:
        return level >= self._level

    def set_level(self, level: Union[LogLevel, int]) -> bool:
        """
        Set the threshold if VERBOSE <= level < ERROR.

        Out-of-range values are ignored without raising.

        Returns:
            True if the level was applied
        """
        with self._lock:
            if LogLevel.VERBOSE <= level < LogLevel.ERROR:
                self._level = LogLevel(level)
                return True
            return False

    def level_up(self) -> Optional[LogLevel]:
        """Raise the threshold one step. Returns the new level, or None at ERROR."""
        with self._lock:
            if self._level >= LogLevel.ERROR:
                return None
            self._level = LogLevel(self._level + 1)
            return self._level

    def level_down(self) -> Optional[LogLevel]:
        """Lower the threshold one step. Returns the new level, or None at VERBOSE."""
        with self._lock:
            if self._level <= LogLevel.VERBOSE:
                return None
            self._level = LogLevel(self._level - 1)
            return self._level
