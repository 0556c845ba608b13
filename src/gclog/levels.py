"""
Log Levels

Ordered severity enumeration shared by the level state, the writer and the
control channels.
"""

import logging
from enum import IntEnum
from typing import Union

# Extra stdlib level numbers so records built by the writer carry a
# meaningful levelno for VERBOSE and NOTICE.
VERBOSE_STDLIB = 5
NOTICE_STDLIB = 25

logging.addLevelName(VERBOSE_STDLIB, "VERBOSE")
logging.addLevelName(NOTICE_STDLIB, "NOTICE")


class LogLevel(IntEnum):
    """
    Severity levels, lowest to highest.

    A message at level L is emitted iff L >= the current threshold, so raising
    the threshold makes the output quieter.
    """

    VERBOSE = 0  # Internal diagnostics (scheduler ticks, etc.)
    DEBUG = 1
    INFO = 2
    NOTICE = 3  # Default threshold
    WARNING = 4
    ERROR = 5

    @property
    def tag(self) -> str:
        """Bracketed prefix written in front of every message."""
        return _TAGS[self]

    @property
    def stdlib_level(self) -> int:
        """Equivalent numeric level in the stdlib ``logging`` module."""
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """
        Convert a name ("warning", "VERB") or integer rank into a LogLevel.

        Raises:
            ValueError: If the value names no level
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)

        name = str(value).strip().upper()
        if name.isdigit():
            return cls(int(name))
        if name in _ALIASES:
            return _ALIASES[name]
        try:
            return cls[name]
        except KeyError:
            allowed = ", ".join(level.name.lower() for level in cls)
            raise ValueError(f"Unknown log level: '{value}'. Allowed: {allowed}")

    @classmethod
    def from_stdlib(cls, levelno: int) -> "LogLevel":
        """Map a stdlib levelno onto the closest level at or below it."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= NOTICE_STDLIB:
            return cls.NOTICE
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.VERBOSE

    def __str__(self) -> str:
        return self.name.lower()


_TAGS = {
    LogLevel.VERBOSE: "[VERB] ",
    LogLevel.DEBUG: "[DEBUG] ",
    LogLevel.INFO: "[INFO] ",
    LogLevel.NOTICE: "[NOTICE] ",
    LogLevel.WARNING: "[WARNING] ",
    LogLevel.ERROR: "[ERROR] ",
}

_STDLIB_LEVELS = {
    LogLevel.VERBOSE: VERBOSE_STDLIB,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: NOTICE_STDLIB,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

_ALIASES = {
    "VERB": LogLevel.VERBOSE,
    "WARN": LogLevel.WARNING,
}
