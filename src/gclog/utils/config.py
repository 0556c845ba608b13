"""
Configuration Management for gclog

Loads configuration from environment variables with sensible defaults.
Durations accept the formats understood by ``parse_duration``.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gclog.levels import LogLevel
from gclog.utils.duration import format_duration, parse_duration

# Load .env from the current working directory (if it exists).
# This should run once when the module is imported.
_env_path = Path.cwd() / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def expand_path(path: str) -> str:
    """
    Expand user home directory (~) and environment variables in a path.

    Args:
        path: Path string potentially containing ~ or $VAR

    Returns:
        Fully expanded absolute path
    """
    return str(Path(os.path.expandvars(os.path.expanduser(path))).resolve())


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class GcLogConfig:
    """
    Central configuration for gclog.

    Loads settings from GCLOG_* environment variables with fallback defaults.

    Raises:
        ValueError: If a level or duration variable cannot be parsed
    """

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Sink
        log_file = os.getenv("GCLOG_FILE")
        self.log_file: Optional[str] = expand_path(log_file) if log_file else None
        self.log_level: LogLevel = LogLevel.parse(os.getenv("GCLOG_LEVEL", "notice"))

        # Rotation policy
        self.slice_interval: timedelta = parse_duration(os.getenv("GCLOG_SLICE_INTERVAL", "1d"))
        self.storage_time: timedelta = abs(parse_duration(os.getenv("GCLOG_STORAGE_TIME", "7d")))
        self.poll_interval: float = parse_duration(
            os.getenv("GCLOG_POLL_INTERVAL", "30s")
        ).total_seconds()
        self.strict_retention: bool = _env_bool("GCLOG_STRICT_RETENTION", False)

        # Admin API
        self.admin_enabled: bool = _env_bool("GCLOG_ADMIN_ENABLED", False)
        self.admin_host: str = os.getenv("GCLOG_ADMIN_HOST", "127.0.0.1")
        self.admin_port: int = int(os.getenv("GCLOG_ADMIN_PORT", "8766"))
        self.admin_token: Optional[str] = os.getenv("GCLOG_ADMIN_TOKEN")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<GcLogConfig(\n"
            f"  log_file={self.log_file},\n"
            f"  log_level={self.log_level},\n"
            f"  slice_interval={format_duration(self.slice_interval)},\n"
            f"  storage_time={format_duration(self.storage_time)},\n"
            f"  poll_interval={self.poll_interval}s,\n"
            f"  strict_retention={self.strict_retention},\n"
            f"  admin={self.admin_host}:{self.admin_port} (enabled={self.admin_enabled})\n"
            f")>"
        )


# Global configuration instance
_config: Optional[GcLogConfig] = None


def get_config() -> GcLogConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        The global GcLogConfig instance

    Example:
        >>> from gclog.utils.config import get_config
        >>> config = get_config()
        >>> print(config.slice_interval)
        1 day, 0:00:00
    """
    global _config
    if _config is None:
        _config = GcLogConfig()
    return _config


def reload_config() -> GcLogConfig:
    """
    Force reload of configuration from environment variables.

    Useful for testing or when environment changes at runtime.

    Returns:
        Newly created GcLogConfig instance
    """
    global _config
    _config = GcLogConfig()
    return _config
