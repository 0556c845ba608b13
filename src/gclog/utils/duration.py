"""
Duration parsing utilities.

Turns human-friendly duration strings from the environment, the CLI and the
admin API into ``timedelta`` values for the rotation policy.
"""

import re
from datetime import timedelta

_UNITS = {
    "s": "seconds",
    "sec": "seconds",
    "second": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "h": "hours",
    "hr": "hours",
    "hour": "hours",
    "d": "days",
    "day": "days",
    "w": "weeks",
    "week": "weeks",
}

_DURATION_RE = re.compile(r"^(?P<sign>-?)\s*(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>[a-z]*)$")


def parse_duration(duration_str: str) -> timedelta:
    """
    Parse a duration string into a timedelta.

    Supports:
    - Compact: "30s", "15m", "2h", "7d", "1w"
    - Words: "90 minutes", "1 day", "2 hours"
    - Plain seconds: "3600", "0.5"
    - A leading "-" for negative durations

    Args:
        duration_str: The duration to parse (case-insensitive)

    Returns:
        The parsed timedelta

    Raises:
        ValueError: If the string is not a supported duration

    Examples:
        >>> parse_duration("2h")
        datetime.timedelta(seconds=7200)

        >>> parse_duration("1 day")
        datetime.timedelta(days=1)
    """
    text = duration_str.strip().lower()
    match = _DURATION_RE.match(text)
    if match:
        amount = float(match.group("amount"))
        unit = match.group("unit")
        if len(unit) > 2 and unit.endswith("s") and unit not in _UNITS:
            unit = unit[:-1]  # "hours" -> "hour", "mins" -> "min"

        if not unit:
            field = "seconds"
        elif unit in _UNITS:
            field = _UNITS[unit]
        else:
            field = None

        if field is not None:
            result = timedelta(**{field: amount})
            return -result if match.group("sign") else result

    raise ValueError(
        f"Could not parse duration: '{duration_str}'. "
        f"Supported formats: '30s', '15m', '2h', '7d', '1w', '90 minutes', plain seconds"
    )


def format_duration(value: timedelta) -> str:
    """Compact string for a timedelta, using the largest exact unit ("7d", "90m")."""
    seconds = value.total_seconds()
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    for suffix, size in (("w", 604800), ("d", 86400), ("h", 3600), ("m", 60)):
        if seconds and seconds % size == 0:
            return f"{sign}{int(seconds // size)}{suffix}"
    if seconds == int(seconds):
        return f"{sign}{int(seconds)}s"
    return f"{sign}{seconds}s"
