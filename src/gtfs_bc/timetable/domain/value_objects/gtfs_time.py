"""GTFS time values.

GTFS times are HH:MM:SS strings measured from "noon minus 12h" of the
service day, so the hour can exceed 23 for trips running past midnight
("25:30:00"). Once the hour is zero-padded to two digits, plain string
comparison orders times correctly up to 99:59:59; ordering here goes
through seconds so longer hours compare correctly too.
"""

import re
from typing import Optional, Tuple

# H:MM:SS or HH:MM:SS, hour unbounded above
TIME_PATTERN = re.compile(r"^\d{1,}:[0-5]\d:[0-5]\d$")

# Accepted user input shapes: H:M, H:MM, HH:MM, with optional :SS
_INPUT_PATTERN = re.compile(r"^(\d{1,}):(\d{1,2})(?::(\d{2}))?$")

# Width of the stop_times time columns
MAX_TIME_LENGTH = 10


def is_valid_time(value: str) -> bool:
    """Check a string against the GTFS time grammar."""
    return bool(TIME_PATTERN.match(value))


def fits_storage(value: str) -> bool:
    """Check that a normalized time fits the stop_times time columns."""
    return len(value) <= MAX_TIME_LENGTH


def cast_time_to_hhmmss(value: str) -> str:
    """Normalize user input to HH:MM:SS.

    '9:30' -> '09:30:00', '14:45' -> '14:45:00', '25:30:00' -> '25:30:00'.
    Input that cannot be cast is returned stripped and unchanged, so the
    caller's validation reports it.
    """
    trimmed = value.strip()
    match = _INPUT_PATTERN.match(trimmed)
    if not match:
        return trimmed

    hours, minutes, seconds = match.groups()
    if int(minutes) > 59 or (seconds is not None and int(seconds) > 59):
        return trimmed

    return f"{int(hours):02d}:{int(minutes):02d}:{seconds or '00'}"


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Normalize a stored or submitted time; empty values become None."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return cast_time_to_hhmmss(value)


def time_to_seconds(value: str) -> int:
    """Convert HH:MM:SS to seconds. Handles times > 24:00:00."""
    parts = value.split(":")
    hours = int(parts[0])
    minutes = int(parts[1])
    seconds = int(parts[2]) if len(parts) > 2 else 0
    return hours * 3600 + minutes * 60 + seconds


def format_display_time(value: Optional[str]) -> str:
    """Format a time as HH:MM for timetable cells; '' for missing values."""
    if not value:
        return ""
    parts = value.split(":")
    if len(parts) < 2:
        return value
    return f"{int(parts[0]):02d}:{parts[1]}"


def sort_key(value: Optional[str]) -> Tuple[int, int]:
    """Key for ordering times. Missing or unparseable times sort last."""
    normalized = normalize_time(value)
    if normalized is None or not is_valid_time(normalized):
        return (1, 0)
    return (0, time_to_seconds(normalized))
