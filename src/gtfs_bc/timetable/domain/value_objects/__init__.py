from .gtfs_time import (
    TIME_PATTERN,
    MAX_TIME_LENGTH,
    is_valid_time,
    fits_storage,
    cast_time_to_hhmmss,
    normalize_time,
    time_to_seconds,
    format_display_time,
    sort_key,
)

__all__ = [
    "TIME_PATTERN",
    "MAX_TIME_LENGTH",
    "is_valid_time",
    "fits_storage",
    "cast_time_to_hhmmss",
    "normalize_time",
    "time_to_seconds",
    "format_display_time",
    "sort_key",
]
