from .timetable import (
    AlignedTrip,
    DirectionInfo,
    MutationResult,
    StopTimeEntry,
    TimeField,
    TimetableData,
    direction_name,
)

__all__ = [
    "AlignedTrip",
    "DirectionInfo",
    "MutationResult",
    "StopTimeEntry",
    "TimeField",
    "TimetableData",
    "direction_name",
]
