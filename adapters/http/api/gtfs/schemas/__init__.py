"""Centralized API schemas for GTFS endpoints."""

from .timetable_schemas import (
    TimetableRouteResponse,
    TimetableServiceResponse,
    TimetableStopResponse,
    AlignedTripResponse,
    DirectionResponse,
    TimetableResponse,
    SetTimeRequest,
    StopTimeEntrySchema,
    RebuildTripRequest,
    MutationResponse,
)

__all__ = [
    "TimetableRouteResponse",
    "TimetableServiceResponse",
    "TimetableStopResponse",
    "AlignedTripResponse",
    "DirectionResponse",
    "TimetableResponse",
    "SetTimeRequest",
    "StopTimeEntrySchema",
    "RebuildTripRequest",
    "MutationResponse",
]
