"""Timetable and schedule editing schemas."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from src.gtfs_bc.timetable.domain.entities import TimeField


class TimetableRouteResponse(BaseModel):
    id: str
    short_name: Optional[str]
    long_name: Optional[str]
    route_type: int
    color: Optional[str]
    text_color: Optional[str]


class TimetableServiceResponse(BaseModel):
    """Service of the timetable. Without a calendar row only service_id is set."""
    service_id: str
    weekdays: List[str] = []
    start_date: Optional[str] = None  # ISO date
    end_date: Optional[str] = None


class TimetableStopResponse(BaseModel):
    """A timetable row. The same stop appears twice on loop routes."""
    position: int
    id: str
    name: str
    code: Optional[str] = None


class AlignedTripResponse(BaseModel):
    """A timetable column. Times are keyed by row position, HH:MM:SS format."""
    trip_id: str
    headsign: str
    direction_id: str
    arrival_times: Dict[int, str]
    departure_times: Dict[int, str]
    display_times: Dict[int, str]  # departure, else arrival


class DirectionResponse(BaseModel):
    id: str  # '0', '1', ...
    name: str  # 'Outbound', 'Inbound', 'Direction N'
    trip_count: int

    class Config:
        from_attributes = True


class TimetableResponse(BaseModel):
    route: TimetableRouteResponse
    service: TimetableServiceResponse
    stops: List[TimetableStopResponse]
    trips: List[AlignedTripResponse]  # ordered by first departure
    available_directions: List[DirectionResponse]
    selected_direction_id: Optional[str] = None
    direction_id: Optional[str] = None
    direction_name: Optional[str] = None
    show_split_columns: bool = False  # True if any stop has arrival != departure


class SetTimeRequest(BaseModel):
    """Set one stop time. A null or empty value clears it."""
    value: Optional[str] = Field(None, description="H:MM, HH:MM or HH:MM:SS; hour may exceed 23")
    field: TimeField = TimeField.DEPARTURE


class StopTimeEntrySchema(BaseModel):
    stop_id: str
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None


class RebuildTripRequest(BaseModel):
    """Complete desired stop list of a trip. Stops not listed are removed."""
    entries: List[StopTimeEntrySchema]


class MutationResponse(BaseModel):
    action: str  # 'updated', 'inserted', 'rebuilt'
    trip_id: str
    stop_id: Optional[str] = None
    affected_rows: int
    message: str
    resequenced: bool = False

    class Config:
        from_attributes = True
