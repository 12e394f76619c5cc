from dataclasses import dataclass
from typing import Optional
from enum import IntEnum


class LocationType(IntEnum):
    """GTFS Location types."""
    STOP = 0  # Stop or platform
    STATION = 1  # Station
    ENTRANCE_EXIT = 2  # Station entrance/exit
    GENERIC_NODE = 3  # Generic node
    BOARDING_AREA = 4  # Boarding area


@dataclass(frozen=True)
class Stop:
    """GTFS Stop entity - represents a stop/station."""

    id: str
    name: str
    lat: float
    lon: float
    code: Optional[str] = None
    desc: Optional[str] = None
    zone_id: Optional[str] = None
    location_type: LocationType = LocationType.STOP
    parent_station_id: Optional[str] = None
    platform_code: Optional[str] = None
