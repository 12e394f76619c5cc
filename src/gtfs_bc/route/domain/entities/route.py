from dataclasses import dataclass
from typing import Optional
from enum import IntEnum


class RouteType(IntEnum):
    """GTFS Route types."""
    TRAM = 0
    SUBWAY = 1
    RAIL = 2
    BUS = 3
    FERRY = 4
    CABLE_TRAM = 5
    AERIAL_LIFT = 6
    FUNICULAR = 7
    TROLLEYBUS = 11
    MONORAIL = 12


@dataclass(frozen=True)
class Route:
    """GTFS Route entity - represents a transit route/line."""

    id: str
    agency_id: str
    short_name: str
    long_name: str
    route_type: RouteType
    color: Optional[str] = None
    text_color: Optional[str] = None
    desc: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.short_name or self.long_name or self.id
