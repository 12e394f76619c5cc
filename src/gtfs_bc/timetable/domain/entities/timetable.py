from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from src.gtfs_bc.calendar.domain.entities import Calendar
from src.gtfs_bc.route.domain.entities import Route
from src.gtfs_bc.stop.domain.entities import Stop

DIRECTION_NAMES = {
    "0": "Outbound",
    "1": "Inbound",
}


def direction_name(direction_id: str) -> str:
    """Human-readable name for a GTFS direction_id (0 = Outbound, 1 = Inbound)."""
    return DIRECTION_NAMES.get(direction_id, f"Direction {direction_id}")


class TimeField(str, Enum):
    """Which time of a stop_time an edit targets."""
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    LINKED = "linked"  # arrival and departure set to the same value


@dataclass(frozen=True)
class DirectionInfo:
    """A direction of a route/service with its trip count."""
    id: str
    name: str
    trip_count: int


@dataclass(frozen=True)
class AlignedTrip:
    """A trip laid out on the rows of a timetable.

    The maps are keyed by supersequence position, not stop_id, so a stop
    visited twice (loop routes) keeps both of its times. A position missing
    from both maps is a row this trip does not serve.
    """
    trip_id: str
    headsign: str
    direction_id: str
    arrival_times: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    departure_times: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def display_times(self) -> Dict[int, str]:
        """Single time per row: departure, else arrival."""
        positions = sorted(set(self.arrival_times) | set(self.departure_times))
        return {
            position: self.departure_times.get(position) or self.arrival_times[position]
            for position in positions
        }

    @property
    def first_time(self) -> Optional[str]:
        """Time at the first served row, used to order trips left to right."""
        times = self.display_times
        if not times:
            return None
        return times[min(times)]

    def serves(self, position: int) -> bool:
        return position in self.arrival_times or position in self.departure_times

    def has_split_times(self) -> bool:
        """True if any row has both times set and they differ (dwell time)."""
        for position, arrival in self.arrival_times.items():
            departure = self.departure_times.get(position)
            if arrival and departure and arrival != departure:
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trip_id": self.trip_id,
            "headsign": self.headsign,
            "direction_id": self.direction_id,
            "arrival_times": dict(self.arrival_times),
            "departure_times": dict(self.departure_times),
            "display_times": self.display_times,
        }


@dataclass(frozen=True)
class TimetableData:
    """Everything needed to render one route/service/direction timetable.

    ``stops`` are the rows (the supersequence resolved to stops), ``trips``
    the columns. Built fresh for each request, never cached.
    """
    route: Route
    service_id: str
    calendar: Optional[Calendar]
    stops: Tuple[Stop, ...]
    trips: Tuple[AlignedTrip, ...]
    available_directions: Tuple[DirectionInfo, ...]
    selected_direction_id: Optional[str]
    direction_id: Optional[str] = None
    direction_name: Optional[str] = None
    show_split_columns: bool = False

    @property
    def stop_ids(self) -> Tuple[str, ...]:
        return tuple(stop.id for stop in self.stops)

    def to_dict(self) -> Dict[str, Any]:
        """Plain serializable representation (JSON friendly)."""
        return {
            "route": {
                "id": self.route.id,
                "short_name": self.route.short_name,
                "long_name": self.route.long_name,
                "route_type": int(self.route.route_type),
                "color": self.route.color,
                "text_color": self.route.text_color,
            },
            "service": {
                "service_id": self.service_id,
                "weekdays": self.calendar.weekdays if self.calendar else [],
                "start_date": self.calendar.start_date.isoformat() if self.calendar else None,
                "end_date": self.calendar.end_date.isoformat() if self.calendar else None,
            },
            "stops": [
                {"position": index, "id": stop.id, "name": stop.name, "code": stop.code}
                for index, stop in enumerate(self.stops)
            ],
            "trips": [trip.to_dict() for trip in self.trips],
            "available_directions": [
                {"id": d.id, "name": d.name, "trip_count": d.trip_count}
                for d in self.available_directions
            ],
            "selected_direction_id": self.selected_direction_id,
            "direction_id": self.direction_id,
            "direction_name": self.direction_name,
            "show_split_columns": self.show_split_columns,
        }


@dataclass(frozen=True)
class StopTimeEntry:
    """One stop of a trip as the editor wants it to end up."""
    stop_id: str
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a schedule edit, returned instead of UI notifications."""
    action: str  # "updated", "inserted", "rebuilt"
    trip_id: str
    stop_id: Optional[str]
    affected_rows: int
    message: str
    resequenced: bool = False
