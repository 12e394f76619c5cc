from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StopTime:
    """GTFS StopTime entity - represents a stop time in a trip.

    Times are HH:MM:SS strings (hour can be > 23 for service past midnight).
    Either time may be None: a row with no times is a stop the trip is
    scheduled to pass without stopping ("skipped").
    """

    trip_id: str
    stop_id: str
    stop_sequence: int
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    stop_headsign: Optional[str] = None
    pickup_type: int = 0  # 0 = regular, 1 = no pickup, 2 = phone agency, 3 = coordinate with driver
    drop_off_type: int = 0
    shape_dist_traveled: Optional[float] = None
    timepoint: int = 1  # 0 = approximate, 1 = exact

    @property
    def effective_time(self) -> Optional[str]:
        """Time used to order the row inside its trip (departure, else arrival)."""
        return self.departure_time or self.arrival_time

    @property
    def is_skipped(self) -> bool:
        return not self.arrival_time and not self.departure_time
