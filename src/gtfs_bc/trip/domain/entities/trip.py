from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Trip:
    """GTFS Trip entity - represents a scheduled trip."""

    id: str
    route_id: str
    service_id: str
    headsign: Optional[str] = None
    short_name: Optional[str] = None
    direction_id: Optional[int] = None  # 0 = outbound, 1 = inbound
    block_id: Optional[str] = None
    shape_id: Optional[str] = None
    wheelchair_accessible: Optional[int] = None
    bikes_allowed: Optional[int] = None

    @property
    def direction_key(self) -> str:
        """Direction as used for grouping timetables; trips without one count as "0"."""
        return str(self.direction_id) if self.direction_id is not None else "0"
