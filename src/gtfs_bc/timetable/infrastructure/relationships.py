from typing import List, Optional

from src.gtfs_bc.calendar.domain.entities import Calendar
from src.gtfs_bc.route.domain.entities import Route
from src.gtfs_bc.stop.domain.entities import Stop
from src.gtfs_bc.stop_time.domain.entities import StopTime
from src.gtfs_bc.timetable.infrastructure.storage import TableStorage
from src.gtfs_bc.trip.domain.entities import Trip


class GTFSRelationships:
    """Read-only lookups between GTFS entities.

    Reads go straight to storage so a timetable always reflects the latest
    schedule edits.
    """

    def __init__(self, storage: TableStorage):
        self.storage = storage

    async def get_route_by_id(self, route_id: str) -> Optional[Route]:
        routes = await self.storage.query_rows("routes", {"id": route_id})
        return routes[0] if routes else None

    async def get_trips_for_route(self, route_id: str) -> List[Trip]:
        """All trips of a route, every service and direction, ordered by trip id."""
        trips = await self.storage.query_rows("trips", {"route_id": route_id})
        return sorted(trips, key=lambda trip: trip.id)

    async def get_stop_times_for_trip(self, trip_id: str) -> List[StopTime]:
        """Stop times of a trip ordered by stop_sequence."""
        stop_times = await self.storage.query_rows("stop_times", {"trip_id": trip_id})
        return sorted(stop_times, key=lambda st: int(st.stop_sequence))

    async def get_stop_by_id(self, stop_id: str) -> Optional[Stop]:
        stops = await self.storage.query_rows("stops", {"id": stop_id})
        return stops[0] if stops else None

    async def get_calendar_for_service(self, service_id: str) -> Optional[Calendar]:
        calendars = await self.storage.query_rows("calendar", {"service_id": service_id})
        return calendars[0] if calendars else None
