"""Timetable Builder - assembles the aligned timetable of a route.

Trips of a route/service are laid out on one shared stop list computed by
the SequenceAligner: stops are the rows, trips the columns. The result is
built from storage on every call, so it always reflects the latest edits.
"""

import logging
from collections import Counter
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

from core.config import settings
from src.gtfs_bc.stop.domain.entities import Stop
from src.gtfs_bc.stop_time.domain.entities import StopTime
from src.gtfs_bc.timetable.domain.entities import (
    AlignedTrip,
    DirectionInfo,
    TimetableData,
    direction_name,
)
from src.gtfs_bc.timetable.domain.exceptions import DataIntegrityError, NotFoundError
from src.gtfs_bc.timetable.domain.services import SequenceAligner, visualize_alignment
from src.gtfs_bc.timetable.domain.value_objects import normalize_time, sort_key
from src.gtfs_bc.timetable.infrastructure.relationships import GTFSRelationships
from src.gtfs_bc.trip.domain.entities import Trip

logger = logging.getLogger(__name__)


class TimetableBuilder:
    """Builds TimetableData for a route, service and optional direction."""

    def __init__(self, relationships: GTFSRelationships, aligner: Optional[SequenceAligner] = None):
        self.relationships = relationships
        self.aligner = aligner or SequenceAligner()

    async def build(
        self,
        route_id: str,
        service_id: str,
        direction_id: Optional[str] = None,
    ) -> TimetableData:
        """Build the aligned timetable.

        Args:
            route_id: GTFS route_id
            service_id: GTFS service_id the trips must run on
            direction_id: Only include trips of this direction ("0", "1").
                Trips without a direction_id count as "0".

        Raises:
            NotFoundError: unknown route, or no trip matches the filters
            DataIntegrityError: stop_times reference a stop that does not exist
        """
        route = await self.relationships.get_route_by_id(route_id)
        if route is None:
            raise NotFoundError(f"Route {route_id} not found")

        calendar = await self.relationships.get_calendar_for_service(service_id)
        if calendar is None:
            logger.info(f"No calendar row for service {service_id}, using bare service_id")

        service_trips = await self._service_trips(route_id, service_id)
        directions = self._group_directions(service_trips)

        requested = str(direction_id) if direction_id is not None else None
        trips = service_trips
        if requested is not None:
            trips = [trip for trip in service_trips if trip.direction_key == requested]

        if not trips:
            message = f"No trips found for route {route_id} and service {service_id}"
            if requested is not None:
                message += f" in direction {requested}"
            raise NotFoundError(message)

        trip_stop_times: List[Tuple[Trip, List[StopTime]]] = []
        for trip in trips:
            stop_times = await self.relationships.get_stop_times_for_trip(trip.id)
            trip_stop_times.append((trip, stop_times))

        sequences = [[st.stop_id for st in stop_times] for _, stop_times in trip_stop_times]
        alignment = self.aligner.align(sequences)

        if settings.timetable.TIMETABLE_LOG_ALIGNMENT:
            logger.info(
                f"Alignment for route {route_id} / service {service_id}:\n"
                f"{visualize_alignment(sequences, alignment)}"
            )

        stops = await self._resolve_stops(alignment.supersequence)

        aligned_trips = []
        for index, (trip, stop_times) in enumerate(trip_stop_times):
            aligned_trips.append(self._align_trip(trip, stop_times, alignment.mapping_for(index)))

        # sorted() is stable: trips with equal first times keep trip_id order
        aligned_trips = sorted(aligned_trips, key=lambda t: sort_key(t.first_time))

        logger.debug(
            f"Built timetable for route {route_id}: {len(stops)} stops x {len(aligned_trips)} trips"
        )

        return TimetableData(
            route=route,
            service_id=service_id,
            calendar=calendar,
            stops=tuple(stops),
            trips=tuple(aligned_trips),
            available_directions=tuple(directions),
            selected_direction_id=requested if requested is not None else (
                directions[0].id if directions else None
            ),
            direction_id=requested,
            direction_name=direction_name(requested) if requested is not None else None,
            show_split_columns=any(trip.has_split_times() for trip in aligned_trips),
        )

    async def get_available_directions(self, route_id: str, service_id: str) -> List[DirectionInfo]:
        """Directions of a route/service with trip counts, ordered by direction id."""
        return self._group_directions(await self._service_trips(route_id, service_id))

    async def _service_trips(self, route_id: str, service_id: str) -> List[Trip]:
        trips = await self.relationships.get_trips_for_route(route_id)
        return [trip for trip in trips if trip.service_id == service_id]

    @staticmethod
    def _group_directions(trips: List[Trip]) -> List[DirectionInfo]:
        counts = Counter(trip.direction_key for trip in trips)
        return [
            DirectionInfo(id=key, name=direction_name(key), trip_count=counts[key])
            for key in sorted(counts)
        ]

    async def _resolve_stops(self, stop_ids) -> List[Stop]:
        resolved: Dict[str, Stop] = {}
        stops = []
        for stop_id in stop_ids:
            # Loop routes repeat stop ids in the supersequence
            if stop_id not in resolved:
                stop = await self.relationships.get_stop_by_id(stop_id)
                if stop is None:
                    raise DataIntegrityError(
                        f"Stop {stop_id} not found in stops but referenced in stop_times"
                    )
                resolved[stop_id] = stop
            stops.append(resolved[stop_id])
        return stops

    @staticmethod
    def _align_trip(trip: Trip, stop_times: List[StopTime], mapping: Tuple[int, ...]) -> AlignedTrip:
        if len(mapping) != len(stop_times):
            raise DataIntegrityError(
                f"Alignment of trip {trip.id} maps {len(mapping)} of {len(stop_times)} stop_times"
            )

        arrival_times: Dict[int, str] = {}
        departure_times: Dict[int, str] = {}
        for stop_time, position in zip(stop_times, mapping):
            arrival = normalize_time(stop_time.arrival_time)
            departure = normalize_time(stop_time.departure_time)
            if arrival:
                arrival_times[position] = arrival
            if departure:
                departure_times[position] = departure

        return AlignedTrip(
            trip_id=trip.id,
            headsign=trip.headsign or trip.id,
            direction_id=trip.direction_key,
            arrival_times=MappingProxyType(arrival_times),
            departure_times=MappingProxyType(departure_times),
        )
