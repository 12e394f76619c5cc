"""Helpers to put GTFS rows in the test database."""

from src.gtfs_bc.stop_time.infrastructure.models import StopTimeModel
from src.gtfs_bc.trip.infrastructure.models import TripModel


def add_trip(db, trip_id, times, route_id="L1", service_id="WEEKDAY", direction_id=0, headsign=None):
    """Add a trip and its stop_times.

    ``times`` is a list of (stop_id, arrival, departure) in stop_sequence order.
    """
    db.add(TripModel(
        id=trip_id,
        route_id=route_id,
        service_id=service_id,
        direction_id=direction_id,
        headsign=headsign,
    ))
    for sequence, (stop_id, arrival, departure) in enumerate(times, start=1):
        db.add(StopTimeModel(
            trip_id=trip_id,
            stop_id=stop_id,
            stop_sequence=sequence,
            arrival_time=arrival,
            departure_time=departure,
        ))
    db.commit()
