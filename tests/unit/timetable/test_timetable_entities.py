"""Unit tests for timetable value types."""

from types import MappingProxyType

from src.gtfs_bc.stop_time.domain.entities import StopTime
from src.gtfs_bc.timetable.domain.entities import AlignedTrip, direction_name
from src.gtfs_bc.trip.domain.entities import Trip


def aligned(arrivals, departures):
    return AlignedTrip(
        trip_id="T1",
        headsign="Puerto",
        direction_id="0",
        arrival_times=MappingProxyType(arrivals),
        departure_times=MappingProxyType(departures),
    )


class TestDirectionName:
    """Tests for direction labels."""

    def test_labels(self):
        assert direction_name("0") == "Outbound"
        assert direction_name("1") == "Inbound"
        assert direction_name("7") == "Direction 7"

    def test_trip_without_direction_is_outbound(self):
        assert Trip(id="T1", route_id="L1", service_id="S").direction_key == "0"
        assert Trip(id="T1", route_id="L1", service_id="S", direction_id=1).direction_key == "1"


class TestAlignedTrip:
    """Tests for AlignedTrip helpers."""

    def test_display_time_prefers_departure(self):
        trip = aligned({0: "08:00:00", 2: "08:20:00"}, {0: "08:01:00", 3: "08:30:00"})
        assert trip.display_times == {0: "08:01:00", 2: "08:20:00", 3: "08:30:00"}
        assert trip.first_time == "08:01:00"

    def test_split_times(self):
        assert aligned({0: "08:00:00"}, {0: "08:01:00"}).has_split_times()
        assert not aligned({0: "08:00:00"}, {0: "08:00:00"}).has_split_times()
        assert not aligned({0: "08:00:00"}, {1: "08:10:00"}).has_split_times()

    def test_empty_trip(self):
        trip = aligned({}, {})
        assert trip.first_time is None
        assert not trip.serves(0)


class TestStopTime:
    """Tests for the StopTime entity."""

    def test_effective_time_falls_back_to_arrival(self):
        stop_time = StopTime(trip_id="T1", stop_id="S1", stop_sequence=3, arrival_time="08:00:00")
        assert stop_time.effective_time == "08:00:00"
        assert not stop_time.is_skipped

    def test_row_without_times_is_skipped(self):
        stop_time = StopTime(trip_id="T1", stop_id="S1", stop_sequence=3)
        assert stop_time.effective_time is None
        assert stop_time.is_skipped
