"""Unit tests for ScheduleMutator against an in-memory database."""

import asyncio

import pytest

from src.gtfs_bc.timetable.application import ScheduleMutator
from src.gtfs_bc.timetable.domain.entities import StopTimeEntry, TimeField
from src.gtfs_bc.timetable.domain.exceptions import NotFoundError, ValidationError
from tests.factories import add_trip


@pytest.fixture
def mutator(seeded_db, storage):
    return ScheduleMutator(storage)


def run(coro):
    return asyncio.run(coro)


def trip_rows(storage, trip_id):
    """(stop_id, stop_sequence, arrival, departure) of a trip in sequence order."""
    rows = run(storage.query_rows("stop_times", {"trip_id": trip_id}))
    return [
        (row.stop_id, row.stop_sequence, row.arrival_time, row.departure_time)
        for row in sorted(rows, key=lambda row: row.stop_sequence)
    ]


def assert_consistent(storage, trip_id):
    """Sequences are 1..N and timed rows never go back in time."""
    rows = trip_rows(storage, trip_id)
    assert [sequence for _, sequence, _, _ in rows] == list(range(1, len(rows) + 1))
    times = [departure or arrival for _, _, arrival, departure in rows if departure or arrival]
    assert times == sorted(times)


class TestSetTimeOnExistingStop:
    """Tests for edits of a stop the trip already serves."""

    def test_update_departure(self, storage, mutator):
        result = run(mutator.set_time("T1", "S2", "08:12:00", TimeField.DEPARTURE))

        assert result.action == "updated"
        assert result.affected_rows == 1
        assert not result.resequenced
        assert trip_rows(storage, "T1")[1] == ("S2", 2, "08:10:00", "08:12:00")

    def test_value_is_normalized(self, storage, mutator):
        run(mutator.set_time("T1", "S2", "8:09", TimeField.ARRIVAL))
        assert trip_rows(storage, "T1")[1][2] == "08:09:00"

    def test_linked_sets_both(self, storage, mutator):
        run(mutator.set_time("T2", "S3", "07:16:00", TimeField.LINKED))
        assert trip_rows(storage, "T2")[1] == ("S3", 2, "07:16:00", "07:16:00")

    def test_empty_value_clears_field(self, storage, mutator):
        result = run(mutator.set_time("T2", "S3", "", TimeField.ARRIVAL))
        assert result.message == "Arrival time cleared"
        assert trip_rows(storage, "T2")[1] == ("S3", 2, None, "07:15:00")

    def test_hours_past_midnight_accepted(self, storage, mutator):
        run(mutator.set_time("T1", "S4", "25:30:00", TimeField.LINKED))
        assert trip_rows(storage, "T1")[2] == ("S4", 3, "25:30:00", "25:30:00")

    def test_edit_past_next_stop_renumbers_trip(self, storage, mutator):
        """Moving S2 after S4 in time puts it after S4 in sequence."""
        result = run(mutator.set_time("T1", "S2", "08:40:00", TimeField.DEPARTURE))

        assert result.resequenced
        assert result.affected_rows == 3
        assert [row[0] for row in trip_rows(storage, "T1")] == ["S1", "S4", "S2"]
        assert_consistent(storage, "T1")

    def test_reorder_keeps_skipped_stop_in_place(self, seeded_db, storage, mutator):
        """A stop skipped earlier keeps its slot when a later edit reorders the trip."""
        add_trip(seeded_db, "T7", [
            ("S1", "08:00:00", "08:00:00"),
            ("S2", "08:10:00", "08:10:00"),
            ("S3", "08:20:00", "08:20:00"),
            ("S4", "08:30:00", "08:30:00"),
        ])
        run(mutator.skip("T7", "S2"))

        result = run(mutator.set_time("T7", "S3", "08:40:00", TimeField.LINKED))

        assert result.resequenced
        assert trip_rows(storage, "T7") == [
            ("S1", 1, "08:00:00", "08:00:00"),
            ("S2", 2, None, None),
            ("S4", 3, "08:30:00", "08:30:00"),
            ("S3", 4, "08:40:00", "08:40:00"),
        ]


class TestSetTimeValidation:
    """Tests for rejected edits."""

    def test_arrival_after_stored_departure_rejected(self, seeded_db, storage, mutator):
        """A stop leaving at 06:50 cannot arrive at 07:00; nothing is written."""
        add_trip(seeded_db, "T8", [("S1", None, "06:50:00"), ("S2", "07:10:00", "07:10:00")])
        before = trip_rows(storage, "T8")

        with pytest.raises(ValidationError) as exc_info:
            run(mutator.set_time("T8", "S1", "07:00:00", TimeField.ARRIVAL))

        assert exc_info.value.rule == "arrival_before_departure"
        assert trip_rows(storage, "T8") == before

    def test_departure_before_stored_arrival_rejected(self, storage, mutator):
        before = trip_rows(storage, "T2")
        with pytest.raises(ValidationError):
            run(mutator.set_time("T2", "S3", "07:13:00", TimeField.DEPARTURE))
        assert trip_rows(storage, "T2") == before

    @pytest.mark.parametrize("value", ["8h30", "12:60", "08:00:75", "soon", "10000:00:00"])
    def test_malformed_time_rejected(self, storage, mutator, value):
        before = trip_rows(storage, "T1")
        with pytest.raises(ValidationError) as exc_info:
            run(mutator.set_time("T1", "S2", value, TimeField.DEPARTURE))
        assert exc_info.value.rule == "time_format"
        assert trip_rows(storage, "T1") == before

    def test_linked_has_no_ordering_check(self, storage, mutator):
        """Linked edits set both times, so they cannot contradict each other."""
        run(mutator.set_time("T2", "S3", "07:20:00", TimeField.LINKED))
        assert trip_rows(storage, "T2")[1][2:] == ("07:20:00", "07:20:00")


class TestSetTimeOnNewStop:
    """Tests for adding a stop to a trip."""

    def test_insert_lands_in_time_order(self, seeded_db, storage, mutator):
        """08:00 (1), 08:10 (2) + new 08:05 gives 08:00 (1), 08:05 (2), 08:10 (3)."""
        add_trip(seeded_db, "T9", [("S1", "08:00:00", "08:00:00"), ("S2", "08:10:00", "08:10:00")])

        result = run(mutator.set_time("T9", "S3", "08:05:00", TimeField.DEPARTURE))

        assert result.action == "inserted"
        assert result.resequenced
        assert result.affected_rows == 3
        assert trip_rows(storage, "T9") == [
            ("S1", 1, "08:00:00", "08:00:00"),
            ("S3", 2, None, "08:05:00"),
            ("S2", 3, "08:10:00", "08:10:00"),
        ]

    def test_insert_linked_sets_both(self, storage, mutator):
        run(mutator.set_time("T1", "S3", "08:20:00", TimeField.LINKED))
        assert trip_rows(storage, "T1")[2] == ("S3", 3, "08:20:00", "08:20:00")
        assert_consistent(storage, "T1")

    def test_insert_before_first_stop(self, storage, mutator):
        run(mutator.set_time("T1", "S5", "07:50:00", TimeField.ARRIVAL))
        assert trip_rows(storage, "T1")[0] == ("S5", 1, "07:50:00", None)
        assert_consistent(storage, "T1")

    def test_insert_into_unknown_trip(self, mutator):
        with pytest.raises(NotFoundError, match="Trip NOPE"):
            run(mutator.set_time("NOPE", "S1", "08:00:00", TimeField.DEPARTURE))

    def test_insert_into_trip_without_rows(self, seeded_db, storage, mutator):
        add_trip(seeded_db, "EMPTY", [])
        run(mutator.set_time("EMPTY", "S1", "08:00:00", TimeField.DEPARTURE))
        assert trip_rows(storage, "EMPTY") == [("S1", 1, None, "08:00:00")]


class TestSkip:
    """Tests for skipping a stop."""

    def test_skip_clears_times_and_keeps_sequences(self, storage, mutator):
        result = run(mutator.skip("T1", "S2"))

        assert result.action == "updated"
        stop_time = run(mutator.get_stop_time("T1", "S2"))
        assert stop_time.arrival_time is None
        assert stop_time.departure_time is None
        assert stop_time.is_skipped
        assert trip_rows(storage, "T1") == [
            ("S1", 1, "08:00:00", "08:00:00"),
            ("S2", 2, None, None),
            ("S4", 3, "08:30:00", "08:30:00"),
        ]

    def test_skip_unserved_stop_appends_timeless_row(self, storage, mutator):
        run(mutator.skip("T1", "S3"))
        assert trip_rows(storage, "T1")[-1] == ("S3", 4, None, None)


class TestRebuildFromSnapshot:
    """Tests for replacing a whole trip."""

    def test_snapshot_replaces_trip(self, storage, mutator):
        """S2 is not in the snapshot and disappears; S3 is new."""
        entries = [
            StopTimeEntry("S4", "08:30:00", "08:30:00"),
            StopTimeEntry("S1", "08:00:00", "08:00:00"),
            StopTimeEntry("S3", "8:20", "8:21"),
        ]
        result = run(mutator.rebuild_from_snapshot("T1", entries))

        assert result.action == "rebuilt"
        assert result.affected_rows == 3
        assert trip_rows(storage, "T1") == [
            ("S1", 1, "08:00:00", "08:00:00"),
            ("S3", 2, "08:20:00", "08:21:00"),
            ("S4", 3, "08:30:00", "08:30:00"),
        ]

    def test_entries_without_times_dropped(self, storage, mutator):
        entries = [
            StopTimeEntry("S1", "08:00:00", "08:00:00"),
            StopTimeEntry("S2"),
            StopTimeEntry("S4", None, "08:30:00"),
        ]
        run(mutator.rebuild_from_snapshot("T1", entries))
        assert [row[0] for row in trip_rows(storage, "T1")] == ["S1", "S4"]

    def test_duplicate_stops_merged(self, storage, mutator):
        """Later non-empty values win."""
        entries = [
            StopTimeEntry("S1", "07:58:00", "08:00:00"),
            StopTimeEntry("S1", "07:59:00", None),
            StopTimeEntry("S4", "08:30:00", "08:30:00"),
        ]
        run(mutator.rebuild_from_snapshot("T1", entries))
        assert trip_rows(storage, "T1")[0] == ("S1", 1, "07:59:00", "08:00:00")

    def test_invalid_entry_rejects_whole_snapshot(self, storage, mutator):
        before = trip_rows(storage, "T1")
        entries = [
            StopTimeEntry("S1", "08:00:00", "08:00:00"),
            StopTimeEntry("S4", "08:35:00", "08:30:00"),
        ]
        with pytest.raises(ValidationError) as exc_info:
            run(mutator.rebuild_from_snapshot("T1", entries))
        assert exc_info.value.rule == "arrival_before_departure"
        assert trip_rows(storage, "T1") == before

    def test_malformed_entry_rejects_whole_snapshot(self, storage, mutator):
        before = trip_rows(storage, "T1")
        with pytest.raises(ValidationError):
            run(mutator.rebuild_from_snapshot("T1", [StopTimeEntry("S1", "8.00", None)]))
        assert trip_rows(storage, "T1") == before

    def test_empty_snapshot_removes_all_rows(self, storage, mutator):
        result = run(mutator.rebuild_from_snapshot("T1", []))
        assert result.affected_rows == 0
        assert trip_rows(storage, "T1") == []

    def test_unknown_trip(self, mutator):
        with pytest.raises(NotFoundError):
            run(mutator.rebuild_from_snapshot("NOPE", [StopTimeEntry("S1", "08:00:00", "08:00:00")]))


class TestReads:
    """Tests for current time lookups."""

    def test_current_time_prefers_departure(self, mutator):
        assert run(mutator.get_current_time("T2", "S3")) == "07:15:00"

    def test_current_time_falls_back_to_arrival(self, seeded_db, mutator):
        add_trip(seeded_db, "T8", [("S1", "06:40:00", None)])
        assert run(mutator.get_current_time("T8", "S1")) == "06:40:00"

    def test_skipped_stop_has_no_current_time(self, mutator):
        run(mutator.skip("T1", "S2"))
        assert run(mutator.get_current_time("T1", "S2")) is None

    def test_arrival_and_departure(self, mutator):
        assert run(mutator.get_current_arrival_time("T2", "S3")) == "07:14:00"
        assert run(mutator.get_current_departure_time("T2", "S3")) == "07:15:00"

    def test_missing_stop_time(self, mutator):
        assert run(mutator.get_stop_time("T1", "S5")) is None
        with pytest.raises(NotFoundError):
            run(mutator.get_current_time("T1", "S5"))
        with pytest.raises(NotFoundError):
            run(mutator.get_current_arrival_time("T1", "S5"))


class TestSequencesStayContiguous:
    """Sequences are 1..N after any sequence of edits."""

    def test_mixed_edits(self, storage, mutator):
        run(mutator.set_time("T1", "S3", "08:20:00", TimeField.DEPARTURE))
        run(mutator.set_time("T1", "S5", "07:30:00", TimeField.LINKED))
        run(mutator.set_time("T1", "S2", "08:45:00", TimeField.DEPARTURE))
        run(mutator.skip("T1", "S4"))

        rows = trip_rows(storage, "T1")
        assert [sequence for _, sequence, _, _ in rows] == [1, 2, 3, 4, 5]
        assert_consistent(storage, "T1")
