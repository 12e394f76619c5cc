"""Schedule Mutator - consistent edits of a trip's stop_times.

Every edit keeps two rules on the stored rows of a trip:
- arrival_time <= departure_time on each row that has both
- stop_sequence is exactly 1..N, ordered by departure (else arrival) time

Edits to an existing row are a single keyed update. Anything that changes
the set or the time order of the rows (adding a stop, moving a stop past its
neighbour, rebuilding a trip) re-sorts and renumbers the whole trip and
writes it back with one replace_rows call.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from src.gtfs_bc.stop_time.domain.entities import StopTime
from src.gtfs_bc.timetable.domain.entities import MutationResult, StopTimeEntry, TimeField
from src.gtfs_bc.timetable.domain.exceptions import NotFoundError, ValidationError
from src.gtfs_bc.timetable.domain.value_objects import (
    MAX_TIME_LENGTH,
    fits_storage,
    is_valid_time,
    normalize_time,
    sort_key,
    time_to_seconds,
)
from src.gtfs_bc.timetable.infrastructure.storage import TableStorage

logger = logging.getLogger(__name__)

STOP_TIMES = "stop_times"


def _validated_time(value: Optional[str]) -> Optional[str]:
    """Normalize a submitted time, raising ValidationError if it is not a GTFS time."""
    normalized = normalize_time(value)
    if normalized is not None and not is_valid_time(normalized):
        raise ValidationError(
            f"Invalid time format: {value}. Must be HH:MM:SS format.",
            rule="time_format",
        )
    if normalized is not None and not fits_storage(normalized):
        raise ValidationError(
            f"Time {normalized} is longer than {MAX_TIME_LENGTH} characters.",
            rule="time_format",
        )
    return normalized


def _is_later(first: Optional[str], second: Optional[str]) -> bool:
    """True if both times are set and first is strictly later than second."""
    first, second = normalize_time(first), normalize_time(second)
    if not first or not second or not is_valid_time(first) or not is_valid_time(second):
        return False
    return time_to_seconds(first) > time_to_seconds(second)


def _resequence(rows: List[StopTime]) -> List[StopTime]:
    """Sort rows by effective time (rows without times last) and renumber 1..N."""
    ordered = sorted(rows, key=lambda row: sort_key(row.effective_time))
    return [replace(row, stop_sequence=index) for index, row in enumerate(ordered, start=1)]


def _reorder_timed(rows: List[StopTime]) -> List[StopTime]:
    """Sort the timed rows by time and renumber 1..N.

    Rows without times (skipped stops) stay in their slot.
    """
    timed = iter(sorted(
        (row for row in rows if row.effective_time),
        key=lambda row: sort_key(row.effective_time),
    ))
    ordered = [next(timed) if row.effective_time else row for row in rows]
    return [replace(row, stop_sequence=index) for index, row in enumerate(ordered, start=1)]


def _in_time_order(rows: List[StopTime]) -> bool:
    """True if the timed rows, in stop_sequence order, never go back in time.

    Rows without times (skipped stops) keep their slot and are not compared.
    """
    keys = [sort_key(row.effective_time) for row in rows if row.effective_time]
    return all(earlier <= later for earlier, later in zip(keys, keys[1:]))


class ScheduleMutator:
    """Edits stop_times through a TableStorage."""

    def __init__(self, storage: TableStorage):
        self.storage = storage

    # =========================================================================
    # READS
    # =========================================================================

    async def get_stop_time(self, trip_id: str, stop_id: str) -> Optional[StopTime]:
        """Stop time of a trip at a stop, or None.

        A trip visiting the stop twice (loop) returns its first visit.
        """
        rows = await self.storage.query_rows(STOP_TIMES, {"trip_id": trip_id, "stop_id": stop_id})
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning(f"Trip {trip_id} visits stop {stop_id} {len(rows)} times, using the first visit")
        return min(rows, key=lambda row: int(row.stop_sequence))

    async def _require_stop_time(self, trip_id: str, stop_id: str) -> StopTime:
        stop_time = await self.get_stop_time(trip_id, stop_id)
        if stop_time is None:
            raise NotFoundError(f"No stop_time found for trip {trip_id}, stop {stop_id}")
        return stop_time

    async def get_current_time(self, trip_id: str, stop_id: str) -> Optional[str]:
        """Departure time, else arrival time, else None."""
        return (await self._require_stop_time(trip_id, stop_id)).effective_time or None

    async def get_current_arrival_time(self, trip_id: str, stop_id: str) -> Optional[str]:
        return (await self._require_stop_time(trip_id, stop_id)).arrival_time or None

    async def get_current_departure_time(self, trip_id: str, stop_id: str) -> Optional[str]:
        return (await self._require_stop_time(trip_id, stop_id)).departure_time or None

    # =========================================================================
    # EDITS
    # =========================================================================

    async def set_time(
        self,
        trip_id: str,
        stop_id: str,
        value: Optional[str],
        field: TimeField = TimeField.DEPARTURE,
    ) -> MutationResult:
        """Set (or clear, with None/"") the arrival, departure or both times of a stop.

        If the trip has no row for the stop yet, one is inserted with only the
        edited field(s) set and the trip is renumbered. An edit that moves an
        existing stop past its neighbours in time also renumbers the trip;
        any other edit is a single keyed update.

        Raises:
            ValidationError: malformed time, or arrival would be after departure.
                Nothing is written in that case.
            NotFoundError: the trip does not exist (insert path only)
        """
        field = TimeField(field)
        new_time = _validated_time(value)
        fields = self._fields_for(field, new_time)

        current = sorted(
            await self.storage.query_rows(STOP_TIMES, {"trip_id": trip_id}),
            key=lambda row: int(row.stop_sequence),
        )
        existing = next((row for row in current if row.stop_id == stop_id), None)
        if existing is None:
            return await self._insert_stop_time(trip_id, stop_id, fields, current)

        if field == TimeField.ARRIVAL and _is_later(new_time, existing.departure_time):
            raise ValidationError(
                f"Arrival time {new_time} must be before or equal to departure time {existing.departure_time}",
                rule="arrival_before_departure",
            )
        if field == TimeField.DEPARTURE and _is_later(existing.arrival_time, new_time):
            raise ValidationError(
                f"Departure time {new_time} must be after or equal to arrival time {existing.arrival_time}",
                rule="arrival_before_departure",
            )

        if new_time is None:
            message = f"{field.value.capitalize()} time cleared"
        else:
            message = f"{field.value.capitalize()} time updated to {new_time}"

        edited = [replace(row, **fields) if row is existing else row for row in current]
        if not _in_time_order(edited):
            new_rows = _reorder_timed(edited)
            old_keys = [self.storage.generate_key(STOP_TIMES, row) for row in current]
            await self.storage.replace_rows(STOP_TIMES, old_keys, new_rows)
            logger.info(f"Trip {trip_id} stop {stop_id}: {message}, trip renumbered")
            return MutationResult(
                action="updated",
                trip_id=trip_id,
                stop_id=stop_id,
                affected_rows=len(new_rows),
                message=f"{message}, stops reordered",
                resequenced=True,
            )

        key = self.storage.generate_key(STOP_TIMES, existing)
        await self.storage.update_row(STOP_TIMES, key, fields)
        logger.info(f"Trip {trip_id} stop {stop_id}: {message}")

        return MutationResult(
            action="updated",
            trip_id=trip_id,
            stop_id=stop_id,
            affected_rows=1,
            message=message,
        )

    async def skip(self, trip_id: str, stop_id: str) -> MutationResult:
        """Mark a stop as not served: both times cleared, the row and its sequence kept."""
        return await self.set_time(trip_id, stop_id, None, TimeField.LINKED)

    async def rebuild_from_snapshot(self, trip_id: str, entries: Sequence[StopTimeEntry]) -> MutationResult:
        """Replace all stop_times of a trip with the given end state.

        ``entries`` is the whole trip as it should be stored. Stops missing
        from it are removed, entries with no time at all are dropped, and a
        stop listed twice keeps the later entry's non-empty values. Rows are
        ordered by time and renumbered 1..N. Columns other than the times
        (headsign, pickup type, ...) are kept from the previous row of the
        same stop.

        Raises:
            ValidationError: a malformed time, or an entry whose arrival is
                after its departure. Nothing is written in that case.
            NotFoundError: the trip does not exist
        """
        merged: Dict[str, Dict[str, Optional[str]]] = {}
        for entry in entries:
            arrival = _validated_time(entry.arrival_time)
            departure = _validated_time(entry.departure_time)
            times = merged.setdefault(entry.stop_id, {"arrival_time": None, "departure_time": None})
            if arrival:
                times["arrival_time"] = arrival
            if departure:
                times["departure_time"] = departure

        for stop_id, times in merged.items():
            if _is_later(times["arrival_time"], times["departure_time"]):
                raise ValidationError(
                    f"Stop {stop_id}: arrival time {times['arrival_time']} is after "
                    f"departure time {times['departure_time']}",
                    rule="arrival_before_departure",
                )

        await self._require_trip(trip_id)
        current = await self.storage.query_rows(STOP_TIMES, {"trip_id": trip_id})
        previous_by_stop: Dict[str, StopTime] = {}
        for row in sorted(current, key=lambda row: int(row.stop_sequence)):
            previous_by_stop.setdefault(row.stop_id, row)

        rows = []
        for stop_id, times in merged.items():
            if not times["arrival_time"] and not times["departure_time"]:
                continue
            previous = previous_by_stop.get(stop_id)
            if previous is not None:
                rows.append(replace(previous, **times))
            else:
                rows.append(StopTime(trip_id=trip_id, stop_id=stop_id, stop_sequence=0, **times))

        new_rows = _resequence(rows)
        old_keys = [self.storage.generate_key(STOP_TIMES, row) for row in current]
        await self.storage.replace_rows(STOP_TIMES, old_keys, new_rows)

        logger.info(f"Rebuilt trip {trip_id}: {len(current)} rows replaced by {len(new_rows)}")

        return MutationResult(
            action="rebuilt",
            trip_id=trip_id,
            stop_id=None,
            affected_rows=len(new_rows),
            message=f"Trip rebuilt with {len(new_rows)} stops",
            resequenced=True,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _fields_for(field: TimeField, new_time: Optional[str]) -> Dict[str, Optional[str]]:
        if field == TimeField.ARRIVAL:
            return {"arrival_time": new_time}
        if field == TimeField.DEPARTURE:
            return {"departure_time": new_time}
        return {"arrival_time": new_time, "departure_time": new_time}

    async def _require_trip(self, trip_id: str) -> None:
        if not await self.storage.query_rows("trips", {"id": trip_id}):
            raise NotFoundError(f"Trip {trip_id} not found")

    async def _insert_stop_time(
        self,
        trip_id: str,
        stop_id: str,
        fields: Dict[str, Optional[str]],
        current: List[StopTime],
    ) -> MutationResult:
        if not current:
            await self._require_trip(trip_id)

        candidate = StopTime(trip_id=trip_id, stop_id=stop_id, stop_sequence=0, **fields)
        # Existing rows go first so that on equal times the new stop lands after them
        existing = sorted(current, key=lambda row: int(row.stop_sequence))
        ordered = sorted(existing + [candidate], key=lambda row: sort_key(row.effective_time))
        position = next(index for index, row in enumerate(ordered, start=1) if row is candidate)
        new_rows = _resequence(ordered)

        old_keys = [self.storage.generate_key(STOP_TIMES, row) for row in current]
        await self.storage.replace_rows(STOP_TIMES, old_keys, new_rows)

        logger.info(f"Added stop {stop_id} to trip {trip_id} at sequence {position}")

        return MutationResult(
            action="inserted",
            trip_id=trip_id,
            stop_id=stop_id,
            affected_rows=len(new_rows),
            message=f"Added stop {stop_id} to trip at sequence {position}",
            resequenced=True,
        )
