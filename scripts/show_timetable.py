#!/usr/bin/env python3
"""Print the aligned timetable of a route.

Stops are printed as rows in the aligned order, trips as columns ordered by
their first departure. Rows a trip does not serve are left blank.

Usage:
    python scripts/show_timetable.py ROUTE_ID SERVICE_ID
    python scripts/show_timetable.py ROUTE_ID SERVICE_ID --direction 1
    python scripts/show_timetable.py ROUTE_ID SERVICE_ID --alignment  # Also print the stop alignment
"""

import sys
import asyncio
import argparse
import logging
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.database import SessionLocal
from src.gtfs_bc.timetable.application import TimetableBuilder
from src.gtfs_bc.timetable.domain.entities import TimetableData
from src.gtfs_bc.timetable.domain.exceptions import TimetableError
from src.gtfs_bc.timetable.domain.services import AlignmentResult, visualize_alignment
from src.gtfs_bc.timetable.domain.value_objects import format_display_time
from src.gtfs_bc.timetable.infrastructure import GTFSRelationships, SQLAlchemyTableStorage

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

STOP_COLUMN_WIDTH = 30
TIME_COLUMN_WIDTH = 7


def format_timetable(timetable: TimetableData) -> str:
    """Render the timetable as a fixed-width text grid."""
    lines = []
    title = f"{timetable.route.display_name} - service {timetable.service_id}"
    if timetable.direction_name:
        title += f" - {timetable.direction_name}"
    lines.append(title)

    directions = ", ".join(f"{d.id}: {d.name} ({d.trip_count} trips)" for d in timetable.available_directions)
    lines.append(f"Directions: {directions}")
    lines.append("")

    header = "Stop".ljust(STOP_COLUMN_WIDTH)
    header += "".join(trip.trip_id[:TIME_COLUMN_WIDTH - 1].rjust(TIME_COLUMN_WIDTH) for trip in timetable.trips)
    lines.append(header)
    lines.append("-" * len(header))

    for position, stop in enumerate(timetable.stops):
        if timetable.show_split_columns:
            # Arrival and departure on two lines when they differ somewhere
            arrival_row = stop.name[:STOP_COLUMN_WIDTH - 5].ljust(STOP_COLUMN_WIDTH - 4) + "arr "
            departure_row = "".ljust(STOP_COLUMN_WIDTH - 4) + "dep "
            for trip in timetable.trips:
                arrival_row += format_display_time(trip.arrival_times.get(position)).rjust(TIME_COLUMN_WIDTH)
                departure_row += format_display_time(trip.departure_times.get(position)).rjust(TIME_COLUMN_WIDTH)
            lines.extend([arrival_row, departure_row])
        else:
            row = stop.name[:STOP_COLUMN_WIDTH - 1].ljust(STOP_COLUMN_WIDTH)
            for trip in timetable.trips:
                row += format_display_time(trip.display_times.get(position)).rjust(TIME_COLUMN_WIDTH)
            lines.append(row)

    return "\n".join(lines)


def format_alignment(timetable: TimetableData) -> str:
    """Alignment diagram of the rows each trip has times for."""
    mappings = tuple(
        tuple(position for position in range(len(timetable.stop_ids)) if trip.serves(position))
        for trip in timetable.trips
    )
    sequences = [[timetable.stop_ids[p] for p in mapping] for mapping in mappings]
    result = AlignmentResult(supersequence=timetable.stop_ids, mappings=mappings)
    return visualize_alignment(sequences, result)


async def show_timetable(db, route_id: str, service_id: str, direction_id: str = None, alignment: bool = False):
    builder = TimetableBuilder(GTFSRelationships(SQLAlchemyTableStorage(db)))
    timetable = await builder.build(route_id, service_id, direction_id)

    logger.info(
        f"Route {route_id}: {len(timetable.stops)} stops, {len(timetable.trips)} trips"
    )
    print(format_timetable(timetable))
    if alignment:
        print()
        print(format_alignment(timetable))


def main():
    parser = argparse.ArgumentParser(description='Print the aligned timetable of a route')
    parser.add_argument('route_id', help='GTFS route_id')
    parser.add_argument('service_id', help='GTFS service_id')
    parser.add_argument('--direction', default=None, help="Direction id ('0' outbound, '1' inbound)")
    parser.add_argument('--alignment', action='store_true', help='Also print the stop alignment diagram')
    args = parser.parse_args()

    db = SessionLocal()

    try:
        asyncio.run(show_timetable(db, args.route_id, args.service_id, args.direction, args.alignment))
        return 0

    except TimetableError as e:
        logger.error(f"Error: {e}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
