from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from core.database import get_db
from core.rate_limiter import limiter, RateLimits
from adapters.http.api.gtfs.schemas import (
    DirectionResponse,
    MutationResponse,
    RebuildTripRequest,
    SetTimeRequest,
    TimetableResponse,
)
from src.gtfs_bc.timetable.application import ScheduleMutator, TimetableBuilder
from src.gtfs_bc.timetable.domain.entities import StopTimeEntry
from src.gtfs_bc.timetable.domain.exceptions import (
    DataIntegrityError,
    NotFoundError,
    StorageError,
    TimetableError,
    ValidationError,
)
from src.gtfs_bc.timetable.infrastructure import GTFSRelationships, SQLAlchemyTableStorage


router = APIRouter(prefix="/gtfs", tags=["GTFS Timetables"])

STATUS_CODES = {
    NotFoundError: 404,
    ValidationError: 422,
    DataIntegrityError: 409,
    StorageError: 503,
}


def to_http_exception(error: TimetableError) -> HTTPException:
    """Map a timetable error to the HTTP status the client sees."""
    status_code = next(
        (code for error_class, code in STATUS_CODES.items() if isinstance(error, error_class)),
        500,
    )
    detail = str(error)
    if isinstance(error, ValidationError) and error.rule:
        detail = {"message": str(error), "rule": error.rule}
    return HTTPException(status_code=status_code, detail=detail)


def get_builder(db: Session = Depends(get_db)) -> TimetableBuilder:
    return TimetableBuilder(GTFSRelationships(SQLAlchemyTableStorage(db)))


def get_mutator(db: Session = Depends(get_db)) -> ScheduleMutator:
    return ScheduleMutator(SQLAlchemyTableStorage(db))


@router.get("/timetables/{route_id}", response_model=TimetableResponse)
@limiter.limit(RateLimits.TIMETABLE)
async def get_timetable(
    request: Request,
    route_id: str,
    service_id: str = Query(..., description="GTFS service_id"),
    direction_id: Optional[str] = Query(None, description="Only trips of this direction ('0', '1')"),
    builder: TimetableBuilder = Depends(get_builder),
):
    """Get the aligned timetable of a route for one service.

    Stops are the rows (a shared ordering of every trip's stops), trips are
    the columns, ordered by their first departure.
    """
    try:
        timetable = await builder.build(route_id, service_id, direction_id)
    except TimetableError as e:
        raise to_http_exception(e) from e
    return TimetableResponse(**timetable.to_dict())


@router.get("/timetables/{route_id}/directions", response_model=List[DirectionResponse])
@limiter.limit(RateLimits.DIRECTIONS)
async def get_timetable_directions(
    request: Request,
    route_id: str,
    service_id: str = Query(..., description="GTFS service_id"),
    builder: TimetableBuilder = Depends(get_builder),
):
    """Get the directions of a route/service with their trip counts."""
    try:
        directions = await builder.get_available_directions(route_id, service_id)
    except TimetableError as e:
        raise to_http_exception(e) from e
    return [DirectionResponse.model_validate(direction) for direction in directions]


@router.put("/trips/{trip_id}/stop-times/{stop_id}", response_model=MutationResponse)
@limiter.limit(RateLimits.SCHEDULE_EDIT)
async def set_stop_time(
    request: Request,
    trip_id: str,
    stop_id: str,
    body: SetTimeRequest,
    mutator: ScheduleMutator = Depends(get_mutator),
):
    """Set the arrival, departure or both (linked) times of a stop.

    If the trip does not serve the stop yet, the stop is added and the trip
    is renumbered by time.
    """
    try:
        result = await mutator.set_time(trip_id, stop_id, body.value, body.field)
    except TimetableError as e:
        raise to_http_exception(e) from e
    return MutationResponse.model_validate(result)


@router.post("/trips/{trip_id}/stop-times/{stop_id}/skip", response_model=MutationResponse)
@limiter.limit(RateLimits.SCHEDULE_EDIT)
async def skip_stop(
    request: Request,
    trip_id: str,
    stop_id: str,
    mutator: ScheduleMutator = Depends(get_mutator),
):
    """Mark a stop as not served by the trip (times cleared, row kept)."""
    try:
        result = await mutator.skip(trip_id, stop_id)
    except TimetableError as e:
        raise to_http_exception(e) from e
    return MutationResponse.model_validate(result)


@router.put("/trips/{trip_id}/stop-times", response_model=MutationResponse)
@limiter.limit(RateLimits.SCHEDULE_REBUILD)
async def rebuild_trip_stop_times(
    request: Request,
    trip_id: str,
    body: RebuildTripRequest,
    mutator: ScheduleMutator = Depends(get_mutator),
):
    """Replace every stop_time of a trip with the submitted stop list."""
    entries = [
        StopTimeEntry(
            stop_id=entry.stop_id,
            arrival_time=entry.arrival_time,
            departure_time=entry.departure_time,
        )
        for entry in body.entries
    ]
    try:
        result = await mutator.rebuild_from_snapshot(trip_id, entries)
    except TimetableError as e:
        raise to_http_exception(e) from e
    return MutationResponse.model_validate(result)
