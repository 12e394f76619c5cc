"""Table storage used by the timetable engine.

The engine only talks to ``TableStorage``: query by equality filter,
merge-update one row by primary key, and atomically replace a set of rows.
``SQLAlchemyTableStorage`` is the implementation on top of the GTFS
SQLAlchemy models; it is also the only place where entity attributes are
translated to table columns.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.gtfs_bc.calendar.domain.entities import Calendar
from src.gtfs_bc.calendar.infrastructure.models import CalendarModel
from src.gtfs_bc.route.domain.entities import Route, RouteType
from src.gtfs_bc.route.infrastructure.models import RouteModel
from src.gtfs_bc.stop.domain.entities import LocationType, Stop
from src.gtfs_bc.stop.infrastructure.models import StopModel
from src.gtfs_bc.stop_time.domain.entities import StopTime
from src.gtfs_bc.stop_time.infrastructure.models import StopTimeModel
from src.gtfs_bc.timetable.domain.exceptions import NotFoundError, StorageError
from src.gtfs_bc.trip.domain.entities import Trip
from src.gtfs_bc.trip.infrastructure.models import TripModel

logger = logging.getLogger(__name__)

Key = Tuple[Any, ...]


class TableStorage(ABC):
    """Interface for the row storage behind the timetable engine.

    Rows are domain entities (StopTime, Trip, ...). Filters and update
    fields use entity attribute names.
    """

    @abstractmethod
    async def query_rows(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Rows matching every equality filter. No ordering is guaranteed."""
        pass

    @abstractmethod
    async def update_row(self, table: str, key: Key, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into the row identified by ``key``."""
        pass

    @abstractmethod
    async def replace_rows(self, table: str, old_keys: Sequence[Key], new_rows: Sequence[Any]) -> None:
        """Delete ``old_keys`` and insert ``new_rows`` as one all-or-nothing operation."""
        pass

    @abstractmethod
    def generate_key(self, table: str, record: Any) -> Key:
        """Primary key of ``record`` built from its GTFS key fields."""
        pass


def _route_type(value: int):
    # Extended route types (e.g. 100-1700) have no RouteType member
    try:
        return RouteType(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class TableSpec:
    """How one GTFS table maps between entity and SQLAlchemy model."""
    model: Type
    entity: Type
    key_attrs: Tuple[str, ...]
    # entity attribute -> model column, only where they differ
    columns: Dict[str, str] = field(default_factory=dict)
    converters: Dict[str, Callable[[Any], Any]] = field(default_factory=dict)

    def column(self, attr: str) -> str:
        return self.columns.get(attr, attr)

    def to_entity(self, row: Any) -> Any:
        values = {}
        for entity_field in dataclass_fields(self.entity):
            value = getattr(row, self.column(entity_field.name))
            converter = self.converters.get(entity_field.name)
            if converter is not None and value is not None:
                value = converter(value)
            values[entity_field.name] = value
        return self.entity(**values)

    def to_model(self, entity: Any) -> Any:
        return self.model(**self.model_values(
            {f.name: getattr(entity, f.name) for f in dataclass_fields(self.entity)}
        ))

    def model_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(values) - {f.name for f in dataclass_fields(self.entity)}
        if unknown:
            raise ValueError(f"Unknown fields for {self.entity.__name__}: {sorted(unknown)}")
        return {self.column(attr): value for attr, value in values.items()}


# Keys follow the GTFS reference (https://gtfs.org/schedule/reference/);
# stop_times is keyed by (trip_id, stop_sequence), not by stop_id.
TABLES: Dict[str, TableSpec] = {
    "routes": TableSpec(
        model=RouteModel,
        entity=Route,
        key_attrs=("id",),
        columns={"desc": "description"},
        converters={"route_type": _route_type},
    ),
    "stops": TableSpec(
        model=StopModel,
        entity=Stop,
        key_attrs=("id",),
        columns={"desc": "description"},
        converters={"location_type": LocationType},
    ),
    "trips": TableSpec(model=TripModel, entity=Trip, key_attrs=("id",)),
    "stop_times": TableSpec(
        model=StopTimeModel,
        entity=StopTime,
        key_attrs=("trip_id", "stop_sequence"),
    ),
    "calendar": TableSpec(model=CalendarModel, entity=Calendar, key_attrs=("service_id",)),
}


def get_table_spec(table: str) -> TableSpec:
    try:
        return TABLES[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}") from None


class SQLAlchemyTableStorage(TableStorage):
    """TableStorage backed by a SQLAlchemy session.

    ``replace_rows`` runs its deletes and inserts in one transaction and
    rolls back on any failure, so readers never see a half-replaced trip.
    """

    def __init__(self, db: Session):
        self.db = db

    async def query_rows(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        spec = get_table_spec(table)
        try:
            query = self.db.query(spec.model)
            for attr, value in (filters or {}).items():
                query = query.filter(getattr(spec.model, spec.column(attr)) == value)
            order = [getattr(spec.model, spec.column(attr)) for attr in spec.key_attrs]
            return [spec.to_entity(row) for row in query.order_by(*order).all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to query rows from {table}: {e}") from e

    async def update_row(self, table: str, key: Key, fields: Dict[str, Any]) -> None:
        spec = get_table_spec(table)
        values = spec.model_values(fields)
        try:
            row = self.db.get(spec.model, key)
            if row is None:
                raise NotFoundError(f"Record {key} not found in {table}")
            for column, value in values.items():
                setattr(row, column, value)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to update row {key} in {table}: {e}") from e

        logger.debug(f"Updated row {key} in {table}: {values}")

    async def replace_rows(self, table: str, old_keys: Sequence[Key], new_rows: Sequence[Any]) -> None:
        spec = get_table_spec(table)
        try:
            for key in old_keys:
                row = self.db.get(spec.model, key)
                if row is not None:
                    self.db.delete(row)
            # Deletes must reach the database before inserts reuse the same keys
            self.db.flush()
            self.db.add_all([spec.to_model(entity) for entity in new_rows])
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to replace rows in {table}: {e}") from e

        logger.debug(f"Replaced {len(old_keys)} rows with {len(new_rows)} rows in {table}")

    def generate_key(self, table: str, record: Any) -> Key:
        spec = get_table_spec(table)
        return tuple(getattr(record, attr) for attr in spec.key_attrs)
