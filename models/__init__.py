# Models registry for Alembic autogenerate
# Import all SQLAlchemy models here so Alembic can detect them

# GTFS BC models
from src.gtfs_bc.route.infrastructure.models import RouteModel
from src.gtfs_bc.stop.infrastructure.models import StopModel
from src.gtfs_bc.trip.infrastructure.models import TripModel
from src.gtfs_bc.stop_time.infrastructure.models import StopTimeModel
from src.gtfs_bc.calendar.infrastructure.models import CalendarModel

__all__ = [
    "RouteModel",
    "StopModel",
    "TripModel",
    "StopTimeModel",
    "CalendarModel",
]
