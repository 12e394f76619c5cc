from sqlalchemy import Column, String, Boolean, Date
from core.base import Base


class CalendarModel(Base):
    """SQLAlchemy model for GTFS Calendar."""

    __tablename__ = "gtfs_calendar"

    service_id = Column(String(100), primary_key=True)
    monday = Column(Boolean, nullable=False, default=False)
    tuesday = Column(Boolean, nullable=False, default=False)
    wednesday = Column(Boolean, nullable=False, default=False)
    thursday = Column(Boolean, nullable=False, default=False)
    friday = Column(Boolean, nullable=False, default=False)
    saturday = Column(Boolean, nullable=False, default=False)
    sunday = Column(Boolean, nullable=False, default=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
