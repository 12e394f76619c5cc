"""Pytest configuration and fixtures."""

import os

# Tests run against in-memory SQLite; must be set before core.config is imported
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import app
from core.base import Base
from core.database import get_db
from src.gtfs_bc.calendar.infrastructure.models import CalendarModel
from src.gtfs_bc.route.infrastructure.models import RouteModel
from src.gtfs_bc.stop.infrastructure.models import StopModel
from src.gtfs_bc.timetable.infrastructure import SQLAlchemyTableStorage
import models  # noqa: F401  registers every model on Base.metadata
from tests.factories import add_trip


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def storage(db_session):
    return SQLAlchemyTableStorage(db_session)


@pytest.fixture
def seeded_db(db_session):
    """Line L1 with stops S1-S5 and a weekday and a weekend service.

    Weekday outbound trips:
        T1: S1 08:00, S2 08:10, S4 08:30
        T2: S1 07:00, S3 07:15, S4 07:30  (arrives S3 07:14)
    Weekday inbound trip:
        T3: S4 09:00, S1 09:30
    Weekend outbound trip:
        T4: S1 10:00, S5 10:20
    """
    db_session.add(RouteModel(id="L1", agency_id="AG", short_name="L1", long_name="Centro - Puerto", route_type=3))
    for index, name in enumerate(["Centro", "Mercado", "Hospital", "Puerto", "Playa"], start=1):
        db_session.add(StopModel(id=f"S{index}", name=name, lat=42.0 + index / 100, lon=-8.0, location_type=0))
    db_session.add(CalendarModel(
        service_id="WEEKDAY",
        monday=True, tuesday=True, wednesday=True, thursday=True, friday=True,
        saturday=False, sunday=False,
        start_date=date(2026, 1, 1), end_date=date(2026, 12, 31),
    ))
    db_session.commit()

    add_trip(db_session, "T1", [
        ("S1", "08:00:00", "08:00:00"),
        ("S2", "08:10:00", "08:10:00"),
        ("S4", "08:30:00", "08:30:00"),
    ], headsign="Puerto")
    add_trip(db_session, "T2", [
        ("S1", "07:00:00", "07:00:00"),
        ("S3", "07:14:00", "07:15:00"),
        ("S4", "07:30:00", "07:30:00"),
    ])
    add_trip(db_session, "T3", [
        ("S4", "09:00:00", "09:00:00"),
        ("S1", "09:30:00", "09:30:00"),
    ], direction_id=1, headsign="Centro")
    add_trip(db_session, "T4", [
        ("S1", "10:00:00", "10:00:00"),
        ("S5", "10:20:00", "10:20:00"),
    ], service_id="WEEKEND")
    return db_session


@pytest.fixture
def client(seeded_db):
    """Create a test client for the FastAPI app bound to the seeded database."""
    def override_get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_base_url():
    """Base URL for GTFS API endpoints."""
    return "/api/v1/gtfs"
