import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Pool options for the configured backend.

    SQLite (local runs, tests) shares one in-process connection, Postgres
    gets a real connection pool.
    """
    if settings.is_sqlite:
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_size": 20,
        "max_overflow": 30,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


# Database engine configuration
engine = create_engine(settings.DATABASE_URL, echo=False, **_engine_options())
logger.info(f"Database engine created for {engine.dialect.name}")
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.warning(f"Rolling back database session: {e}")
        db.rollback()
        raise
    finally:
        db.close()
