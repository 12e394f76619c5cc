import logging

from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing settings

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.rate_limiter import limiter, rate_limit_exceeded_handler, RateLimits

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings validation is done automatically in core/config.py on import

    app = FastAPI(
        title="Timetable Editor API",
        description="Aligned GTFS timetables and consistent schedule editing",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.DEBUG,
    )

    # CORS middleware - the editor frontend writes, so PUT is allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL] if settings.is_production else ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Register routers
    from adapters.http.api.gtfs.routers import timetable_router
    app.include_router(timetable_router, prefix="/api/v1")

    @app.get("/health")
    @limiter.limit(RateLimits.HEALTH)
    async def health_check(request: Request):
        """Health check endpoint.

        Returns 503 while the database is unreachable.
        """
        from core.database import SessionLocal

        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unavailable",
                    "message": "Database is not reachable"
                }
            )
        finally:
            db.close()

        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
        }

    return app


app = create_app()
