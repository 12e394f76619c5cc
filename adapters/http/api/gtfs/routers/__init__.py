from .timetable_router import router as timetable_router

__all__ = ["timetable_router"]
