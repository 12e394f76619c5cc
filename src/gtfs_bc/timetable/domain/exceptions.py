"""Errors raised by the timetable engine.

Every error reaches the caller unchanged; the HTTP adapter maps each class
to a status code.
"""

from typing import Optional


class TimetableError(Exception):
    """Base class for timetable errors."""


class NotFoundError(TimetableError):
    """A route, service, trip set or stop_time lookup returned nothing."""


class DataIntegrityError(TimetableError):
    """The feed is internally inconsistent (e.g. stop_times reference an unknown stop)."""


class ValidationError(TimetableError):
    """A requested edit breaks a time rule. Raised before anything is written."""

    def __init__(self, message: str, rule: Optional[str] = None):
        super().__init__(message)
        self.rule = rule


class StorageError(TimetableError):
    """The storage layer failed. The original exception is kept as __cause__."""
