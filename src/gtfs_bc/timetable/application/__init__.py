from .timetable_builder import TimetableBuilder
from .schedule_mutator import ScheduleMutator

__all__ = ["TimetableBuilder", "ScheduleMutator"]
