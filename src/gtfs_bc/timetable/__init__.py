"""Timetable bounded context.

Aligns the trips of a route on one stop list (TimetableBuilder) and edits
trip stop_times keeping sequences and times consistent (ScheduleMutator).
"""
