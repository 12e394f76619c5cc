from .calendar_model import CalendarModel

__all__ = ["CalendarModel"]
