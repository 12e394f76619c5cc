from .calendar import Calendar

__all__ = ["Calendar"]
