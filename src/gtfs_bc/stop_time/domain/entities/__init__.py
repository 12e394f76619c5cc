from .stop_time import StopTime

__all__ = ["StopTime"]
