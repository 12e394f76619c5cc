from .stop import Stop, LocationType

__all__ = ["Stop", "LocationType"]
