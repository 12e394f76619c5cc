from .route import Route, RouteType

__all__ = ["Route", "RouteType"]
