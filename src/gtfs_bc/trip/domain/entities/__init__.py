from .trip import Trip

__all__ = ["Trip"]
