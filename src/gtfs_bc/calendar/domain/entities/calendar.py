from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Calendar:
    """GTFS Calendar entity - represents service availability by day."""

    service_id: str
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    sunday: bool
    start_date: date
    end_date: date

    @property
    def weekdays(self) -> list:
        """Names of the weekdays this service runs on, Monday first."""
        names = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
        return [name for name in names if getattr(self, name)]
