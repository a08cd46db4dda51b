"""State holders consumed by the UI layer."""

from .location import LocationTracker
from .observable import Observable
from .session import SessionManager
from .sync import DataSync, InvalidDateRangeError
from .weather import WeatherSync

__all__ = [
    "DataSync",
    "InvalidDateRangeError",
    "LocationTracker",
    "Observable",
    "SessionManager",
    "WeatherSync",
]
