"""Data models for the Oculog client."""

from .auth import AuthUser, Session, TokenPair
from .logs import ConditionLog, ConditionLogCreate, ConditionLogUpdate, PaginatedLogs
from .query import DateFilterPreset, ListQueryState, SortField, SortOrder
from .state import HealthStatus, LoadingState, LoadingStatus, WeatherLoadingState, WeatherStatus
from .weather import Coordinate, IPLocationResponse, UnifiedWeather

__all__ = [
    "AuthUser",
    "Session",
    "TokenPair",
    "ConditionLog",
    "ConditionLogCreate",
    "ConditionLogUpdate",
    "PaginatedLogs",
    "DateFilterPreset",
    "ListQueryState",
    "SortField",
    "SortOrder",
    "HealthStatus",
    "LoadingState",
    "LoadingStatus",
    "WeatherLoadingState",
    "WeatherStatus",
    "Coordinate",
    "IPLocationResponse",
    "UnifiedWeather",
]
