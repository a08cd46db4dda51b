"""Loading state unions exposed to the UI."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .weather import UnifiedWeather


class LoadingStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class LoadingState:
    """Overall app readiness: Loading, Loaded or Error(message)."""
    
    status: LoadingStatus
    message: Optional[str] = None
    
    @classmethod
    def loading(cls) -> "LoadingState":
        return cls(LoadingStatus.LOADING)
    
    @classmethod
    def loaded(cls) -> "LoadingState":
        return cls(LoadingStatus.LOADED)
    
    @classmethod
    def error(cls, message: str) -> "LoadingState":
        return cls(LoadingStatus.ERROR, message)
    
    @property
    def is_loaded(self) -> bool:
        return self.status == LoadingStatus.LOADED


class WeatherStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class WeatherLoadingState:
    """Weather panel state: Idle, Loading, Loaded(snapshot) or Error(message)."""
    
    status: WeatherStatus
    weather: Optional[UnifiedWeather] = None
    message: Optional[str] = None
    
    @classmethod
    def idle(cls) -> "WeatherLoadingState":
        return cls(WeatherStatus.IDLE)
    
    @classmethod
    def loading(cls) -> "WeatherLoadingState":
        return cls(WeatherStatus.LOADING)
    
    @classmethod
    def loaded(cls, weather: UnifiedWeather) -> "WeatherLoadingState":
        return cls(WeatherStatus.LOADED, weather=weather)
    
    @classmethod
    def error(cls, message: str) -> "WeatherLoadingState":
        return cls(WeatherStatus.ERROR, message=message)


class HealthStatus(BaseModel):
    """Response of GET /health."""
    
    status: str
