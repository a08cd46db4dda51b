"""Current-weather state for the header panel."""

from typing import Optional

from pydantic import ValidationError

from ..clients.errors import NetworkError
from ..models.state import WeatherLoadingState
from ..models.weather import Coordinate, UnifiedWeather
from ..utils.config import Settings, get_settings
from ..utils.logging import WEATHER, get_logger
from .observable import Observable
from .session import SessionManager

logger = get_logger(WEATHER)


class WeatherSync(Observable):
    """
    Fetches weather for a coordinate: idle -> loading -> loaded | error.
    
    Each fetch is numbered; a response that arrives after a newer fetch
    was started is dropped, so the exposed state always reflects the
    latest request.
    """
    
    def __init__(self, session: SessionManager, settings: Optional[Settings] = None):
        super().__init__()
        self.session = session
        self.settings = settings or get_settings()
        self.state = WeatherLoadingState.idle()
        self.last_coordinate: Optional[Coordinate] = None
        self._generation = 0
    
    @property
    def weather(self) -> Optional[UnifiedWeather]:
        return self.state.weather
    
    def _set_state(self, state: WeatherLoadingState) -> None:
        self.state = state
        self._emit()
    
    async def fetch_weather(self, latitude: float, longitude: float) -> None:
        self._generation += 1
        generation = self._generation
        self.last_coordinate = Coordinate(latitude=latitude, longitude=longitude)
        self._set_state(WeatherLoadingState.loading())
        logger.info("Fetching weather for %s, %s...", latitude, longitude)
        
        result = await self._request(latitude, longitude)
        
        if generation != self._generation:
            logger.debug("Dropping stale weather response #%d", generation)
            return
        self._set_state(result)
    
    async def _request(self, latitude: float, longitude: float) -> WeatherLoadingState:
        try:
            response = await self.session.authorized_request(
                "GET",
                "/weather",
                params={"latitude": latitude, "longitude": longitude},
                timeout=self.settings.weather_timeout,
            )
        except NetworkError as e:
            logger.error("Weather error: %s", e)
            return WeatherLoadingState.error("Weather unavailable")
        
        logger.info("Weather response: %s", response.status_code)
        if response.status_code != 200:
            return WeatherLoadingState.error(f"Weather API error ({response.status_code})")
        
        try:
            weather = UnifiedWeather.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Weather parsing error: %s", e)
            return WeatherLoadingState.error("Weather unavailable")
        
        logger.info("Weather loaded: %s", weather.location_name or "unknown")
        return WeatherLoadingState.loaded(weather)
