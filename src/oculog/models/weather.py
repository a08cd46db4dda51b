"""Weather and location models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


# OpenWeather icon code -> icon name
ICON_NAMES = {
    "01d": "sun",
    "01n": "moon",
    "02d": "cloud-sun",
    "02n": "cloud-moon",
    "03d": "cloud",
    "03n": "cloud",
    "04d": "clouds",
    "04n": "clouds",
    "09d": "drizzle",
    "09n": "drizzle",
    "10d": "rain",
    "10n": "rain",
    "11d": "thunderstorm",
    "11n": "thunderstorm",
    "13d": "snow",
    "13n": "snow",
    "50d": "fog",
    "50n": "fog",
}

AQI_CATEGORIES = {
    1: "Good",
    2: "Fair",
    3: "Moderate",
    4: "Poor",
    5: "Very Poor",
}


class UnifiedWeather(BaseModel):
    """Current conditions for a location, as returned by GET /weather."""
    
    model_config = ConfigDict(frozen=True)
    
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    
    temperature_c: Optional[float] = None
    condition: Optional[str] = None
    icon_code: Optional[str] = None
    
    humidity_percent: Optional[int] = None
    pressure_hpa: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    
    # Eye irritants
    air_quality_index: Optional[int] = None
    uv_index: Optional[float] = None
    pollen_count: Optional[int] = None
    
    recorded_at: Optional[str] = None
    
    @property
    def icon_name(self) -> str:
        if self.icon_code is None:
            return "cloud"
        return ICON_NAMES.get(self.icon_code, "cloud")
    
    @property
    def aqi_category(self) -> Optional[str]:
        if self.air_quality_index is None:
            return None
        return AQI_CATEGORIES.get(self.air_quality_index, "Unknown")
    
    def summary(self) -> str:
        """One-line description, e.g. 'Portland: 12°C, Clouds'."""
        parts = []
        if self.temperature_c is not None:
            parts.append(f"{self.temperature_c:.0f}°C")
        if self.condition:
            parts.append(self.condition)
        if self.humidity_percent is not None:
            parts.append(f"{self.humidity_percent}% humidity")
        if self.aqi_category:
            parts.append(f"AQI {self.aqi_category}")
        text = ", ".join(parts) or "No data"
        if self.location_name:
            return f"{self.location_name}: {text}"
        return text


class Coordinate(BaseModel):
    """An approximate latitude/longitude pair."""
    
    model_config = ConfigDict(frozen=True)
    
    latitude: float
    longitude: float


class IPLocationResponse(BaseModel):
    """Response of the IP geolocation lookup."""
    
    status: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None
    
    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.status != "success" or self.lat is None or self.lon is None:
            return None
        return Coordinate(latitude=self.lat, longitude=self.lon)
