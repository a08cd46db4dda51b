"""Configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Oculog API
    api_base_url: str = Field(default="http://localhost:8000")
    api_timeout: Optional[float] = Field(default=30.0)  # None = wait forever
    
    # Weather has its own, shorter deadline
    weather_timeout: float = Field(default=10.0)
    
    # IP geolocation (no API key required)
    geolocation_url: str = Field(default="http://ip-api.com/json/")
    geolocation_fields: str = Field(default="status,lat,lon,city,country")
    
    # Splash / readiness gate
    minimum_loading_seconds: float = Field(default=2.0, ge=0)
    
    # Log list
    page_size: int = Field(default=20, ge=1)
    max_custom_range_months: int = Field(default=3, ge=1)  # whole calendar months
    
    # Token storage
    data_dir: Path = Field(default=Path("data"))
    
    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    
    @property
    def token_file(self) -> Path:
        return self.data_dir / "tokens.json"
    
    @property
    def preferences_file(self) -> Path:
        return self.data_dir / "preferences.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
