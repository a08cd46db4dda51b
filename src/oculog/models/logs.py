"""Condition log models."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .weather import UnifiedWeather


class LogFields(BaseModel):
    """Ratings, metrics and flags shared by logs and their payloads."""
    
    overall_rating: Optional[int] = None
    comments: Optional[str] = None
    
    # Symptoms
    burning: Optional[int] = None
    redness: Optional[int] = None
    itching: Optional[int] = None
    tearing: Optional[int] = None
    swelling: Optional[int] = None
    dryness: Optional[int] = None
    
    # Lifestyle
    screen_time_hours: Optional[float] = None
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[int] = None
    water_intake_liters: Optional[float] = None
    caffeine_cups: Optional[int] = None
    alcohol_units: Optional[int] = None
    stress_level: Optional[int] = None
    outdoor_hours: Optional[float] = None
    
    # Treatments
    used_artificial_tears: Optional[bool] = None
    used_warm_compress: Optional[bool] = None
    used_lid_scrub: Optional[bool] = None
    used_prescription_drops: Optional[bool] = None
    used_omega3: Optional[bool] = None
    used_humidifier: Optional[bool] = None
    
    # Environment
    wore_contacts: Optional[bool] = None
    ac_exposure: Optional[bool] = None
    heating_exposure: Optional[bool] = None
    
    treatments_notes: Optional[str] = None


class ConditionLog(LogFields):
    """
    A single day's log entry as stored on the server.
    
    Values are taken as the server returns them, without range checks.
    
    Entries are read-only snapshots; after any create/update/delete the
    list is re-fetched instead of being patched locally.
    """
    
    model_config = ConfigDict(frozen=True)
    
    id: UUID
    user_id: UUID
    log_date: str  # YYYY-MM-DD
    city: Optional[str] = None  # Older logs have no city
    created_at: str
    updated_at: str
    
    # Included by the log details endpoint
    weather: Optional[UnifiedWeather] = None
    
    @property
    def parsed_date(self) -> Optional[date]:
        try:
            return datetime.strptime(self.log_date, "%Y-%m-%d").date()
        except ValueError:
            return None
    
    @property
    def formatted_date(self) -> str:
        """Date as 'Mar 5, 2025', or the raw string if it does not parse."""
        parsed = self.parsed_date
        if parsed is None:
            return self.log_date
        return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"
    
    @property
    def truncated_comments(self) -> str:
        if self.comments is None:
            return "–"
        if len(self.comments) <= 50:
            return self.comments
        return self.comments[:47] + "..."
    
    @property
    def rating_display(self) -> str:
        if self.overall_rating is None:
            return "–"
        return str(self.overall_rating)


class RatedLogFields(LogFields):
    """Outgoing payload fields; ratings must be 0-10."""
    
    overall_rating: Optional[int] = Field(default=None, ge=0, le=10)
    burning: Optional[int] = Field(default=None, ge=0, le=10)
    redness: Optional[int] = Field(default=None, ge=0, le=10)
    itching: Optional[int] = Field(default=None, ge=0, le=10)
    tearing: Optional[int] = Field(default=None, ge=0, le=10)
    swelling: Optional[int] = Field(default=None, ge=0, le=10)
    dryness: Optional[int] = Field(default=None, ge=0, le=10)


class ConditionLogCreate(RatedLogFields):
    """Payload for POST /logs."""
    
    log_date: date
    city: str


class ConditionLogUpdate(RatedLogFields):
    """Payload for PUT /logs/{id}. Only fields that were set are sent."""
    
    log_date: Optional[date] = None
    city: Optional[str] = None


class PaginatedLogs(BaseModel):
    """One page of GET /logs."""
    
    items: list[ConditionLog] = Field(default_factory=list)
    total: int
    page: int
    page_size: int
    total_pages: int
