"""List query models: date filter, sort and pagination."""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DateFilterPreset(str, Enum):
    """Date range choices for the log list."""
    LAST_7_DAYS = "Last 7 Days"
    LAST_30_DAYS = "Last 30 Days"
    LAST_3_MONTHS = "Last 3 Months"
    CUSTOM = "Custom"
    
    @property
    def days(self) -> Optional[int]:
        """Length of the preset window, None for a custom range."""
        return {
            DateFilterPreset.LAST_7_DAYS: 7,
            DateFilterPreset.LAST_30_DAYS: 30,
            DateFilterPreset.LAST_3_MONTHS: 90,
        }.get(self)


class SortField(str, Enum):
    """Server-side sort columns."""
    DATE = "log_date"
    RATING = "overall_rating"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
    
    def toggled(self) -> "SortOrder":
        return SortOrder.ASC if self == SortOrder.DESC else SortOrder.DESC


class ListQueryState(BaseModel):
    """Filter, sort and pagination state driving GET /logs."""
    
    date_preset: DateFilterPreset = DateFilterPreset.LAST_30_DAYS
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None
    
    sort_field: SortField = SortField.DATE
    sort_order: SortOrder = SortOrder.DESC
    
    # Pagination (current_page always within [1, total_pages])
    current_page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    total_pages: int = Field(default=1, ge=1)
    total_logs: int = Field(default=0, ge=0)
    
    def date_range(self, today: date) -> tuple[date, date]:
        """
        Resolve the active filter into an inclusive (start, end) pair.
        
        Presets end today and start N days earlier. A custom preset
        without both bounds falls back to the last 30 days.
        """
        if self.date_preset == DateFilterPreset.CUSTOM:
            if self.custom_start is not None and self.custom_end is not None:
                return self.custom_start, self.custom_end
            return today - timedelta(days=30), today
        
        return today - timedelta(days=self.date_preset.days), today
    
    def to_params(self, page: int, today: date) -> dict[str, str | int]:
        """Query string for GET /logs."""
        start, end = self.date_range(today)
        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "page": page,
            "page_size": self.page_size,
            "sort_field": self.sort_field.value,
            "sort_order": self.sort_order.value,
        }
    
    def has_page(self, page: int) -> bool:
        return 1 <= page <= self.total_pages
