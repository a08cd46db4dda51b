"""Tests for data models and the token store."""

import os
import stat
from datetime import date

import pytest
from pydantic import ValidationError

from oculog.clients.preferences import PreferenceStore
from oculog.clients.tokens import TinyDBSecretStore, TokenKey
from oculog.models import (
    ConditionLog,
    ConditionLogCreate,
    ConditionLogUpdate,
    DateFilterPreset,
    IPLocationResponse,
    ListQueryState,
    SortField,
    SortOrder,
    UnifiedWeather,
)

from conftest import LOG_IDS, TODAY, WEATHER, make_log


class TestConditionLog:
    """Tests for the ConditionLog display helpers."""
    
    def test_formatted_date(self):
        log = ConditionLog.model_validate(make_log(LOG_IDS[0], "2025-03-05"))
        assert log.formatted_date == "Mar 5, 2025"
        assert log.parsed_date == date(2025, 3, 5)
    
    def test_unparseable_date_is_shown_raw(self):
        log = ConditionLog.model_validate(make_log(LOG_IDS[0], "soon"))
        assert log.parsed_date is None
        assert log.formatted_date == "soon"
    
    def test_comments(self):
        """Long comments are cut to 47 characters plus an ellipsis."""
        assert ConditionLog.model_validate(make_log(LOG_IDS[0])).truncated_comments == "–"
        short = ConditionLog.model_validate(make_log(LOG_IDS[0], comments="Fine"))
        assert short.truncated_comments == "Fine"
        long = ConditionLog.model_validate(make_log(LOG_IDS[0], comments="x" * 60))
        assert long.truncated_comments == "x" * 47 + "..."
    
    def test_rating_display(self):
        assert ConditionLog.model_validate(make_log(LOG_IDS[0])).rating_display == "6"
        unrated = ConditionLog.model_validate(make_log(LOG_IDS[0], overall_rating=None))
        assert unrated.rating_display == "–"
    
    def test_logs_are_immutable(self):
        log = ConditionLog.model_validate(make_log(LOG_IDS[0]))
        with pytest.raises(ValidationError):
            log.overall_rating = 3
    
    def test_city_is_optional(self):
        log = ConditionLog.model_validate(make_log(LOG_IDS[0], city=None))
        assert log.city is None
    
    def test_rating_bounds(self):
        with pytest.raises(ValidationError):
            ConditionLogCreate(log_date=TODAY, city="Lisbon", overall_rating=11)
    
    def test_update_rating_bounds(self):
        with pytest.raises(ValidationError):
            ConditionLogUpdate(burning=-1)
        assert ConditionLogUpdate(burning=10).burning == 10
    
    def test_stored_values_are_not_range_checked(self):
        log = ConditionLog.model_validate(make_log(LOG_IDS[0], overall_rating=11, itching=-2))
        assert log.rating_display == "11"
        assert log.itching == -2


class TestListQueryState:
    """Tests for the list filter and sort state."""
    
    def test_defaults(self):
        query = ListQueryState()
        assert query.date_preset == DateFilterPreset.LAST_30_DAYS
        assert query.sort_field == SortField.DATE
        assert query.sort_order == SortOrder.DESC
        assert query.current_page == 1
    
    @pytest.mark.parametrize("preset, start", [
        (DateFilterPreset.LAST_7_DAYS, date(2025, 3, 8)),
        (DateFilterPreset.LAST_30_DAYS, date(2025, 2, 13)),
        (DateFilterPreset.LAST_3_MONTHS, date(2024, 12, 15)),
    ])
    def test_preset_ranges(self, preset, start):
        assert ListQueryState(date_preset=preset).date_range(TODAY) == (start, TODAY)
    
    def test_custom_range(self):
        query = ListQueryState(
            date_preset=DateFilterPreset.CUSTOM,
            custom_start=date(2025, 1, 1),
            custom_end=date(2025, 1, 20),
        )
        assert query.date_range(TODAY) == (date(2025, 1, 1), date(2025, 1, 20))
    
    def test_custom_without_bounds_falls_back(self):
        query = ListQueryState(date_preset=DateFilterPreset.CUSTOM)
        assert query.date_range(TODAY) == (date(2025, 2, 13), TODAY)
    
    def test_params(self):
        query = ListQueryState(sort_field=SortField.RATING, sort_order=SortOrder.ASC, page_size=10)
        assert query.to_params(3, TODAY) == {
            "start_date": "2025-02-13",
            "end_date": "2025-03-15",
            "page": 3,
            "page_size": 10,
            "sort_field": "overall_rating",
            "sort_order": "asc",
        }
    
    def test_has_page(self):
        query = ListQueryState(total_pages=2)
        assert query.has_page(1) and query.has_page(2)
        assert not query.has_page(0)
        assert not query.has_page(3)
    
    def test_toggle_order(self):
        assert SortOrder.DESC.toggled() == SortOrder.ASC
        assert SortOrder.ASC.toggled() == SortOrder.DESC


class TestWeather:
    """Tests for weather and location models."""
    
    def test_icon_name(self):
        weather = UnifiedWeather.model_validate(WEATHER)
        assert weather.icon_name == "clouds"
        assert UnifiedWeather(icon_code="01n").icon_name == "moon"
        assert UnifiedWeather(icon_code="99x").icon_name == "cloud"
        assert UnifiedWeather().icon_name == "cloud"
    
    def test_aqi_category(self):
        assert UnifiedWeather.model_validate(WEATHER).aqi_category == "Fair"
        assert UnifiedWeather(air_quality_index=5).aqi_category == "Very Poor"
        assert UnifiedWeather(air_quality_index=9).aqi_category == "Unknown"
        assert UnifiedWeather().aqi_category is None
    
    def test_summary(self):
        weather = UnifiedWeather.model_validate(WEATHER)
        assert weather.summary() == "Lisbon: 18°C, Clouds, 71% humidity, AQI Fair"
        assert UnifiedWeather().summary() == "No data"
    
    def test_location_coordinate(self):
        found = IPLocationResponse(status="success", lat=38.72, lon=-9.14, city="Lisbon")
        assert found.coordinate.latitude == 38.72
        assert IPLocationResponse(status="fail").coordinate is None
        assert IPLocationResponse(status="success", lat=1.0).coordinate is None


class TestTinyDBSecretStore:
    """Tests for the file-backed token store."""
    
    def test_save_get_delete(self, settings):
        with TinyDBSecretStore(settings) as store:
            assert store.get(TokenKey.ACCESS) is None
            store.save("a1", TokenKey.ACCESS)
            store.save("a2", TokenKey.ACCESS)
            store.save("r1", TokenKey.REFRESH)
            assert store.get(TokenKey.ACCESS) == "a2"
            
            store.delete(TokenKey.ACCESS)
            store.delete(TokenKey.ACCESS)
            assert store.get(TokenKey.ACCESS) is None
            assert store.get(TokenKey.REFRESH) == "r1"
    
    def test_persists_across_instances(self, settings):
        with TinyDBSecretStore(settings) as store:
            store.save("r1", TokenKey.REFRESH)
        with TinyDBSecretStore(settings) as store:
            assert store.get(TokenKey.REFRESH) == "r1"
            store.clear_all()
            assert store.get(TokenKey.REFRESH) is None
    
    def test_owner_only_file(self, tmp_path):
        path = tmp_path / "nested" / "tokens.json"
        with TinyDBSecretStore(path=path) as store:
            store.save("a1", TokenKey.ACCESS)
        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode & 0o077 == 0
    
    def test_close_then_reuse(self, settings):
        store = TinyDBSecretStore(settings)
        store.save("a1", TokenKey.ACCESS)
        store.close()
        assert store.get(TokenKey.ACCESS) == "a1"
        store.close()


class TestPreferenceStore:
    """Tests for the file-backed preference store."""
    
    def test_set_and_get(self, settings):
        with PreferenceStore(settings) as preferences:
            assert preferences.get("sort_field") is None
            assert preferences.get("sort_field", "log_date") == "log_date"
            preferences.set("sort_field", "overall_rating")
            preferences.set("sort_field", "log_date")
            assert preferences.get("sort_field") == "log_date"
        
        with PreferenceStore(settings) as preferences:
            assert preferences.get("sort_field") == "log_date"
        assert settings.preferences_file.exists()
