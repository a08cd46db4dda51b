"""Log list synchronization and app start-up sequence."""

import asyncio
import time
from datetime import date
from typing import Any, Awaitable, Callable, Coroutine, Optional
from uuid import UUID

import httpx
from pydantic import ValidationError

from ..clients.errors import ApiError, InvalidResponseError, classify_error
from ..clients.location import IPLocationProvider
from ..clients.preferences import PreferenceStore
from ..models.logs import ConditionLog, ConditionLogCreate, ConditionLogUpdate, PaginatedLogs
from ..models.query import DateFilterPreset, ListQueryState, SortField, SortOrder
from ..models.state import HealthStatus, LoadingState
from ..models.weather import Coordinate
from ..utils.config import Settings, get_settings
from ..utils.logging import SYNC, get_logger
from .location import LocationTracker
from .observable import Observable
from .session import SessionManager
from .weather import WeatherSync

logger = get_logger(SYNC)

OFFLINE_MESSAGE = "API not running. Start the Oculog API server and retry."


class InvalidDateRangeError(ValueError):
    """A custom date range that cannot be applied."""


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (Jan 1 to Apr 30 is 3)."""
    months = (end.year - start.year) * 12 + end.month - start.month
    if end.day < start.day:
        months -= 1
    return months


def validate_custom_range(start: date, end: date, max_months: int) -> None:
    if start > end:
        raise InvalidDateRangeError("Start date must be before end date")
    if months_between(start, end) > max_months:
        raise InvalidDateRangeError(f"Date range cannot exceed {max_months} months")


class DataSync(Observable):
    """
    Keeps the displayed log page in step with the server.

    The server is the only source of truth: every successful create,
    update or delete is followed by a re-fetch of the current page, and
    a failed fetch leaves the previously displayed logs in place with
    ``list_error`` set.

    Also owns the start-up sequence (``load_data``) and forwards location
    changes to ``WeatherSync``.
    The chosen sort is saved in ``PreferenceStore`` and restored on start.
    """

    def __init__(
        self,
        session: SessionManager,
        settings: Optional[Settings] = None,
        weather: Optional[WeatherSync] = None,
        location: Optional[LocationTracker] = None,
        preferences: Optional[PreferenceStore] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ):
        super().__init__()
        self.session = session
        self.settings = settings or get_settings()
        self.weather = weather or WeatherSync(session, self.settings)
        self.location = location or LocationTracker(IPLocationProvider(self.settings))
        self.preferences = preferences or PreferenceStore(self.settings)

        self._clock = clock
        self._sleep = sleep
        self._today = today

        self.loading_state = LoadingState.loading()
        self.api_status = "Checking..."
        self.logs: list[ConditionLog] = []
        self.list_error: Optional[str] = None
        self.is_loading_logs = False
        self.query = self._restore_sort(ListQueryState(page_size=self.settings.page_size))

        self._last_location: Optional[Coordinate] = None
        self._tasks: set[asyncio.Task] = set()
        self.location.subscribe(self._on_location_change)

    @property
    def current_page(self) -> int:
        return self.query.current_page

    @property
    def total_pages(self) -> int:
        return self.query.total_pages

    @property
    def total_logs(self) -> int:
        return self.query.total_logs

    # Start-up

    async def load_data(self) -> None:
        """
        Health check, first page of logs, minimum loading time, then Loaded.

        Steps run strictly in order. An unreachable API ends in the Error
        state; a failed log fetch only sets ``list_error``. Location lookup
        is started last and not awaited.
        """
        start = self._clock()
        self.loading_state = LoadingState.loading()
        self._emit()

        try:
            health = await self.check_health()
        except ApiError as e:
            logger.error("Health check failed: %s", e.message)
            self.api_status = "offline"
            self._emit()
            await self._ensure_minimum_loading_time(start)
            self.loading_state = LoadingState.error(OFFLINE_MESSAGE)
            self._emit()
            return

        self.api_status = health.status
        self._emit()

        await self.refresh_logs(1)

        await self._ensure_minimum_loading_time(start)
        self.loading_state = LoadingState.loaded()
        self._emit()

        task = self.location.request_location()
        if task is not None:
            self._track(task)

    async def retry(self) -> None:
        await self.load_data()

    async def check_health(self) -> HealthStatus:
        response = await self.session.api.get("/health")
        if not response.is_success:
            raise classify_error(response.content, response.status_code)
        try:
            return HealthStatus.model_validate_json(response.content)
        except ValidationError as e:
            raise InvalidResponseError() from e

    async def _ensure_minimum_loading_time(self, start: float) -> None:
        remaining = self.settings.minimum_loading_seconds - (self._clock() - start)
        if remaining > 0:
            await self._sleep(remaining)

    # Log list

    async def refresh_logs(self, page: Optional[int] = None) -> bool:
        """
        Fetch ``page`` (default: the current page) with the active filter and sort.

        Returns True on success. On failure ``list_error`` is set and the
        displayed logs are kept.
        """
        if page is None:
            page = self.query.current_page
        params = self.query.to_params(page, self._today())

        self.is_loading_logs = True
        self._emit()

        try:
            result = await self._fetch_page(params)
        except ApiError as e:
            logger.warning("Log refresh failed: %s", e.message)
            self.list_error = f"Failed to load logs: {e.message}"
            self.is_loading_logs = False
            self._emit()
            return False

        total_pages = max(1, result.total_pages)
        self.logs = list(result.items)
        self.query = self.query.model_copy(update={
            "current_page": min(max(1, result.page), total_pages),
            "total_pages": total_pages,
            "total_logs": result.total,
        })
        self.list_error = None
        self.is_loading_logs = False
        self._emit()
        logger.info("Loaded page %d/%d (%d logs)", self.query.current_page, total_pages, result.total)
        return True

    async def _fetch_page(self, params: dict[str, Any]) -> PaginatedLogs:
        response = await self.session.authorized_request("GET", "/logs", params=params)
        if not response.is_success:
            raise classify_error(response.content, response.status_code)
        try:
            return PaginatedLogs.model_validate_json(response.content)
        except ValidationError as e:
            raise InvalidResponseError() from e

    async def go_to_page(self, page: int) -> bool:
        """Fetch ``page``; pages outside [1, total_pages] are ignored."""
        if not self.query.has_page(page):
            return False
        return await self.refresh_logs(page)

    def dismiss_list_error(self) -> None:
        self.list_error = None
        self._emit()

    def find_log(self, log_id: UUID) -> Optional[ConditionLog]:
        """The displayed log with ``log_id``, if it is on the current page."""
        for log in self.logs:
            if log.id == log_id:
                return log
        return None

    # Filter and sort (all reset to page 1)

    async def set_date_preset(self, preset: DateFilterPreset) -> bool:
        self._reset_query(date_preset=preset)
        return await self.refresh_logs(1)

    async def set_custom_range(self, start: date, end: date) -> bool:
        """Apply a custom date range of at most ``max_custom_range_months``."""
        validate_custom_range(start, end, self.settings.max_custom_range_months)

        self._reset_query(
            date_preset=DateFilterPreset.CUSTOM,
            custom_start=start,
            custom_end=end,
        )
        return await self.refresh_logs(1)

    async def set_sort(self, field: SortField, order: Optional[SortOrder] = None) -> bool:
        """
        Sort by ``field``.

        Without an explicit order, picking the current field again flips
        the direction and a new field starts descending.
        """
        if order is None:
            if field == self.query.sort_field:
                order = self.query.sort_order.toggled()
            else:
                order = SortOrder.DESC

        self._reset_query(sort_field=field, sort_order=order)
        self.preferences.set("sort_field", field.value)
        self.preferences.set("sort_order", order.value)
        return await self.refresh_logs(1)
    
    def _restore_sort(self, query: ListQueryState) -> ListQueryState:
        """Apply the sort saved by a previous run, if any."""
        try:
            field = SortField(self.preferences.get("sort_field", query.sort_field.value))
            order = SortOrder(self.preferences.get("sort_order", query.sort_order.value))
        except ValueError:
            logger.warning("Ignoring unknown saved sort preference")
            return query
        return query.model_copy(update={"sort_field": field, "sort_order": order})

    def _reset_query(self, **changes: Any) -> None:
        self.query = self.query.model_copy(update={**changes, "current_page": 1})
        self._emit()

    # Mutations

    async def create_log(self, payload: ConditionLogCreate) -> ConditionLog:
        """
        POST a new log, then re-fetch the current page.

        Raises ``ClassifiedError`` on a non-success status (e.g. kind
        duplicate_date with ``existing_log_id``), ``NetworkError`` when the
        server is unreachable.
        """
        response = await self._mutate(
            "POST", "/logs", json_body=payload.model_dump(mode="json", exclude_none=True)
        )
        return self._decode_log(response)

    async def update_log(self, log_id: UUID, payload: ConditionLogUpdate) -> ConditionLog:
        """PUT the fields set on ``payload``, then re-fetch the current page."""
        response = await self._mutate(
            "PUT", f"/logs/{log_id}", json_body=payload.model_dump(mode="json", exclude_unset=True)
        )
        return self._decode_log(response)

    async def delete_log(self, log_id: UUID) -> None:
        """DELETE a log (204 expected), then re-fetch the current page."""
        await self._mutate("DELETE", f"/logs/{log_id}")

    async def _mutate(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self.session.authorized_request(method, path, **kwargs)
        if not response.is_success:
            error = classify_error(response.content, response.status_code)
            logger.warning("%s %s failed: %s (%s)", method, path, error.kind.value, error.message)
            raise error

        logger.info("%s %s -> %s", method, path, response.status_code)
        await self.refresh_logs()
        return response

    @staticmethod
    def _decode_log(response: httpx.Response) -> ConditionLog:
        try:
            return ConditionLog.model_validate_json(response.content)
        except ValidationError as e:
            raise InvalidResponseError() from e

    # Location -> weather

    def _on_location_change(self, tracker: LocationTracker) -> None:
        coordinate = tracker.location
        if coordinate is None or coordinate == self._last_location:
            return
        self._last_location = coordinate
        self._spawn(self.weather.fetch_weather(coordinate.latitude, coordinate.longitude))

    async def retry_weather(self) -> None:
        """Re-fetch weather for the last known coordinate, or look the location up again."""
        coordinate = self.weather.last_coordinate or self.location.location
        if coordinate is None:
            task = self.location.request_location()
            if task is not None:
                self._track(task)
            return
        await self.weather.fetch_weather(coordinate.latitude, coordinate.longitude)

    # Background tasks

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        return self._track(asyncio.ensure_future(coro))

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for the location lookup and any weather fetch it triggered."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.location.aclose()
        self.preferences.close()
        await self.session.aclose()
