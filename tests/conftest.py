"""Shared fixtures: a fake Oculog backend behind httpx.MockTransport."""

from datetime import date
from typing import Any, Callable, Optional

import httpx
import pytest

from oculog.clients.api import ApiClient
from oculog.clients.location import IPLocationProvider
from oculog.clients.tokens import MemorySecretStore, TokenKey
from oculog.services import DataSync, LocationTracker, SessionManager
from oculog.utils.config import Settings

TODAY = date(2025, 3, 15)
USER_ID = "8d0c7a4e-1b2f-4c3d-9e8f-0a1b2c3d4e5f"

USER = {
    "id": USER_ID,
    "login": "ana",
    "email": "ana@example.com",
    "timezone": "Europe/Lisbon",
    "created_at": "2025-01-02T10:00:00Z",
}

WEATHER = {
    "location_name": "Lisbon",
    "latitude": 38.72,
    "longitude": -9.14,
    "temperature_c": 18.4,
    "condition": "Clouds",
    "icon_code": "04d",
    "humidity_percent": 71,
    "pressure_hpa": 1016.0,
    "air_quality_index": 2,
}


def tokens(suffix: str = "1") -> dict:
    return {
        "access_token": f"access-{suffix}",
        "refresh_token": f"refresh-{suffix}",
        "token_type": "bearer",
    }


def error_body(type_: str, message: str, data: Optional[dict] = None) -> dict:
    body: dict[str, Any] = {"type": type_, "message": message}
    if data is not None:
        body["data"] = data
    return body


def make_log(log_id: str, log_date: str = "2025-03-10", **fields: Any) -> dict:
    log = {
        "id": log_id,
        "user_id": USER_ID,
        "log_date": log_date,
        "city": "Lisbon",
        "overall_rating": 6,
        "comments": None,
        "created_at": f"{log_date}T08:00:00Z",
        "updated_at": f"{log_date}T08:00:00Z",
    }
    log.update(fields)
    return log


def make_page(items: list[dict], page: int = 1, total_pages: int = 1, total: Optional[int] = None) -> dict:
    return {
        "items": items,
        "total": len(items) if total is None else total,
        "page": page,
        "page_size": 20,
        "total_pages": total_pages,
    }


LOG_IDS = [
    "11111111-1111-4111-8111-111111111111",
    "22222222-2222-4222-8222-222222222222",
    "33333333-3333-4333-8333-333333333333",
]


class FakeBackend:
    """
    Routes requests by (method, path) to queued responders.
    
    Responders are consumed in order; the last one for a route keeps
    answering. Every request is recorded.
    """
    
    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Callable]] = {}
        self.requests: list[httpx.Request] = []
    
    def add(self, method: str, path: str, status: int = 200, json: Any = None, content: bytes = b"") -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if json is not None:
                return httpx.Response(status, json=json)
            return httpx.Response(status, content=content)
        self.add_handler(method, path, respond)
    
    def add_handler(self, method: str, path: str, handler: Callable) -> None:
        self.routes.setdefault((method, path), []).append(handler)
    
    def fail(self, method: str, path: str) -> None:
        """Make the route raise a connection error."""
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)
        self.add_handler(method, path, refuse)
    
    def handle(self, request: httpx.Request):
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json=error_body("not_found", f"No route for {request.url.path}"))
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        return handler(request)
    
    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]
    
    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        api_base_url="http://api.test",
        geolocation_url="http://geo.test/json/",
        minimum_loading_seconds=0,
        page_size=20,
        data_dir=tmp_path,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def geo() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemorySecretStore:
    return MemorySecretStore({TokenKey.ACCESS: "access-0", TokenKey.REFRESH: "refresh-0"})


@pytest.fixture
def session(settings, backend, store) -> SessionManager:
    return SessionManager(settings, api=ApiClient(settings, transport=backend.transport), store=store)


@pytest.fixture
def tracker(settings, geo) -> LocationTracker:
    return LocationTracker(IPLocationProvider(settings, transport=geo.transport))


@pytest.fixture
def sync(session, settings, tracker) -> DataSync:
    return DataSync(session, settings=settings, location=tracker, today=lambda: TODAY)
