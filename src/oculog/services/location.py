"""Tracks the approximate location and notifies on every change."""

import asyncio
from typing import Optional

from ..clients.location import IPLocationProvider, LocationError
from ..models.weather import Coordinate
from ..utils.logging import LOCATION, get_logger
from .observable import Observable

logger = get_logger(LOCATION)


class LocationTracker(Observable):
    """Resolves the location in the background via ``IPLocationProvider``."""
    
    def __init__(self, provider: Optional[IPLocationProvider] = None):
        super().__init__()
        self.provider = provider or IPLocationProvider()
        self.location: Optional[Coordinate] = None
        self.city_name: Optional[str] = None
        self.error_message: Optional[str] = None
        self.is_requesting = False
        self._task: Optional[asyncio.Task] = None
    
    def request_location(self) -> Optional[asyncio.Task]:
        """
        Start a lookup without waiting for it.
        
        Ignored while a lookup is already running. Returns the task so
        callers that do want to wait can.
        """
        if self.is_requesting:
            return None
        
        self.error_message = None
        self.is_requesting = True
        self._emit()
        self._task = asyncio.ensure_future(self.resolve())
        return self._task
    
    async def resolve(self) -> Optional[Coordinate]:
        try:
            result = await self.provider.resolve()
        except LocationError:
            self.error_message = "Location unavailable"
        else:
            coordinate = result.coordinate
            if coordinate is None:
                logger.error("IP location failed: %s", result.status)
                self.error_message = "Could not determine location"
            else:
                logger.info(
                    "Got location: %s, %s (%s)",
                    coordinate.latitude,
                    coordinate.longitude,
                    result.city or "unknown",
                )
                self.location = coordinate
                self.city_name = result.city
                self.error_message = None
        
        self.is_requesting = False
        self._emit()
        return self.location
    
    async def aclose(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self.provider.aclose()
