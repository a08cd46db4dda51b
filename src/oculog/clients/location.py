"""IP-based geolocation client (ip-api.com, no API key required)."""

from typing import Optional

import httpx
from pydantic import ValidationError

from ..models.weather import IPLocationResponse
from ..utils.config import Settings, get_settings
from ..utils.logging import LOCATION, get_logger

logger = get_logger(LOCATION)


class LocationError(Exception):
    """The approximate location could not be resolved."""


class IPLocationProvider:
    """
    Resolves the machine's approximate coordinate from its public IP.
    
    Accuracy is city-level, which is all the weather lookup needs.
    """
    
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.api_timeout),
                transport=self._transport,
            )
        return self._client
    
    async def resolve(self) -> IPLocationResponse:
        """
        Look up the current location.
        
        Returns the raw lookup result, whose ``coordinate`` is None when the
        service could not place the IP. Raises LocationError on transport or
        decode failures.
        """
        logger.info("Fetching location from IP...")
        try:
            response = await self.client.get(
                self.settings.geolocation_url,
                params={"fields": self.settings.geolocation_fields},
            )
            response.raise_for_status()
            return IPLocationResponse.model_validate_json(response.content)
        except httpx.HTTPError as e:
            logger.error("IP location error: %s", e)
            raise LocationError(str(e)) from e
        except ValidationError as e:
            logger.error("IP location parsing error: %s", e)
            raise LocationError("Invalid location response") from e
    
    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
