"""HTTP client for the Oculog REST API."""

from typing import Any, Optional

import httpx

from ..utils.config import Settings, get_settings
from ..utils.logging import NETWORK, get_logger
from .errors import NetworkError

logger = get_logger(NETWORK)


class ApiClient:
    """
    Thin async wrapper over ``httpx.AsyncClient`` bound to the API base URL.
    
    Returns raw responses whatever their status; only transport failures
    raise (as ``NetworkError``). Status handling belongs to the callers.
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
                base_url=self.settings.api_base_url,
                timeout=httpx.Timeout(self.settings.api_timeout),
                transport=self._transport,
            )
        return self._client
    
    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json_body: Any = None,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Send a request, with a bearer token when one is given.
        
        ``timeout`` overrides the client default for this call only.
        """
        kwargs: dict[str, Any] = {}
        if token:
            kwargs["headers"] = {"Authorization": f"Bearer {token}"}
        if json_body is not None:
            kwargs["json"] = json_body
        if params:
            kwargs["params"] = params
        if timeout is not None:
            kwargs["timeout"] = timeout
        
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"Unable to reach the server: {e}") from e
        
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response
    
    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)
    
    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)
    
    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
    
    async def __aenter__(self) -> "ApiClient":
        return self
    
    async def __aexit__(self, *args) -> None:
        await self.aclose()
