"""Authentication session: login, signup, token refresh and logout."""

import asyncio
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..clients.api import ApiClient
from ..clients.errors import AuthError, AuthErrorKind, NetworkError, classify_error
from ..clients.tokens import SecretStore, TinyDBSecretStore, TokenKey
from ..models.auth import AuthUser, Session, TokenPair
from ..utils.config import Settings, get_settings
from ..utils.logging import AUTH, get_logger
from .observable import Observable

logger = get_logger(AUTH)

M = TypeVar("M", bound=BaseModel)


class SessionManager(Observable):
    """
    Owns the authentication state.
    
    States: unauthenticated, authenticating (``is_loading``) and
    authenticated. Tokens live in the ``SecretStore``; the exposed
    ``session`` mirrors them together with the current user and the last
    error message.
    
    ``check_auth`` renews an expired access token at most once per call.
    Concurrent refreshes share a single in-flight request.
    """
    
    def __init__(
        self,
        settings: Optional[Settings] = None,
        api: Optional[ApiClient] = None,
        store: Optional[SecretStore] = None,
    ):
        super().__init__()
        self.settings = settings or get_settings()
        self.api = api or ApiClient(self.settings)
        self.store = store if store is not None else TinyDBSecretStore(self.settings)
        self.session = Session(
            access_token=self.store.get(TokenKey.ACCESS),
            refresh_token=self.store.get(TokenKey.REFRESH),
        )
        self._refresh_task: Optional[asyncio.Task] = None
    
    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated
    
    @property
    def current_user(self) -> Optional[AuthUser]:
        return self.session.current_user
    
    @property
    def error(self) -> Optional[str]:
        return self.session.error
    
    def _update(self, **changes: Any) -> None:
        self.session = self.session.model_copy(update=changes)
        self._emit()
    
    # Session lifecycle
    
    async def check_auth(self) -> None:
        """Validate the stored access token against /auth/me."""
        self._update(is_loading=True, error=None)
        
        for attempt in range(2):
            access_token = self.store.get(TokenKey.ACCESS)
            if access_token is None:
                self._update(is_authenticated=False, current_user=None, is_loading=False)
                return
            
            try:
                user = await self._fetch_current_user(access_token)
            except AuthError as e:
                if e.kind == AuthErrorKind.UNAUTHORIZED:
                    if attempt == 0 and await self.refresh_token():
                        logger.info("Access token refreshed, re-checking identity")
                        continue
                    logger.info("Session could not be renewed, logging out")
                    self.logout()
                else:
                    logger.warning("Identity check failed: %s", e.message)
                    self._update(error=e.message, is_authenticated=False, current_user=None)
                self._update(is_loading=False)
                return
            
            logger.info("Authenticated as %s", user.login)
            self._update(current_user=user, is_authenticated=True, is_loading=False)
            return
    
    async def login(self, email: str, password: str) -> bool:
        """Log in with email and password. Returns True once authenticated."""
        return await self._authenticate("/auth/login", email, password)
    
    async def signup(self, email: str, password: str) -> bool:
        """Create an account and log in. Returns True once authenticated."""
        return await self._authenticate("/auth/signup", email, password)
    
    async def _authenticate(self, path: str, email: str, password: str) -> bool:
        self._update(is_loading=True, error=None)
        
        try:
            response = await self._auth_request(
                "POST", path, json_body={"email": email, "password": password}
            )
            tokens = self._decode(response, TokenPair)
        except AuthError as e:
            # Stored tokens are left exactly as they were
            logger.warning("%s failed: %s", path, e.kind.value)
            self._update(error=e.message, is_loading=False)
            return False
        
        self._save_tokens(tokens)
        await self.check_auth()
        return self.session.is_authenticated
    
    async def refresh_token(self) -> bool:
        """
        Exchange the stored refresh token for a new pair.
        
        Returns False when there is no refresh token or the exchange fails;
        the caller decides whether to log out. Calls made while a refresh
        is in flight wait for that refresh instead of starting another.
        """
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._perform_refresh())
        return await asyncio.shield(self._refresh_task)
    
    async def _perform_refresh(self) -> bool:
        refresh_token = self.store.get(TokenKey.REFRESH)
        if refresh_token is None:
            return False
        
        logger.info("Refreshing access token...")
        try:
            response = await self._auth_request(
                "POST", "/auth/refresh", json_body={"refresh_token": refresh_token}
            )
            tokens = self._decode(response, TokenPair)
        except AuthError as e:
            logger.warning("Token refresh failed: %s", e.message)
            return False
        
        self._save_tokens(tokens)
        logger.info("Token refreshed successfully")
        return True
    
    def logout(self) -> None:
        """Forget both tokens and the current user."""
        self.store.clear_all()
        self._update(
            access_token=None,
            refresh_token=None,
            current_user=None,
            is_authenticated=False,
            error=None,
        )
        logger.info("Logged out")
    
    # Authorized requests for the data flows
    
    async def authorized_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a bearer-authorized request to the API.
        
        On 401 the token is refreshed once and the request replayed once.
        If the refresh fails the session is logged out and the 401 response
        is returned. Transport failures raise ``NetworkError``.
        """
        token = self.store.get(TokenKey.ACCESS)
        response = await self.api.request(method, path, token=token, **kwargs)
        if response.status_code != 401 or token is None:
            return response
        
        current = self.store.get(TokenKey.ACCESS)
        if current is None or current == token:
            if not await self.refresh_token():
                logger.info("401 on %s %s and refresh failed, logging out", method, path)
                self.logout()
                return response
            current = self.store.get(TokenKey.ACCESS)
        
        return await self.api.request(method, path, token=current, **kwargs)
    
    # Helpers
    
    async def _fetch_current_user(self, access_token: str) -> AuthUser:
        response = await self._auth_request("GET", "/auth/me", token=access_token)
        return self._decode(response, AuthUser)
    
    async def _auth_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.api.request(method, path, **kwargs)
        except NetworkError as e:
            raise AuthError(AuthErrorKind.NETWORK_ERROR) from e
        
        if response.status_code >= 400:
            raise AuthError.from_classified(
                classify_error(response.content, response.status_code)
            )
        return response
    
    @staticmethod
    def _decode(response: httpx.Response, model: type[M]) -> M:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthError(
                AuthErrorKind.SERVER_ERROR,
                response.status_code,
                "Invalid response from server",
            ) from e
    
    def _save_tokens(self, tokens: TokenPair) -> None:
        """Write both tokens, or neither."""
        previous = {key: self.store.get(key) for key in TokenKey}
        try:
            self.store.save(tokens.access_token, TokenKey.ACCESS)
            self.store.save(tokens.refresh_token, TokenKey.REFRESH)
        except Exception:
            for key, value in previous.items():
                if value is None:
                    self.store.delete(key)
                else:
                    self.store.save(value, key)
            raise
        self._update(access_token=tokens.access_token, refresh_token=tokens.refresh_token)
    
    async def aclose(self) -> None:
        await self.api.aclose()
        self.store.close()
