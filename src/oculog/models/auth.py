"""Authentication models."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class TokenPair(BaseModel):
    """Token pair returned by login, signup and refresh."""
    
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthUser(BaseModel):
    """The signed-in user, as returned by /auth/me."""
    
    id: UUID
    login: str
    email: Optional[str] = None
    timezone: Optional[str] = None
    created_at: str


class Session(BaseModel):
    """Snapshot of the authentication session exposed to the UI."""
    
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    current_user: Optional[AuthUser] = None
    is_authenticated: bool = False
    is_loading: bool = True
    error: Optional[str] = None
