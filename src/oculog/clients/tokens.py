"""Token storage."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Optional

from tinydb import Query, TinyDB

from ..utils.config import Settings, get_settings


class TokenKey(str, Enum):
    """The two secrets the client keeps."""
    ACCESS = "accessToken"
    REFRESH = "refreshToken"


class SecretStore(ABC):
    """Persists the access and refresh tokens."""
    
    @abstractmethod
    def save(self, token: str, key: TokenKey) -> None:
        """Store ``token`` under ``key``, replacing any previous value."""
    
    @abstractmethod
    def get(self, key: TokenKey) -> Optional[str]:
        """Return the stored token, or None."""
    
    @abstractmethod
    def delete(self, key: TokenKey) -> None:
        """Remove ``key``; missing keys are not an error."""
    
    def clear_all(self) -> None:
        for key in TokenKey:
            self.delete(key)
    
    def close(self) -> None:
        """Release any underlying file."""


class MemorySecretStore(SecretStore):
    """Tokens kept in process memory only."""
    
    def __init__(self, tokens: Optional[dict[TokenKey, str]] = None):
        self._tokens: dict[TokenKey, str] = dict(tokens or {})
    
    def save(self, token: str, key: TokenKey) -> None:
        self._tokens[key] = token
    
    def get(self, key: TokenKey) -> Optional[str]:
        return self._tokens.get(key)
    
    def delete(self, key: TokenKey) -> None:
        self._tokens.pop(key, None)


class TinyDBSecretStore(SecretStore):
    """
    Tokens persisted as JSON in the data directory using TinyDB.
    
    The file is created with owner-only permissions.
    """
    
    def __init__(self, settings: Optional[Settings] = None, path: Optional[Path] = None):
        self.settings = settings or get_settings()
        self._path = path
        self._db: Optional[TinyDB] = None
    
    @property
    def db_path(self) -> Path:
        """Path to the token file."""
        path = self._path or self.settings.token_file
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    
    @property
    def db(self) -> TinyDB:
        if self._db is None:
            path = self.db_path
            path.touch(mode=0o600, exist_ok=True)
            self._db = TinyDB(path)
        return self._db
    
    def save(self, token: str, key: TokenKey) -> None:
        Secret = Query()
        self.db.upsert({"key": key.value, "token": token}, Secret.key == key.value)
    
    def get(self, key: TokenKey) -> Optional[str]:
        Secret = Query()
        results = self.db.search(Secret.key == key.value)
        if results:
            return results[0]["token"]
        return None
    
    def delete(self, key: TokenKey) -> None:
        Secret = Query()
        self.db.remove(Secret.key == key.value)
    
    def close(self) -> None:
        """Close the database file."""
        if self._db:
            self._db.close()
            self._db = None
    
    def __enter__(self) -> "TinyDBSecretStore":
        return self
    
    def __exit__(self, *args) -> None:
        self.close()
