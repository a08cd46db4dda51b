"""User preferences kept between runs."""

from pathlib import Path
from typing import Any, Optional

from tinydb import Query, TinyDB

from ..utils.config import Settings, get_settings


class PreferenceStore:
    """
    Small key/value preferences persisted in the data directory using TinyDB.

    Holds UI choices such as the log list sort, one document per key.
    """

    def __init__(self, settings: Optional[Settings] = None, path: Optional[Path] = None):
        self.settings = settings or get_settings()
        self._path = path
        self._db: Optional[TinyDB] = None

    @property
    def db_path(self) -> Path:
        """Path to the preferences file."""
        path = self._path or self.settings.preferences_file
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def db(self) -> TinyDB:
        if self._db is None:
            self._db = TinyDB(self.db_path)
        return self._db

    def get(self, key: str, default: Any = None) -> Any:
        Pref = Query()
        results = self.db.search(Pref.key == key)
        if results:
            return results[0]["value"]
        return default

    def set(self, key: str, value: Any) -> None:
        Pref = Query()
        self.db.upsert({"key": key, "value": value}, Pref.key == key)

    def close(self) -> None:
        """Close the database file."""
        if self._db:
            self._db.close()
            self._db = None

    def __enter__(self) -> "PreferenceStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()
