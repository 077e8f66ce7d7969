"""Storage backend selection from configuration"""

from pathlib import Path

from blocknote.config import Settings
from blocknote.crud.database import make_engine
from blocknote.crud.file_storage import JsonFileStorage
from blocknote.crud.sql_storage import SqlStorage
from blocknote.crud.storage import MemoryStorage, Storage


def open_storage(settings: Settings) -> Storage:
    """Return the Storage named by settings.storage (json, sqlite or memory)."""
    if settings.storage == "memory":
        return MemoryStorage()
    if settings.storage == "sqlite":
        return SqlStorage(make_engine(settings.db_url))
    return JsonFileStorage(Path(settings.data_path), backup=settings.backup)
