from retail_pos.core.config import Settings
from retail_pos.store.base import DataStore, UnitOfWork
from retail_pos.store.memory import MemoryStore
from retail_pos.store.sql import SqlStore


def build_store(app_settings: Settings) -> DataStore:
    """Pick the store backend named by STORE_BACKEND."""
    if app_settings.STORE_BACKEND == "memory":
        return MemoryStore()
    return SqlStore(app_settings.database_url, echo=app_settings.DB_ECHO)


__all__ = ["DataStore", "UnitOfWork", "MemoryStore", "SqlStore", "build_store"]
