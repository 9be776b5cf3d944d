from pickleball.store.base import EntityKind, EntityStore, RECORD_TYPES
from pickleball.store.memory import MemoryStore
from pickleball.store.sql import SQLStore


def create_store(settings) -> EntityStore:
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        return SQLStore(database_url=settings.DATABASE_URL)
    raise ValueError(f"Unsupported store backend: {settings.STORE_BACKEND}")


__all__ = ["EntityKind", "EntityStore", "RECORD_TYPES", "MemoryStore", "SQLStore", "create_store"]
