"""
Storage facade: resolves exactly one backend per process and hands it out.

Precedence: MongoDB URI, then relational DATABASE_URL, then in-memory.
"""

from __future__ import annotations

import traceback

from technurture.config import Settings, settings as default_settings
from technurture.storage.base import DuplicateError, NotFoundError, Storage, StorageError
from technurture.storage.memory import MemoryStorage
from technurture.utils.log import boot_log

__all__ = [
    "Storage",
    "StorageError",
    "NotFoundError",
    "DuplicateError",
    "MemoryStorage",
    "select_backend",
    "build_storage",
    "get_storage",
    "close_storage",
]

_storage: Storage | None = None


def select_backend(settings: Settings) -> str:
    """Name of the backend the configuration asks for: mongodb, sql or memory."""
    database_url = settings.DATABASE_URL or ""
    if settings.MONGODB_URI or database_url.startswith("mongodb"):
        return "mongodb"
    if database_url:
        return "sql"
    return "memory"


def memory_storage(settings: Settings) -> MemoryStorage:
    if settings.SEED_ADMIN:
        return MemoryStorage(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    return MemoryStorage()


def build_storage(settings: Settings) -> Storage:
    """Instantiate (without connecting) the configured backend."""
    backend = select_backend(settings)
    if backend == "mongodb":
        # motor is only needed when a document store is configured
        from technurture.storage.mongo import MongoStorage
        return MongoStorage(settings.MONGODB_URI or settings.DATABASE_URL, settings.MONGODB_DB)
    if backend == "sql":
        from technurture.storage.sql import SqlStorage
        return SqlStorage(settings.DATABASE_URL)
    return memory_storage(settings)


async def get_storage(settings: Settings | None = None) -> Storage:
    """
    Return the process-wide backend, creating and connecting it on first use.

    A backend that fails to initialise is replaced by the in-memory one
    (data then stops persisting, which is logged loudly). With STORAGE_STRICT
    the failure propagates instead.
    """
    global _storage
    if _storage is not None:
        return _storage

    settings = settings or default_settings
    backend = select_backend(settings)
    boot_log.log_info_sync("storage", "Selecting storage backend", {
        "backend": backend,
        "MONGODB_URI": "[PRESENT]" if settings.MONGODB_URI else "[MISSING]",
        "DATABASE_URL": "[PRESENT]" if settings.DATABASE_URL else "[MISSING]",
    })

    storage = None
    try:
        storage = build_storage(settings)
        await storage.connect()
    except Exception as e:
        if storage is not None:
            await release(storage)
        if settings.STORAGE_STRICT or backend == "memory":
            raise
        boot_log.log_error_sync("storage", f"Failed to initialise {backend} storage, falling back to memory: {e}", {
            "traceback": traceback.format_exc(),
        })
        storage = memory_storage(settings)
        await storage.connect()

    boot_log.log_info_sync("storage", f"Using {storage.name} storage")
    _storage = storage
    return _storage


async def release(storage: Storage) -> None:
    """Close a backend that failed to connect; a failure here is logged, not raised."""
    try:
        await storage.close()
    except Exception as e:
        boot_log.log_warning_sync("storage", f"Closing {storage.name} storage after a failed connect: {e}")


async def close_storage() -> None:
    """Close the current backend and forget it; the next get_storage() builds a new one."""
    global _storage
    storage, _storage = _storage, None
    if storage is not None:
        await storage.close()
