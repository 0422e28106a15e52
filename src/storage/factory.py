"""
Record store selection.

Builds the backend named by ``settings.storage_backend``. When a database
backend is unavailable at startup the service either falls back to memory
storage or refuses to start, per ``storage_fallback_to_memory``.
"""

import logging

from ..intake import BackendUnavailableError
from ..utils.config import Settings
from .base import RecordStore
from .memory_store import MemoryRecordStore

logger = logging.getLogger(__name__)


def _connect(settings: Settings) -> RecordStore:
    backend = settings.storage_backend

    if backend == "memory":
        return MemoryRecordStore()

    if backend == "sqlite":
        from .sqlite_store import SQLiteRecordStore
        return SQLiteRecordStore(settings.sqlite_path, table=settings.entries_table)

    if backend == "mongodb":
        from .mongo_store import MongoRecordStore
        return MongoRecordStore.connect(
            settings.mongodb_uri,
            database=settings.mongodb_database,
            collection=settings.entries_table,
            timeout_ms=settings.mongodb_timeout_ms,
        )

    if backend == "supabase":
        from .supabase_store import SupabaseRecordStore
        return SupabaseRecordStore.connect(
            settings.supabase_url,
            settings.supabase_service_role_key,
            table=settings.entries_table,
        )

    raise ValueError(f"Unsupported storage backend: {backend}")


def create_record_store(settings: Settings) -> RecordStore:
    """
    Create the configured record store.

    Raises:
        BackendUnavailableError: backend unreachable and fallback disabled
    """
    if settings.storage_backend == "mongodb" and not settings.mongodb_configured:
        logger.warning(
            "MONGODB_URI not set. Using in-memory storage. "
            "Set MONGODB_URI in .env to use MongoDB."
        )
        return MemoryRecordStore()

    try:
        store = _connect(settings)
    except BackendUnavailableError as e:
        if not settings.storage_fallback_to_memory:
            logger.error(f"Storage backend {settings.storage_backend!r} unavailable: {e}")
            raise
        logger.warning(f"{e}. Falling back to in-memory storage")
        return MemoryRecordStore()

    logger.info(f"Using {store.backend_name} storage")
    return store
