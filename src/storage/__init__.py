"""
Storage module for persisting claim entries.

One RecordStore interface with swappable backends:
- In-memory (default, transient)
- MongoDB document collection
- Supabase/Postgres table
- Local SQLite file
"""

from .base import EntryId, RecordStore
from .factory import create_record_store
from .field_map import ENTRY_COLUMNS, ENTRY_FIELD_COLUMNS, FieldNameMap
from .memory_store import MemoryRecordStore
from .sqlite_store import SQLiteRecordStore

__all__ = [
    "EntryId",
    "RecordStore",
    "create_record_store",
    "FieldNameMap",
    "ENTRY_COLUMNS",
    "ENTRY_FIELD_COLUMNS",
    "MemoryRecordStore",
    "SQLiteRecordStore",
]
