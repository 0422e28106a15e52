"""
SQLite-based record storage.

Stores entries in a local SQLite file using the same snake_case column
layout as the hosted `entries` table. No external database setup
required - just works.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..intake import (
    BackendUnavailableError,
    Entry,
    EntryFields,
    NotFoundError,
    SubmitResult,
    utcnow,
)
from .base import EntryId, RecordStore
from .field_map import ENTRY_COLUMNS, ENTRY_FIELD_COLUMNS

logger = logging.getLogger(__name__)

# Database file location
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent / "data" / "entries.db"


class SQLiteRecordStore(RecordStore):
    """
    SQLite-based storage for claim entries.

    Usage:
        store = SQLiteRecordStore(Path("data/entries.db"))
        result = store.submit("Branch A", fields)
        entries = store.list_entries("Branch A")
    """

    backend_name = "sqlite"

    def __init__(self, db_path: Optional[Path] = None, table: str = "entries"):
        """Initialize the store and create the table if needed."""
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.table = table
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as e:
            raise BackendUnavailableError(f"Cannot open SQLite database {self.db_path}: {e}")

    def _init_db(self):
        """Create tables if they don't exist."""
        field_columns = ",\n".join(
            f"                    {column} TEXT NOT NULL DEFAULT ''"
            for column in ENTRY_FIELD_COLUMNS
        )
        with self._get_connection() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    dataset_name TEXT NOT NULL,
{field_columns},
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Exact-match lookups by dataset, ordered by creation
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.table}_dataset "
                f"ON {self.table}(dataset_name, created_at)"
            )
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _parse_id(entry_id: EntryId) -> Optional[int]:
        try:
            return int(entry_id)
        except (TypeError, ValueError):
            return None

    def _row_to_entry(self, row: sqlite3.Row) -> Entry:
        """Convert a database row to Entry."""
        values = ENTRY_COLUMNS.row_to_logical(dict(row))
        return Entry.from_fields(
            row["id"],
            row["dataset_name"],
            EntryFields(**values),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _fetch(self, conn: sqlite3.Connection, dataset_name: str, entry_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {self.table} WHERE id = ? AND dataset_name = ?",
            (entry_id, dataset_name),
        ).fetchone()

    # ------------------------------------------------------------------

    def list_dataset_names(self) -> List[str]:
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT DISTINCT dataset_name FROM {self.table} ORDER BY dataset_name"
            ).fetchall()
            return [row[0] for row in rows]

    def list_entries(self, dataset_name: str) -> List[Entry]:
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM {self.table} WHERE dataset_name = ? ORDER BY created_at, id",
                (dataset_name,),
            ).fetchall()
            return [self._row_to_entry(row) for row in rows]

    def count_entries(self, dataset_name: str) -> int:
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM {self.table} WHERE dataset_name = ?",
                (dataset_name,),
            ).fetchone()
            return row[0]

    def _insert(self, dataset_name: str, fields: EntryFields) -> SubmitResult:
        now = utcnow().isoformat()
        values = fields.as_row()
        columns = ["dataset_name", *ENTRY_FIELD_COLUMNS, "created_at", "updated_at"]
        placeholders = ", ".join("?" for _ in columns)

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})",
                (dataset_name, *values, now, now),
            )
            conn.commit()
            row = self._fetch(conn, dataset_name, cursor.lastrowid)
            count = conn.execute(
                f"SELECT COUNT(*) FROM {self.table} WHERE dataset_name = ?",
                (dataset_name,),
            ).fetchone()[0]

        entry = self._row_to_entry(row)
        logger.info(f"Stored entry {entry.id} in {dataset_name!r} ({count} rows)")
        return SubmitResult(entry=entry, row_count=count)

    def _replace(self, dataset_name: str, entry_id: EntryId, fields: EntryFields) -> Entry:
        parsed = self._parse_id(entry_id)
        if parsed is None:
            raise NotFoundError("Entry not found")

        assignments = ", ".join(f"{column} = ?" for column in ENTRY_FIELD_COLUMNS)
        with self._get_connection() as conn:
            result = conn.execute(
                f"UPDATE {self.table} SET {assignments}, updated_at = ? "
                f"WHERE id = ? AND dataset_name = ?",
                (*fields.as_row(), utcnow().isoformat(), parsed, dataset_name),
            )
            conn.commit()
            if result.rowcount == 0:
                raise NotFoundError("Entry not found")
            row = self._fetch(conn, dataset_name, parsed)

        logger.info(f"Updated entry {parsed} in {dataset_name!r}")
        return self._row_to_entry(row)

    def delete_entry(self, dataset_name: str, entry_id: EntryId) -> None:
        parsed = self._parse_id(entry_id)
        if parsed is None:
            raise NotFoundError("Entry not found")

        with self._get_connection() as conn:
            result = conn.execute(
                f"DELETE FROM {self.table} WHERE id = ? AND dataset_name = ?",
                (parsed, dataset_name),
            )
            conn.commit()
            if result.rowcount == 0:
                raise NotFoundError("Entry not found")
        logger.info(f"Deleted entry {parsed} from {dataset_name!r}")
