"""
Supabase (Postgres) record storage.

Entries live in a flat `entries` table with snake_case columns; keys are
translated through ENTRY_COLUMNS on the way in and out.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..intake import (
    BackendUnavailableError,
    Entry,
    EntryFields,
    NotFoundError,
    SubmitResult,
    utcnow,
)
from .base import EntryId, RecordStore
from .field_map import ENTRY_COLUMNS

logger = logging.getLogger(__name__)

# Rows per request; PostgREST caps each response (1000 on Supabase by default)
PAGE_SIZE = 1000

# Postgres "invalid input syntax" (e.g. a non-numeric id against a bigint key)
INVALID_TEXT_REPRESENTATION = "22P02"


@contextmanager
def _api_errors(action: str, invalid_key_not_found: bool = False):
    """Surface PostgREST failures as BackendUnavailableError."""
    try:
        yield
    except APIError as e:
        if invalid_key_not_found and getattr(e, "code", None) == INVALID_TEXT_REPRESENTATION:
            raise NotFoundError("Entry not found") from e
        logger.error(f"Supabase {action} failed: {e}")
        raise BackendUnavailableError(f"Supabase {action} failed") from e


class SupabaseRecordStore(RecordStore):
    """
    Supabase-backed storage.

    Usage:
        store = SupabaseRecordStore.connect(url, service_role_key)
        store.submit("Branch A", fields)
    """

    backend_name = "supabase"

    def __init__(self, client: Client, table: str = "entries"):
        self.client = client
        self.table = table

    @classmethod
    def connect(cls, url: Optional[str], key: Optional[str], table: str = "entries") -> "SupabaseRecordStore":
        """
        Build a client from project URL and service role key.

        Raises:
            BackendUnavailableError: credentials missing or rejected by the client
        """
        if not url or not key:
            raise BackendUnavailableError(
                "Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY"
            )
        try:
            client = create_client(url, key)
        except Exception as e:
            raise BackendUnavailableError(f"Cannot create Supabase client: {e}") from e

        logger.info(f"Using Supabase table {table!r} at {url}")
        return cls(client, table=table)

    def _query(self):
        return self.client.table(self.table)

    def _row_to_entry(self, row: dict) -> Entry:
        return Entry.from_fields(
            row["id"],
            row["dataset_name"],
            EntryFields(**ENTRY_COLUMNS.row_to_logical(row)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def _select_all(self, build_query) -> List[dict]:
        """
        Run a select page by page until a short page comes back.

        Args:
            build_query: Returns a fresh, totally ordered select builder
        """
        rows: List[dict] = []
        start = 0
        while True:
            with _api_errors("select"):
                response = build_query().range(start, start + PAGE_SIZE - 1).execute()
            rows.extend(response.data)
            if len(response.data) < PAGE_SIZE:
                return rows
            start += PAGE_SIZE

    # ------------------------------------------------------------------

    def list_dataset_names(self) -> List[str]:
        rows = self._select_all(
            lambda: self._query().select("dataset_name").order("dataset_name").order("id")
        )
        return sorted({row["dataset_name"] for row in rows})

    def list_entries(self, dataset_name: str) -> List[Entry]:
        rows = self._select_all(
            lambda: (
                self._query()
                .select("*")
                .eq("dataset_name", dataset_name)
                .order("created_at")
                .order("id")
            )
        )
        return [self._row_to_entry(row) for row in rows]

    def count_entries(self, dataset_name: str) -> int:
        with _api_errors("count"):
            response = (
                self._query()
                .select("id", count="exact")
                .eq("dataset_name", dataset_name)
                .execute()
            )
        return response.count or 0

    def _insert(self, dataset_name: str, fields: EntryFields) -> SubmitResult:
        now = utcnow().isoformat()
        row = ENTRY_COLUMNS.row_to_storage({
            **fields.to_logical(),
            "datasetName": dataset_name,
            "createdAt": now,
            "updatedAt": now,
        })
        with _api_errors("insert"):
            response = self._query().insert(row).execute()

        try:
            count = self.count_entries(dataset_name)
        except BackendUnavailableError as e:
            logger.warning(f"Stored entry in {dataset_name!r} but row count failed: {e}")
            count = None

        entry = self._row_to_entry(response.data[0])
        logger.info(f"Stored entry {entry.id} in {dataset_name!r} ({count} rows)")
        return SubmitResult(entry=entry, row_count=count)

    def _replace(self, dataset_name: str, entry_id: EntryId, fields: EntryFields) -> Entry:
        row = ENTRY_COLUMNS.row_to_storage({
            **fields.to_logical(),
            "updatedAt": utcnow().isoformat(),
        })
        with _api_errors("update", invalid_key_not_found=True):
            response = (
                self._query()
                .update(row)
                .eq("id", entry_id)
                .eq("dataset_name", dataset_name)
                .execute()
            )
        if not response.data:
            raise NotFoundError("Entry not found")

        logger.info(f"Updated entry {entry_id} in {dataset_name!r}")
        return self._row_to_entry(response.data[0])

    def delete_entry(self, dataset_name: str, entry_id: EntryId) -> None:
        with _api_errors("delete", invalid_key_not_found=True):
            response = (
                self._query()
                .delete()
                .eq("id", entry_id)
                .eq("dataset_name", dataset_name)
                .execute()
            )
        if not response.data:
            raise NotFoundError("Entry not found")
        logger.info(f"Deleted entry {entry_id} from {dataset_name!r}")
