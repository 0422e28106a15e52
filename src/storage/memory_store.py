"""
In-memory record store.

Transient storage owned by a single store instance. Each dataset's entry
list is guarded by its own lock; ids come from one monotonic counter.
"""

import itertools
import logging
import threading
from typing import Dict, List, Optional

from ..intake import Entry, EntryFields, NotFoundError, SubmitResult, utcnow
from .base import EntryId, RecordStore

logger = logging.getLogger(__name__)


class _Dataset:
    """Entries of one dataset plus the lock serialising writes to them."""

    def __init__(self):
        self.lock = threading.Lock()
        self.entries: List[Entry] = []
        # Set once the dataset has been dropped from the registry
        self.removed = False

    def index_of(self, entry_id: int) -> Optional[int]:
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return index
        return None


class MemoryRecordStore(RecordStore):
    """
    Process-local storage.

    A dataset is dropped from the registry when its last entry is deleted.
    Lock order is registry lock, then dataset lock; a submit that loses a
    race with the removal retries on a fresh dataset.
    """

    backend_name = "memory"

    def __init__(self):
        self._datasets: Dict[str, _Dataset] = {}
        self._registry_lock = threading.Lock()
        self._id_lock = threading.Lock()
        self._ids = itertools.count(1)

    def _get(self, dataset_name: str) -> Optional[_Dataset]:
        with self._registry_lock:
            return self._datasets.get(dataset_name)

    def _get_or_create(self, dataset_name: str) -> _Dataset:
        with self._registry_lock:
            dataset = self._datasets.get(dataset_name)
            if dataset is None:
                dataset = _Dataset()
                self._datasets[dataset_name] = dataset
                logger.info(f"Created dataset {dataset_name!r}")
            return dataset

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    @staticmethod
    def _parse_id(entry_id: EntryId) -> Optional[int]:
        try:
            return int(entry_id)
        except (TypeError, ValueError):
            return None

    # ------------------------------------------------------------------

    def list_dataset_names(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._datasets)

    def list_entries(self, dataset_name: str) -> List[Entry]:
        dataset = self._get(dataset_name)
        if dataset is None:
            return []
        with dataset.lock:
            return [entry.model_copy() for entry in dataset.entries]

    def count_entries(self, dataset_name: str) -> int:
        dataset = self._get(dataset_name)
        if dataset is None:
            return 0
        with dataset.lock:
            return len(dataset.entries)

    def _insert(self, dataset_name: str, fields: EntryFields) -> SubmitResult:
        while True:
            dataset = self._get_or_create(dataset_name)
            with dataset.lock:
                if dataset.removed:
                    continue
                entry = Entry.from_fields(self._next_id(), dataset_name, fields)
                dataset.entries.append(entry)
                row_count = len(dataset.entries)
                break
        logger.info(f"Stored entry {entry.id} in {dataset_name!r} ({row_count} rows)")
        return SubmitResult(entry=entry.model_copy(), row_count=row_count)

    def _replace(self, dataset_name: str, entry_id: EntryId, fields: EntryFields) -> Entry:
        dataset = self._get(dataset_name)
        parsed = self._parse_id(entry_id)
        if dataset is None or parsed is None:
            raise NotFoundError("Entry not found")
        with dataset.lock:
            index = dataset.index_of(parsed)
            if index is None:
                raise NotFoundError("Entry not found")
            current = dataset.entries[index]
            updated = Entry.from_fields(
                current.id,
                dataset_name,
                fields,
                created_at=current.created_at,
                updated_at=utcnow(),
            )
            dataset.entries[index] = updated
        logger.info(f"Updated entry {parsed} in {dataset_name!r}")
        return updated.model_copy()

    def delete_entry(self, dataset_name: str, entry_id: EntryId) -> None:
        parsed = self._parse_id(entry_id)
        if parsed is None:
            raise NotFoundError("Entry not found")
        with self._registry_lock:
            dataset = self._datasets.get(dataset_name)
            if dataset is None:
                raise NotFoundError("Entry not found")
            with dataset.lock:
                index = dataset.index_of(parsed)
                if index is None:
                    raise NotFoundError("Entry not found")
                del dataset.entries[index]
                if not dataset.entries:
                    dataset.removed = True
                    del self._datasets[dataset_name]
        logger.info(f"Deleted entry {parsed} from {dataset_name!r}")
