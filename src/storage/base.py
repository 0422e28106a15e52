"""
Record store interface.

Every backend (memory, MongoDB, Supabase, SQLite) implements the same
contract. Validation runs before any I/O so a rejected payload never writes.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Union

from ..intake import (
    Entry,
    EntryFields,
    SubmitResult,
    normalize_dataset_name,
    validate_entry_fields,
)

EntryId = Union[int, str]


class RecordStore(ABC):
    """
    Named datasets of claim entries.

    Usage:
        store = MemoryRecordStore()

        # Submit (creates the dataset implicitly)
        result = store.submit("Branch A", {"serialNumber": "S1", ...})

        # Read back in creation order
        entries = store.list_entries("Branch A")

        # Replace all fields / remove
        store.update_entry("Branch A", result.entry.id, {...})
        store.delete_entry("Branch A", result.entry.id)
    """

    backend_name = "abstract"

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def submit(self, dataset_name: Any, fields: Optional[Mapping[str, Any]]) -> SubmitResult:
        """
        Append a new entry to a dataset.

        Raises:
            EntryValidationError: blank dataset name or missing required fields
        """
        name = normalize_dataset_name(dataset_name)
        validated = validate_entry_fields(fields)
        return self._insert(name, validated)

    def update_entry(
        self,
        dataset_name: str,
        entry_id: EntryId,
        fields: Optional[Mapping[str, Any]],
    ) -> Entry:
        """
        Replace every field of an entry, keeping its id and position.

        Raises:
            EntryValidationError: missing required fields
            NotFoundError: id does not resolve inside that dataset
        """
        validated = validate_entry_fields(fields)
        return self._replace(dataset_name, entry_id, validated)

    @abstractmethod
    def list_dataset_names(self) -> List[str]:
        """Distinct names of datasets holding at least one entry, sorted."""

    @abstractmethod
    def list_entries(self, dataset_name: str) -> List[Entry]:
        """Entries of a dataset in creation order; [] for unknown datasets."""

    @abstractmethod
    def delete_entry(self, dataset_name: str, entry_id: EntryId) -> None:
        """
        Remove an entry.

        Raises:
            NotFoundError: id does not resolve inside that dataset
        """

    @abstractmethod
    def count_entries(self, dataset_name: str) -> int:
        """Number of entries in a dataset."""

    def dataset_exists(self, dataset_name: str) -> bool:
        return self.count_entries(dataset_name) > 0

    def close(self) -> None:
        """Release backend resources."""

    # ------------------------------------------------------------------
    # Backend hooks (called with already-validated data)
    # ------------------------------------------------------------------

    @abstractmethod
    def _insert(self, dataset_name: str, fields: EntryFields) -> SubmitResult:
        pass

    @abstractmethod
    def _replace(self, dataset_name: str, entry_id: EntryId, fields: EntryFields) -> Entry:
        pass
