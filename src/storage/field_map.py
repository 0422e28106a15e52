"""
Logical <-> relational column names.

The relational backends persist snake_case columns. The mapping is an
explicit table, so ``date -> date_of_fir`` is a row in the table rather
than a special case inside a string transform.
"""

from typing import Any, Dict, Iterable, Mapping, Tuple

from ..intake import FIELD_ORDER


class FieldNameMap:
    """Bidirectional key mapping; every pair round-trips."""

    def __init__(self, pairs: Iterable[Tuple[str, str]]):
        self._to_storage: Dict[str, str] = {}
        self._to_logical: Dict[str, str] = {}
        for logical, storage in pairs:
            if logical in self._to_storage or storage in self._to_logical:
                raise ValueError(f"Duplicate mapping for {logical!r} / {storage!r}")
            self._to_storage[logical] = storage
            self._to_logical[storage] = logical

    def to_storage(self, key: str) -> str:
        """Logical name -> column name. Raises KeyError for unknown keys."""
        return self._to_storage[key]

    def to_logical(self, key: str) -> str:
        """Column name -> logical name. Raises KeyError for unknown keys."""
        return self._to_logical[key]

    def logical_keys(self) -> list:
        return list(self._to_storage)

    def storage_keys(self) -> list:
        return list(self._to_logical)

    def row_to_storage(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename the mapped keys of a logical row; other keys are dropped."""
        return {
            self._to_storage[key]: value
            for key, value in values.items()
            if key in self._to_storage
        }

    def row_to_logical(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename the mapped columns of a stored row; other columns are dropped."""
        return {
            self._to_logical[key]: value
            for key, value in row.items()
            if key in self._to_logical
        }


# Column layout of the `entries` table
ENTRY_COLUMNS = FieldNameMap([
    ("serialNumber", "serial_number"),
    ("caseNumber", "case_number"),
    ("policyNumber", "policy_number"),
    ("claimNumber", "claim_number"),
    ("vehicleNumber", "vehicle_number"),
    ("court", "court"),
    ("title", "title"),
    ("firNumber", "fir_number"),
    ("date", "date_of_fir"),
    ("dateOfAccident", "date_of_accident"),
    ("datasetName", "dataset_name"),
    ("createdAt", "created_at"),
    ("updatedAt", "updated_at"),
])

# Entry field columns only, canonical order
ENTRY_FIELD_COLUMNS = [ENTRY_COLUMNS.to_storage(key) for key in FIELD_ORDER]
