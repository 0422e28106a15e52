"""
Claim intake module.

Canonical entry schema, validation rules and the error taxonomy shared by
every storage backend.
"""

from .errors import (
    BackendUnavailableError,
    EntryValidationError,
    ExportError,
    NotFoundError,
    RecordStoreError,
)
from .schema import (
    # Field definitions
    FIELD_ORDER,
    FIELD_LABELS,
    REQUIRED_FIELDS,
    ENTRY_FIELD_ATTRIBUTES,
    # Models
    EntryFields,
    Entry,
    SubmitResult,
    # Validation
    normalize_dataset_name,
    validate_entry_fields,
    format_missing,
    utcnow,
)

__all__ = [
    # Errors
    "RecordStoreError",
    "EntryValidationError",
    "NotFoundError",
    "BackendUnavailableError",
    "ExportError",
    # Field definitions
    "FIELD_ORDER",
    "FIELD_LABELS",
    "REQUIRED_FIELDS",
    "ENTRY_FIELD_ATTRIBUTES",
    # Models
    "EntryFields",
    "Entry",
    "SubmitResult",
    # Validation
    "normalize_dataset_name",
    "validate_entry_fields",
    "format_missing",
    "utcnow",
]
