"""
Error taxonomy for the claim intake service.

Every error is terminal for the request that raised it; nothing retries.
The HTTP layer maps each class to a status code via ``status_code``.
"""

from typing import List, Optional


class RecordStoreError(Exception):
    """Base class for all intake/storage errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EntryValidationError(RecordStoreError):
    """Client data violates the dataset-name or required-field rules."""

    status_code = 400

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        # Logical keys (camelCase), canonical order
        self.missing_fields = missing_fields or []


class NotFoundError(RecordStoreError):
    """Addressed dataset or entry does not exist."""

    status_code = 404


class BackendUnavailableError(RecordStoreError):
    """The persistence technology is unreachable or misconfigured."""

    status_code = 500


class ExportError(RecordStoreError):
    """Nothing to export."""

    status_code = 400
