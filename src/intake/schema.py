"""
Canonical schema for claim intimation entries.

Defines the ten canonical fields, their labels, which of them are required,
and the pure validation shared by every storage backend.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import EntryValidationError


# ============================================================================
# Field Definitions
# ============================================================================

# Fixed serialization order used by every backend and by the export
FIELD_ORDER: List[str] = [
    "serialNumber",
    "caseNumber",
    "policyNumber",
    "claimNumber",
    "vehicleNumber",
    "court",
    "title",
    "firNumber",
    "date",
    "dateOfAccident",
]

FIELD_LABELS: Dict[str, str] = {
    "serialNumber": "Serial Number",
    "caseNumber": "Case Number",
    "policyNumber": "Policy Number",
    "claimNumber": "Claim Number",
    "vehicleNumber": "Vehicle Number",
    "court": "Court",
    "title": "Title",
    "firNumber": "FIR Number",
    "date": "Date of FIR",
    "dateOfAccident": "Date of Accident",
}

REQUIRED_FIELDS: List[str] = [
    "serialNumber",
    "policyNumber",
    "claimNumber",
    "vehicleNumber",
    "title",
    "date",
]


def utcnow() -> datetime:
    """Timezone-aware current time used for created/updated stamps."""
    return datetime.now(timezone.utc)


# ============================================================================
# Models
# ============================================================================


class EntryFields(BaseModel):
    """
    The ten free-text fields of a claim intimation.

    Attributes are snake_case; the wire/logical names are the camelCase
    aliases. Either spelling is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    serial_number: str = Field("", alias="serialNumber", description="Serial number of the intimation")
    case_number: str = Field("", alias="caseNumber", description="Court case number")
    policy_number: str = Field("", alias="policyNumber", description="Insurance policy number")
    claim_number: str = Field("", alias="claimNumber", description="Insurer claim number")
    vehicle_number: str = Field("", alias="vehicleNumber", description="Vehicle registration number")
    court: str = Field("", alias="court", description="Court hearing the matter")
    title: str = Field("", alias="title", description="Case title")
    fir_number: str = Field("", alias="firNumber", description="First Information Report number")
    date: str = Field("", alias="date", description="Date of FIR")
    date_of_accident: str = Field("", alias="dateOfAccident", description="Date of the accident")

    @field_validator(
        "serial_number", "case_number", "policy_number", "claim_number", "vehicle_number",
        "court", "title", "fir_number", "date", "date_of_accident",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        """Absent values become empty strings; numbers are kept as text."""
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def to_logical(self) -> Dict[str, str]:
        """Field values keyed by logical (camelCase) name, canonical order."""
        values = self.model_dump(by_alias=True, include=set(ENTRY_FIELD_ATTRIBUTES.values()))
        return {key: values[key] for key in FIELD_ORDER}

    def as_row(self) -> List[str]:
        """Field values in canonical order."""
        return [getattr(self, ENTRY_FIELD_ATTRIBUTES[key]) for key in FIELD_ORDER]

    def missing_required(self) -> List[str]:
        """Logical keys of required fields that are blank after trimming."""
        return [
            key for key in REQUIRED_FIELDS
            if not getattr(self, ENTRY_FIELD_ATTRIBUTES[key]).strip()
        ]


# logical key -> python attribute
ENTRY_FIELD_ATTRIBUTES: Dict[str, str] = {
    field.alias: name for name, field in EntryFields.model_fields.items()
}


class Entry(EntryFields):
    """A stored entry: the ten fields plus identity and timestamps."""

    id: Union[int, str] = Field(description="Store-assigned identifier, never reused")
    dataset: str = Field(description="Name of the dataset holding the entry")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @classmethod
    def from_fields(
        cls,
        entry_id: Union[int, str],
        dataset: str,
        fields: EntryFields,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> "Entry":
        created = created_at or utcnow()
        return cls(
            id=entry_id,
            dataset=dataset,
            created_at=created,
            updated_at=updated_at or created,
            **fields.model_dump(),
        )

    def entry_fields(self) -> EntryFields:
        """Just the ten canonical fields."""
        return EntryFields(**self.to_logical())

    def to_api(self) -> Dict[str, Any]:
        """JSON shape served to the form: ``{id, ...fields, createdAt, updatedAt}``."""
        return {
            "id": self.id,
            **self.to_logical(),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class SubmitResult:
    """
    Outcome of a submit: the new entry and the dataset's row count after it.

    row_count is None when the entry was stored but the follow-up count failed.
    """
    entry: Entry
    row_count: Optional[int]


# ============================================================================
# Validation
# ============================================================================


def format_missing(missing: List[str]) -> str:
    """Human-readable list of missing field labels."""
    return ", ".join(FIELD_LABELS[key] for key in missing)


def normalize_dataset_name(name: Any) -> str:
    """Return the trimmed dataset name, or raise if it is blank."""
    if not isinstance(name, str) or not name.strip():
        raise EntryValidationError("Dataset name is required")
    return name.strip()


def validate_entry_fields(data: Optional[Mapping[str, Any]]) -> EntryFields:
    """
    Validate a submitted field mapping.

    Pure: no I/O, identical for every backend.

    Args:
        data: Field values keyed by logical name (snake_case also accepted)

    Returns:
        EntryFields with every field present (absent ones as "")

    Raises:
        EntryValidationError: data missing, a value is not text, or any
            required field is blank. The message names every missing field.
    """
    if data is None or not isinstance(data, Mapping):
        raise EntryValidationError("Data is required")

    try:
        fields = EntryFields.model_validate(dict(data))
    except ValidationError as e:
        bad = []
        for err in e.errors():
            loc = err["loc"][0] if err["loc"] else ""
            bad.append(FIELD_LABELS.get(str(loc), str(loc)))
        raise EntryValidationError(f"Invalid values for fields: {', '.join(bad)}")

    missing = fields.missing_required()
    if missing:
        raise EntryValidationError(
            f"Missing required fields: {format_missing(missing)}",
            missing_fields=missing,
        )
    return fields
