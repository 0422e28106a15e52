"""
Tests for the claim entry schema and validation rules.

Covers:
- Canonical field order, labels and required fields
- Required-field validation and its error messages
- Dataset name normalisation
- Entry serialisation for the API and for spreadsheet rows
"""

import pytest

from src.intake import (
    ENTRY_FIELD_ATTRIBUTES,
    FIELD_LABELS,
    FIELD_ORDER,
    REQUIRED_FIELDS,
    Entry,
    EntryFields,
    EntryValidationError,
    normalize_dataset_name,
    validate_entry_fields,
)


# ============================================================================
# Helper Functions
# ============================================================================


def make_fields(**overrides) -> dict:
    """Payload with every required field filled."""
    data = {
        "serialNumber": "S1",
        "policyNumber": "P1",
        "claimNumber": "C1",
        "vehicleNumber": "V1",
        "title": "T1",
        "date": "2024-01-31",
    }
    data.update(overrides)
    return data


# ============================================================================
# Test: Field Definitions
# ============================================================================


class TestFieldDefinitions:
    """The ten canonical fields and their metadata."""

    def test_canonical_order(self):
        assert FIELD_ORDER == [
            "serialNumber", "caseNumber", "policyNumber", "claimNumber", "vehicleNumber",
            "court", "title", "firNumber", "date", "dateOfAccident",
        ]

    def test_every_field_has_label_and_attribute(self):
        assert set(FIELD_LABELS) == set(FIELD_ORDER)
        assert set(ENTRY_FIELD_ATTRIBUTES) == set(FIELD_ORDER)

    def test_required_fields(self):
        assert len(REQUIRED_FIELDS) == 6
        assert set(REQUIRED_FIELDS) <= set(FIELD_ORDER)
        assert "caseNumber" not in REQUIRED_FIELDS

    def test_date_label(self):
        """The `date` field is the FIR date."""
        assert FIELD_LABELS["date"] == "Date of FIR"


# ============================================================================
# Test: Validation
# ============================================================================


class TestValidation:
    """Required-field checks shared by every backend."""

    def test_valid_payload_fills_optional_fields(self):
        fields = validate_entry_fields(make_fields())
        assert fields.serial_number == "S1"
        assert fields.case_number == ""
        assert fields.date_of_accident == ""

    def test_missing_policy_number_named_by_label(self):
        data = make_fields()
        del data["policyNumber"]
        with pytest.raises(EntryValidationError) as exc:
            validate_entry_fields(data)
        assert "Policy Number" in exc.value.message
        assert exc.value.missing_fields == ["policyNumber"]

    def test_every_missing_field_reported(self):
        """All blank required fields are listed, in canonical order."""
        with pytest.raises(EntryValidationError) as exc:
            validate_entry_fields({"caseNumber": "X"})
        assert exc.value.missing_fields == REQUIRED_FIELDS
        assert exc.value.message == (
            "Missing required fields: Serial Number, Policy Number, Claim Number, "
            "Vehicle Number, Title, Date of FIR"
        )

    def test_whitespace_only_counts_as_missing(self):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry_fields(make_fields(title="   "))
        assert exc.value.missing_fields == ["title"]

    def test_none_counts_as_missing(self):
        with pytest.raises(EntryValidationError) as exc:
            validate_entry_fields(make_fields(claimNumber=None))
        assert exc.value.missing_fields == ["claimNumber"]

    def test_data_required(self):
        with pytest.raises(EntryValidationError, match="Data is required"):
            validate_entry_fields(None)

    def test_non_mapping_data_rejected(self):
        with pytest.raises(EntryValidationError, match="Data is required"):
            validate_entry_fields(["S1", "P1"])

    def test_numbers_kept_as_text(self):
        fields = validate_entry_fields(make_fields(serialNumber=42))
        assert fields.serial_number == "42"

    def test_unknown_keys_ignored(self):
        fields = validate_entry_fields(make_fields(color="red"))
        assert "color" not in fields.to_logical()

    def test_snake_case_keys_accepted(self):
        data = make_fields()
        data["fir_number"] = "FIR-9"
        assert validate_entry_fields(data).fir_number == "FIR-9"

    def test_non_text_value_rejected(self):
        with pytest.raises(EntryValidationError, match="Court"):
            validate_entry_fields(make_fields(court={"name": "High Court"}))


class TestDatasetName:
    """Dataset names must be non-empty after trimming."""

    def test_trimmed(self):
        assert normalize_dataset_name("  Branch A ") == "Branch A"

    def test_case_preserved(self):
        assert normalize_dataset_name("branch a") != normalize_dataset_name("Branch A")

    @pytest.mark.parametrize("name", [None, "", "   ", 5])
    def test_blank_rejected(self, name):
        with pytest.raises(EntryValidationError, match="Dataset name is required"):
            normalize_dataset_name(name)


# ============================================================================
# Test: Serialisation
# ============================================================================


class TestEntrySerialisation:
    """Entries rendered for the API and for spreadsheet rows."""

    def test_row_in_canonical_order(self):
        fields = EntryFields(**make_fields(firNumber="F1", dateOfAccident="2024-01-01"))
        assert fields.as_row() == [
            "S1", "", "P1", "C1", "V1", "", "T1", "F1", "2024-01-31", "2024-01-01",
        ]

    def test_to_api_shape(self):
        entry = Entry.from_fields(7, "Branch A", EntryFields(**make_fields()))
        data = entry.to_api()
        assert data["id"] == 7
        assert data["caseNumber"] == ""
        assert data["date"] == "2024-01-31"
        assert list(data)[1:11] == FIELD_ORDER

    def test_updated_at_defaults_to_created_at(self):
        entry = Entry.from_fields(1, "A", EntryFields(**make_fields()))
        assert entry.updated_at == entry.created_at

    def test_entry_fields_strips_identity(self):
        entry = Entry.from_fields(1, "A", EntryFields(**make_fields()))
        assert entry.entry_fields() == EntryFields(**make_fields())
