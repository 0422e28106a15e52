"""
Tests for the MongoDB adapter.

Runs against an in-test stand-in for the handful of pymongo Collection
calls the adapter makes, so no server is needed.
"""

from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from src.intake import BackendUnavailableError, EntryValidationError, NotFoundError
from src.storage.mongo_store import MongoRecordStore


# ============================================================================
# Helper Functions
# ============================================================================


def make_fields(**overrides) -> dict:
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


def _matches(doc: dict, query: dict) -> bool:
    return all(doc.get(k) == v for k, v in query.items())


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, keys):
        for key, _direction in reversed(keys):
            self.docs.sort(key=lambda d: d[key])
        return self

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    """Minimal in-memory Collection."""

    def __init__(self):
        self.docs = []

    def distinct(self, key):
        return list(dict.fromkeys(d[key] for d in self.docs))

    def find(self, query):
        return FakeCursor([dict(d) for d in self.docs if _matches(d, query)])

    def count_documents(self, query):
        return sum(1 for d in self.docs if _matches(d, query))

    def insert_one(self, doc):
        stored = dict(doc)
        stored["_id"] = ObjectId()
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def find_one_and_update(self, query, update, return_document=None):
        for d in self.docs:
            if _matches(d, query):
                d.update(update["$set"])
                return dict(d)
        return None

    def delete_one(self, query):
        for i, d in enumerate(self.docs):
            if _matches(d, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FailingCollection(FakeCollection):
    def count_documents(self, query):
        raise ServerSelectionTimeoutError("no servers")


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def mongo_store(collection):
    return MongoRecordStore(collection)


# ============================================================================
# Tests
# ============================================================================


class TestMongoRecordStore:

    def test_submit_persists_camel_case_document(self, mongo_store, collection):
        result = mongo_store.submit("Branch A", make_fields())

        assert result.row_count == 1
        doc = collection.docs[0]
        assert doc["datasetName"] == "Branch A"
        assert doc["policyNumber"] == "P1"
        assert doc["caseNumber"] == ""
        assert "createdAt" in doc and "updatedAt" in doc
        assert result.entry.id == str(doc["_id"])

    def test_list_entries_in_creation_order(self, mongo_store):
        for i in range(3):
            mongo_store.submit("Branch A", make_fields(serialNumber=f"S{i}"))
        assert [e.serial_number for e in mongo_store.list_entries("Branch A")] == ["S0", "S1", "S2"]

    def test_dataset_names_sorted_distinct(self, mongo_store):
        for name in ["B", "A", "B"]:
            mongo_store.submit(name, make_fields())
        assert mongo_store.list_dataset_names() == ["A", "B"]

    def test_update_replaces_fields(self, mongo_store, collection):
        entry = mongo_store.submit("Branch A", make_fields(court="Old")).entry
        updated = mongo_store.update_entry("Branch A", entry.id, make_fields(title="New"))
        assert updated.title == "New"
        assert updated.court == ""
        assert collection.docs[0]["court"] == ""

    def test_update_scoped_to_dataset(self, mongo_store):
        entry = mongo_store.submit("Branch A", make_fields()).entry
        with pytest.raises(NotFoundError):
            mongo_store.update_entry("Branch B", entry.id, make_fields())

    def test_malformed_object_id_not_found(self, mongo_store):
        with pytest.raises(NotFoundError):
            mongo_store.delete_entry("Branch A", "12")

    def test_delete_twice(self, mongo_store):
        entry = mongo_store.submit("Branch A", make_fields()).entry
        mongo_store.delete_entry("Branch A", entry.id)
        with pytest.raises(NotFoundError):
            mongo_store.delete_entry("Branch A", entry.id)
        assert mongo_store.list_dataset_names() == []

    def test_validation_before_io(self, mongo_store, collection):
        with pytest.raises(EntryValidationError):
            mongo_store.submit("Branch A", {"serialNumber": "S1"})
        assert collection.docs == []

    def test_driver_failure_surfaces(self):
        store = MongoRecordStore(FailingCollection())
        with pytest.raises(BackendUnavailableError):
            store.count_entries("Branch A")

    def test_row_count_failure_after_insert_still_stored(self):
        collection = FailingCollection()
        store = MongoRecordStore(collection)

        result = store.submit("Branch A", make_fields())

        assert result.row_count is None
        assert len(collection.docs) == 1
        assert result.entry.id == str(collection.docs[0]["_id"])

    def test_close_without_client(self, mongo_store):
        mongo_store.close()
