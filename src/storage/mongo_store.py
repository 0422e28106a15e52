"""
MongoDB record storage.

One document per entry in the `entries` collection. Documents keep the
logical camelCase keys plus `datasetName`, `createdAt` and `updatedAt`.
"""

import logging
from contextlib import contextmanager
from typing import Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from ..intake import (
    BackendUnavailableError,
    Entry,
    EntryFields,
    NotFoundError,
    SubmitResult,
    utcnow,
)
from .base import EntryId, RecordStore

logger = logging.getLogger(__name__)


@contextmanager
def _driver_errors(action: str):
    """Surface driver failures as BackendUnavailableError."""
    try:
        yield
    except PyMongoError as e:
        logger.error(f"MongoDB {action} failed: {e}")
        raise BackendUnavailableError(f"MongoDB {action} failed") from e


class MongoRecordStore(RecordStore):
    """
    MongoDB-backed storage.

    Usage:
        store = MongoRecordStore.connect("mongodb://localhost:27017/claims")
        store.submit("Branch A", fields)
    """

    backend_name = "mongodb"

    def __init__(self, collection: Any, client: Optional[MongoClient] = None):
        """
        Args:
            collection: pymongo Collection holding the entries
            client: Owning client, closed by close() when given
        """
        self.collection = collection
        self.client = client

    @classmethod
    def connect(
        cls,
        uri: str,
        database: str = "claim_intake",
        collection: str = "entries",
        timeout_ms: int = 5000,
    ) -> "MongoRecordStore":
        """
        Connect, verify the server answers, and ensure the lookup index.

        Raises:
            BackendUnavailableError: server unreachable or URI invalid
        """
        try:
            client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
            client.admin.command("ping")
            db = client.get_default_database(default=database)
            coll = db[collection]
            coll.create_index([("datasetName", ASCENDING), ("createdAt", ASCENDING)])
        except (PyMongoError, ValueError) as e:
            raise BackendUnavailableError(f"Cannot connect to MongoDB: {e}") from e

        logger.info(f"Connected to MongoDB database {db.name!r}")
        return cls(coll, client=client)

    @staticmethod
    def _parse_id(entry_id: EntryId) -> Optional[ObjectId]:
        try:
            return ObjectId(str(entry_id))
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _doc_to_entry(doc: dict) -> Entry:
        return Entry.from_fields(
            str(doc["_id"]),
            doc["datasetName"],
            EntryFields(**{k: v for k, v in doc.items() if k != "_id"}),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )

    # ------------------------------------------------------------------

    def list_dataset_names(self) -> List[str]:
        with _driver_errors("distinct"):
            return sorted(self.collection.distinct("datasetName"))

    def list_entries(self, dataset_name: str) -> List[Entry]:
        with _driver_errors("find"):
            cursor = self.collection.find({"datasetName": dataset_name}).sort(
                [("createdAt", ASCENDING), ("_id", ASCENDING)]
            )
            return [self._doc_to_entry(doc) for doc in cursor]

    def count_entries(self, dataset_name: str) -> int:
        with _driver_errors("count"):
            return self.collection.count_documents({"datasetName": dataset_name})

    def _insert(self, dataset_name: str, fields: EntryFields) -> SubmitResult:
        now = utcnow()
        doc = {
            "datasetName": dataset_name,
            **fields.to_logical(),
            "createdAt": now,
            "updatedAt": now,
        }
        with _driver_errors("insert"):
            result = self.collection.insert_one(doc)

        # The insert has landed; a failed count must not turn it into an error
        try:
            count = self.collection.count_documents({"datasetName": dataset_name})
        except PyMongoError as e:
            logger.warning(f"Stored entry in {dataset_name!r} but row count failed: {e}")
            count = None

        doc["_id"] = result.inserted_id
        entry = self._doc_to_entry(doc)
        logger.info(f"Stored entry {entry.id} in {dataset_name!r} ({count} rows)")
        return SubmitResult(entry=entry, row_count=count)

    def _replace(self, dataset_name: str, entry_id: EntryId, fields: EntryFields) -> Entry:
        oid = self._parse_id(entry_id)
        if oid is None:
            raise NotFoundError("Entry not found")

        with _driver_errors("update"):
            doc = self.collection.find_one_and_update(
                {"_id": oid, "datasetName": dataset_name},
                {"$set": {**fields.to_logical(), "updatedAt": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError("Entry not found")

        logger.info(f"Updated entry {oid} in {dataset_name!r}")
        return self._doc_to_entry(doc)

    def delete_entry(self, dataset_name: str, entry_id: EntryId) -> None:
        oid = self._parse_id(entry_id)
        if oid is None:
            raise NotFoundError("Entry not found")

        with _driver_errors("delete"):
            result = self.collection.delete_one({"_id": oid, "datasetName": dataset_name})
        if result.deleted_count == 0:
            raise NotFoundError("Entry not found")
        logger.info(f"Deleted entry {oid} from {dataset_name!r}")

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
