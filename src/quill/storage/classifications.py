"""MongoDB-backed classification log."""

from datetime import datetime
from typing import Any

from pymongo import ASCENDING
from pymongo.database import Database

from quill.notes.models import ClassificationRecord

from .client import naive_utc, retry_on_connection_failure


class MongoClassificationLog:
    """Append-only ``classifications`` collection read by analytics."""

    COLLECTION_NAME = "classifications"

    def __init__(self, database: Database[dict[str, Any]]) -> None:
        self._collection = database[self.COLLECTION_NAME]
        self._collection.create_index([("created_at", ASCENDING)])
        self._collection.create_index([("method", ASCENDING), ("created_at", ASCENDING)])

    @retry_on_connection_failure()
    def append(self, record: ClassificationRecord) -> None:
        doc = record.to_dict()
        doc["created_at"] = naive_utc(record.created_at)
        self._collection.insert_one(doc)

    @retry_on_connection_failure()
    def records_since(self, since: datetime) -> list[ClassificationRecord]:
        cursor = self._collection.find({"created_at": {"$gte": naive_utc(since)}}).sort(
            "created_at", ASCENDING
        )
        return [ClassificationRecord.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def count(self) -> int:
        return self._collection.count_documents({})


__all__ = ["MongoClassificationLog"]
