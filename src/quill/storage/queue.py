"""MongoDB-backed enhancement queue repository."""

import logging
from typing import Any

from pymongo import ASCENDING
from pymongo.database import Database

from quill.queue.models import EnhancementQueueItem, QueueState

from .client import naive_utc, retry_on_connection_failure

logger = logging.getLogger(__name__)


class MongoQueueRepository:
    """Stores queue items in the ``enhancement_queue`` collection, keyed by item ID."""

    COLLECTION_NAME = "enhancement_queue"

    def __init__(self, database: Database[dict[str, Any]]) -> None:
        self._collection = database[self.COLLECTION_NAME]
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index([("state", ASCENDING), ("enqueued_at", ASCENDING)])
        self._collection.create_index("capture_id")

    @staticmethod
    def _to_document(item: EnhancementQueueItem) -> dict[str, Any]:
        doc = item.to_dict()
        doc["_id"] = item.id
        doc["enqueued_at"] = naive_utc(item.enqueued_at)
        doc["last_attempt_at"] = naive_utc(item.last_attempt_at)
        return doc

    @retry_on_connection_failure()
    def add(self, item: EnhancementQueueItem) -> None:
        """Insert a new item.

        Raises:
            pymongo.errors.DuplicateKeyError: If the ID is already queued
        """
        self._collection.insert_one(self._to_document(item))

    @retry_on_connection_failure()
    def update(self, item: EnhancementQueueItem) -> None:
        """Replace the stored copy of an item.

        Raises:
            KeyError: If the item was never added
        """
        result = self._collection.replace_one({"_id": item.id}, self._to_document(item))
        if result.matched_count == 0:
            raise KeyError(item.id)

    @retry_on_connection_failure()
    def get(self, item_id: str) -> EnhancementQueueItem | None:
        doc = self._collection.find_one({"_id": item_id})
        return EnhancementQueueItem.from_dict(doc) if doc is not None else None

    @retry_on_connection_failure()
    def list_by_state(self, *states: QueueState) -> list[EnhancementQueueItem]:
        cursor = self._collection.find(
            {"state": {"$in": [s.value for s in states]}}
        ).sort("enqueued_at", ASCENDING)
        return [EnhancementQueueItem.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def list_by_capture(self, capture_id: str) -> list[EnhancementQueueItem]:
        cursor = self._collection.find({"capture_id": capture_id}).sort("enqueued_at", ASCENDING)
        return [EnhancementQueueItem.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def delete_by_state(self, *states: QueueState) -> int:
        result = self._collection.delete_many({"state": {"$in": [s.value for s in states]}})
        if result.deleted_count:
            logger.debug("Deleted %d queue item(s)", result.deleted_count)
        return result.deleted_count


__all__ = ["MongoQueueRepository"]
