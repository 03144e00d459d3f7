"""Note repository for MongoDB storage.

The persistence sink for processed sections: one document per section with
its extraction result and classification.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from pymongo import DESCENDING
from pymongo.database import Database

from quill.extraction.base import ExtractionResult
from quill.notes.models import ClassificationRecord, NoteSection

from .client import naive_utc, retry_on_connection_failure

logger = logging.getLogger(__name__)


class NoteRepository:
    """Repository for note storage operations."""

    COLLECTION_NAME = "notes"

    def __init__(self, database: Database[dict[str, Any]]) -> None:
        self._collection = database[self.COLLECTION_NAME]
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index([("created_at", DESCENDING)])
        self._collection.create_index([("content_type", 1), ("created_at", DESCENDING)])
        self._collection.create_index("capture_id")
        self._collection.create_index([("content", "text")])

    @retry_on_connection_failure()
    def save(
        self,
        section: NoteSection,
        result: ExtractionResult,
        classification: ClassificationRecord,
        capture_id: str | None = None,
    ) -> str:
        """Store one processed section.

        Args:
            section: The section as split from the capture
            result: Structured data extracted from the section
            classification: Decision that typed the section
            capture_id: Capture the section came from

        Returns:
            The new note ID.
        """
        note_id = str(uuid.uuid4())
        classification_doc = classification.to_dict()
        classification_doc["created_at"] = naive_utc(classification.created_at)
        self._collection.insert_one(
            {
                "_id": note_id,
                "capture_id": capture_id,
                "content_type": section.content_type.value,
                "content": section.content,
                "source_range": list(section.source_range),
                "suggested_tags": list(section.suggested_tags),
                "reasoning": section.reasoning,
                "classification": classification_doc,
                "extraction": result.to_dict(),
                "has_minimum_data": result.has_minimum_data,
                "enhanced_content": None,
                "created_at": naive_utc(datetime.now(UTC)),
            }
        )
        logger.debug("Saved %s note %s", section.content_type.value, note_id)
        return note_id

    @retry_on_connection_failure()
    def update_content(self, note_id: str, enhanced_content: str) -> bool:
        """Attach enhanced text to a stored note.

        Returns:
            True if the note exists.
        """
        result = self._collection.update_one(
            {"_id": note_id},
            {
                "$set": {
                    "enhanced_content": enhanced_content,
                    "updated_at": naive_utc(datetime.now(UTC)),
                }
            },
        )
        return result.matched_count > 0

    @retry_on_connection_failure()
    def get_by_id(self, note_id: str) -> dict[str, Any] | None:
        return self._collection.find_one({"_id": note_id})

    @retry_on_connection_failure()
    def find_by_type(self, content_type: str, limit: int = 20) -> list[dict[str, Any]]:
        """Most recent notes of one content type."""
        cursor = (
            self._collection.find({"content_type": content_type})
            .sort("created_at", DESCENDING)
            .limit(limit)
        )
        return list(cursor)

    @retry_on_connection_failure()
    def get_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        return list(self._collection.find().sort("created_at", DESCENDING).limit(limit))


__all__ = ["NoteRepository"]
