"""Data models for the enhancement queue."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from quill.notes.models import ContentType


class QueueState(Enum):
    """Lifecycle state of a queued enhancement."""

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class EnhancementQueueItem:
    """A capture waiting for AI enhancement.

    Attributes:
        id: Unique item ID
        capture_id: ID of the capture (or stored note) to enhance
        captured_text: Text to enhance
        content_type: Type used to pick the enhancement prompt
        state: Current lifecycle state
        attempts: Completed processing cycles
        enqueued_at: When the item was queued (UTC); drain order
        last_attempt_at: Start of the latest processing cycle
        last_error: Message from the latest failed cycle
        enhanced_text: Result of a successful cycle
    """

    capture_id: str
    captured_text: str
    content_type: ContentType = ContentType.GENERAL
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: QueueState = QueueState.PENDING
    attempts: int = 0
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_attempt_at: datetime | None = None
    last_error: str | None = None
    enhanced_text: str | None = None

    @property
    def is_active(self) -> bool:
        """True while the item still waits for or undergoes processing."""
        return self.state in (QueueState.PENDING, QueueState.PROCESSING)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "id": self.id,
            "capture_id": self.capture_id,
            "captured_text": self.captured_text,
            "content_type": self.content_type.value,
            "state": self.state.value,
            "attempts": self.attempts,
            "enqueued_at": self.enqueued_at,
            "last_attempt_at": self.last_attempt_at,
            "last_error": self.last_error,
            "enhanced_text": self.enhanced_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnhancementQueueItem":
        """Create from MongoDB document."""
        return cls(
            id=data["id"],
            capture_id=data["capture_id"],
            captured_text=data.get("captured_text", ""),
            content_type=ContentType(data.get("content_type", "general")),
            state=QueueState(data.get("state", "pending")),
            attempts=int(data.get("attempts", 0)),
            enqueued_at=_aware(data.get("enqueued_at")) or datetime.now(UTC),
            last_attempt_at=_aware(data.get("last_attempt_at")),
            last_error=data.get("last_error"),
            enhanced_text=data.get("enhanced_text"),
        )


def _aware(value: datetime | None) -> datetime | None:
    """MongoDB returns naive UTC datetimes; attach the zone."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass
class DrainReport:
    """Outcome of one drain call."""

    succeeded: list[str] = field(default_factory=list)
    requeued: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: bool = False
    paused: bool = False

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.requeued) + len(self.failed)


__all__ = ["DrainReport", "EnhancementQueueItem", "QueueState"]
