"""Data models for captured text and its classification.

Defines the closed ContentType set, classification records and note sections.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ContentType(Enum):
    """Closed set of content types a capture can be routed to."""

    GENERAL = "general"
    TODO = "todo"
    MEETING = "meeting"
    EMAIL = "email"
    EXPENSE = "expense"
    RECIPE = "recipe"
    EVENT = "event"
    CONTACT = "contact"

    @classmethod
    def from_identifier(cls, identifier: str) -> "ContentType | None":
        """Resolve a loose identifier (as an AI reply or marker might use it).

        Args:
            identifier: Type name, alias or marker body (``#todo#`` works too)

        Returns:
            Matching ContentType, or None for unknown identifiers
        """
        normalized = identifier.strip().strip("#").strip().lower()
        return _IDENTIFIER_ALIASES.get(normalized)


_IDENTIFIER_ALIASES: dict[str, ContentType] = {
    "general": ContentType.GENERAL,
    "note": ContentType.GENERAL,
    "idea": ContentType.GENERAL,
    "todo": ContentType.TODO,
    "to-do": ContentType.TODO,
    "task": ContentType.TODO,
    "tasks": ContentType.TODO,
    "checklist": ContentType.TODO,
    "meeting": ContentType.MEETING,
    "minutes": ContentType.MEETING,
    "email": ContentType.EMAIL,
    "mail": ContentType.EMAIL,
    "expense": ContentType.EXPENSE,
    "receipt": ContentType.EXPENSE,
    "recipe": ContentType.RECIPE,
    "event": ContentType.EVENT,
    "appointment": ContentType.EVENT,
    "contact": ContentType.CONTACT,
    "business card": ContentType.CONTACT,
    "businesscard": ContentType.CONTACT,
}


class ClassificationMethod(Enum):
    """Which cascade stage produced a type decision."""

    EXPLICIT = "explicit"
    HEURISTIC = "heuristic"
    LLM = "llm"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawCapture:
    """Recognized text handed over by the camera or voice subsystem."""

    text: str
    image_ref: str | None = None


@dataclass(frozen=True)
class ClassificationRecord:
    """Outcome of one classification call.

    Attributes:
        content_type: Resolved type
        method: Cascade stage that resolved it
        confidence: 0.0-1.0 (1.0 for explicit markers, 0.0 for the default)
        reasoning: Short human-readable explanation
        prompt_version: Prompt revision used when method is LLM
        created_at: When the decision was made (UTC)
    """

    content_type: ContentType
    method: ClassificationMethod
    confidence: float
    reasoning: str | None = None
    prompt_version: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def explicit(cls, content_type: ContentType) -> "ClassificationRecord":
        """Record for a type named by an inline marker."""
        return cls(
            content_type=content_type,
            method=ClassificationMethod.EXPLICIT,
            confidence=1.0,
            reasoning="Explicit trigger marker detected",
        )

    @classmethod
    def default(cls) -> "ClassificationRecord":
        """Record used when no cascade stage produced a type."""
        return cls(
            content_type=ContentType.GENERAL,
            method=ClassificationMethod.UNKNOWN,
            confidence=0.0,
            reasoning="Default classification",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "content_type": self.content_type.value,
            "method": self.method.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "prompt_version": self.prompt_version,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassificationRecord":
        """Create from MongoDB document."""
        created_at = data.get("created_at") or datetime.now(UTC)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)

        return cls(
            content_type=ContentType(data.get("content_type", "general")),
            method=ClassificationMethod(data.get("method", "unknown")),
            confidence=float(data.get("confidence", 0.0)),
            reasoning=data.get("reasoning"),
            prompt_version=data.get("prompt_version"),
            created_at=created_at,
        )


@dataclass(frozen=True)
class NoteSection:
    """A contiguous, typed sub-span of one capture.

    ``source_range`` holds ``(start, end)`` offsets into the original text.
    The range may include trigger markers; ``content`` never does.
    """

    content_type: ContentType
    content: str
    source_range: tuple[int, int]
    classification: ClassificationRecord
    suggested_tags: list[str] = field(default_factory=list)
    reasoning: str | None = None


__all__ = [
    "ClassificationMethod",
    "ClassificationRecord",
    "ContentType",
    "NoteSection",
    "RawCapture",
]
