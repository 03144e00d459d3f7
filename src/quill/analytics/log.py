"""Append-only log of classification decisions.

Every classifier call appends one record; analytics reads them back.
"""

from datetime import datetime
from typing import Protocol

from quill.notes.models import ClassificationRecord


class ClassificationLog(Protocol):
    """Protocol for classification record storage."""

    def append(self, record: ClassificationRecord) -> None:
        """Store one record."""
        ...

    def records_since(self, since: datetime) -> list[ClassificationRecord]:
        """Records created at or after ``since``, oldest first."""
        ...


class InMemoryClassificationLog:
    """Classification log held in process memory."""

    def __init__(self) -> None:
        self._records: list[ClassificationRecord] = []

    def append(self, record: ClassificationRecord) -> None:
        self._records.append(record)

    def records_since(self, since: datetime) -> list[ClassificationRecord]:
        return sorted(
            (r for r in self._records if r.created_at >= since),
            key=lambda r: r.created_at,
        )

    def all(self) -> list[ClassificationRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["ClassificationLog", "InMemoryClassificationLog"]
