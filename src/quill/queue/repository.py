"""Storage interface for queued enhancements.

The MongoDB implementation lives in ``quill.storage.queue``; the in-memory
one here serves tests and runs without a database.
"""

import copy
from typing import Protocol

from .models import EnhancementQueueItem, QueueState


class QueueRepository(Protocol):
    """Protocol for enhancement queue persistence."""

    def add(self, item: EnhancementQueueItem) -> None: ...

    def update(self, item: EnhancementQueueItem) -> None: ...

    def get(self, item_id: str) -> EnhancementQueueItem | None: ...

    def list_by_state(self, *states: QueueState) -> list[EnhancementQueueItem]:
        """Items in any of the given states, oldest ``enqueued_at`` first."""
        ...

    def list_by_capture(self, capture_id: str) -> list[EnhancementQueueItem]: ...

    def delete_by_state(self, *states: QueueState) -> int: ...


class InMemoryQueueRepository:
    """Queue repository held in process memory.

    Items are copied on the way in and out so callers never share state
    with the store, matching the behaviour of a real database.
    """

    def __init__(self) -> None:
        self._items: dict[str, EnhancementQueueItem] = {}

    def add(self, item: EnhancementQueueItem) -> None:
        if item.id in self._items:
            raise ValueError(f"Duplicate queue item: {item.id}")
        self._items[item.id] = copy.copy(item)

    def update(self, item: EnhancementQueueItem) -> None:
        if item.id not in self._items:
            raise KeyError(item.id)
        self._items[item.id] = copy.copy(item)

    def get(self, item_id: str) -> EnhancementQueueItem | None:
        item = self._items.get(item_id)
        return copy.copy(item) if item is not None else None

    def list_by_state(self, *states: QueueState) -> list[EnhancementQueueItem]:
        return [
            copy.copy(item)
            for item in sorted(self._items.values(), key=lambda i: i.enqueued_at)
            if item.state in states
        ]

    def list_by_capture(self, capture_id: str) -> list[EnhancementQueueItem]:
        return [copy.copy(i) for i in self._items.values() if i.capture_id == capture_id]

    def delete_by_state(self, *states: QueueState) -> int:
        doomed = [item_id for item_id, item in self._items.items() if item.state in states]
        for item_id in doomed:
            del self._items[item_id]
        return len(doomed)


__all__ = ["InMemoryQueueRepository", "QueueRepository"]
