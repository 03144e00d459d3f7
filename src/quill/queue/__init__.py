"""Enhancement queue for captures whose AI clean-up was deferred."""

from .models import DrainReport, EnhancementQueueItem, QueueState
from .repository import InMemoryQueueRepository, QueueRepository
from .service import EnhancementQueue

__all__ = [
    "DrainReport",
    "EnhancementQueue",
    "EnhancementQueueItem",
    "InMemoryQueueRepository",
    "QueueRepository",
    "QueueState",
]
