"""MongoDB storage for notes, the enhancement queue and classification records."""

from .classifications import MongoClassificationLog
from .client import MongoStorageClient, retry_on_connection_failure
from .notes import NoteRepository
from .queue import MongoQueueRepository

__all__ = [
    "MongoClassificationLog",
    "MongoQueueRepository",
    "MongoStorageClient",
    "NoteRepository",
    "retry_on_connection_failure",
]
