"""MongoDB storage client for Quill.

Owns the connection and hands out the note, queue and classification
repositories that share it.
"""

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from quill.config import StorageConfig

if TYPE_CHECKING:
    from .classifications import MongoClassificationLog
    from .notes import NoteRepository
    from .queue import MongoQueueRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (ConnectionFailure, ServerSelectionTimeoutError)


def retry_on_connection_failure(
    max_retries: int = 5,
    base_delay: float = 1.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a storage call with exponential backoff while MongoDB is unreachable.

    Args:
        max_retries: Total attempts before the last error is re-raised
        base_delay: Seconds before the first retry; doubles after each one

    Returns:
        Decorator applying the retry policy
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    if attempt >= max_retries:
                        logger.error(
                            "%s gave up after %d attempts: %s", func.__name__, attempt, e
                        )
                        raise
                    delay = base_delay * 2 ** (attempt - 1)
                    logger.warning(
                        "%s lost MongoDB connection (attempt %d/%d), retrying in %.1fs: %s",
                        func.__name__,
                        attempt,
                        max_retries,
                        delay,
                        e,
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def naive_utc(value: datetime | None) -> datetime | None:
    """MongoDB stores naive UTC; convert aware datetimes before writing or querying."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class MongoStorageClient:
    """Connection holder for the Quill database.

    Usage::

        with MongoStorageClient.from_config(config.storage) as storage:
            storage.notes.save(section, result, classification)
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database_name: str = "quill",
        server_selection_timeout_ms: int = 5000,
        client_factory: Callable[..., MongoClient[dict[str, Any]]] = MongoClient,
    ) -> None:
        """Initialize the storage client.

        Args:
            uri: MongoDB connection URI
            database_name: Database holding the Quill collections
            server_selection_timeout_ms: How long to wait for a server
            client_factory: Builds the driver client (tests pass mongomock's)
        """
        self._uri = uri
        self._database_name = database_name
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory
        self._client: MongoClient[dict[str, Any]] | None = None
        self._db: Database[dict[str, Any]] | None = None
        self._notes: "NoteRepository | None" = None
        self._queue: "MongoQueueRepository | None" = None
        self._classifications: "MongoClassificationLog | None" = None

    @classmethod
    def from_config(cls, config: StorageConfig, **kwargs: Any) -> "MongoStorageClient":
        return cls(
            uri=config.uri,
            database_name=config.database,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
            **kwargs,
        )

    @retry_on_connection_failure(max_retries=3)
    def connect(self) -> None:
        """Connect and build the repositories.

        Raises:
            ConnectionFailure: If MongoDB stays unreachable after retries
        """
        if self._db is not None:
            return

        from .classifications import MongoClassificationLog
        from .notes import NoteRepository
        from .queue import MongoQueueRepository

        client = self._client_factory(
            self._uri, serverSelectionTimeoutMS=self._server_selection_timeout_ms
        )
        try:
            client.admin.command("ping")
        except RETRYABLE_ERRORS:
            client.close()
            raise

        self._client = client
        self._db = client[self._database_name]
        self._notes = NoteRepository(self._db)
        self._queue = MongoQueueRepository(self._db)
        self._classifications = MongoClassificationLog(self._db)
        logger.info("Connected to MongoDB database %s", self._database_name)

    def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._db = None
        self._notes = None
        self._queue = None
        self._classifications = None
        logger.info("Disconnected from MongoDB")

    def is_connected(self) -> bool:
        """Ping the server; False when not connected or unreachable."""
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
        except RETRYABLE_ERRORS:
            return False
        return True

    def _require(self, repository: Any) -> Any:
        if repository is None:
            raise RuntimeError("Not connected to MongoDB. Call connect() first.")
        return repository

    @property
    def database(self) -> Database[dict[str, Any]]:
        return self._require(self._db)

    @property
    def notes(self) -> "NoteRepository":
        return self._require(self._notes)

    @property
    def queue(self) -> "MongoQueueRepository":
        return self._require(self._queue)

    @property
    def classifications(self) -> "MongoClassificationLog":
        return self._require(self._classifications)

    def __enter__(self) -> "MongoStorageClient":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()


__all__ = ["MongoStorageClient", "naive_utc", "retry_on_connection_failure"]
