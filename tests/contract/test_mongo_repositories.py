"""Contract tests for the MongoDB repositories.

Runs each repository against mongomock; the same contract holds for the
in-memory implementations used without a database.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from mongomock import MongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from quill.config import StorageConfig
from quill.extraction.todo import parse_todos
from quill.notes.models import (
    ClassificationMethod,
    ClassificationRecord,
    ContentType,
    NoteSection,
)
from quill.queue import EnhancementQueueItem, QueueState
from quill.storage import (
    MongoClassificationLog,
    MongoQueueRepository,
    MongoStorageClient,
    NoteRepository,
    retry_on_connection_failure,
)
from quill.storage.client import naive_utc


@pytest.fixture
def mock_db():
    """Create a mock MongoDB database for testing."""
    client = MongoClient()
    return client["quill_test"]


def queued(capture_id: str, minutes_ago: int, state: QueueState = QueueState.PENDING):
    # Whole seconds: mongomock keeps millisecond precision only
    enqueued_at = datetime(2024, 6, 15, 12, 0, tzinfo=UTC) - timedelta(minutes=minutes_ago)
    return EnhancementQueueItem(
        capture_id=capture_id,
        captured_text=f"text for {capture_id}",
        content_type=ContentType.MEETING,
        state=state,
        enqueued_at=enqueued_at,
    )


class TestMongoQueueRepository:
    """Contract tests for MongoQueueRepository."""

    @pytest.fixture
    def repository(self, mock_db) -> MongoQueueRepository:
        return MongoQueueRepository(mock_db)

    def test_add_and_get(self, repository: MongoQueueRepository) -> None:
        """Test add and get."""
        item = queued("c1", minutes_ago=1)
        repository.add(item)

        stored = repository.get(item.id)
        assert stored is not None
        assert stored.capture_id == "c1"
        assert stored.content_type == ContentType.MEETING
        assert stored.state == QueueState.PENDING
        assert stored.enqueued_at == item.enqueued_at
        assert stored.enqueued_at.tzinfo is not None

    def test_stored_as_naive_utc(self, repository: MongoQueueRepository, mock_db) -> None:
        """Test stored as naive utc."""
        item = queued("c1", minutes_ago=0)
        repository.add(item)
        doc = mock_db["enhancement_queue"].find_one({"_id": item.id})
        assert doc["enqueued_at"] == datetime(2024, 6, 15, 12, 0)
        assert doc["state"] == "pending"

    def test_get_missing(self, repository: MongoQueueRepository) -> None:
        """Test an unknown id returns None."""
        assert repository.get("nope") is None

    def test_update(self, repository: MongoQueueRepository) -> None:
        """Test state, attempts and error are updated."""
        item = queued("c1", minutes_ago=1)
        repository.add(item)
        item.state = QueueState.FAILED
        item.attempts = 3
        item.last_error = "timeout"
        repository.update(item)

        stored = repository.get(item.id)
        assert stored is not None
        assert (stored.state, stored.attempts, stored.last_error) == (QueueState.FAILED, 3, "timeout")

    def test_update_unknown_raises(self, repository: MongoQueueRepository) -> None:
        """Test update unknown raises."""
        with pytest.raises(KeyError):
            repository.update(queued("c1", minutes_ago=1))

    def test_list_by_state_oldest_first(self, repository: MongoQueueRepository) -> None:
        """Test list by state oldest first."""
        newest = queued("new", minutes_ago=1)
        oldest = queued("old", minutes_ago=30)
        done = queued("done", minutes_ago=60, state=QueueState.DONE)
        for item in (newest, oldest, done):
            repository.add(item)

        pending = repository.list_by_state(QueueState.PENDING)
        assert [i.capture_id for i in pending] == ["old", "new"]
        both = repository.list_by_state(QueueState.PENDING, QueueState.DONE)
        assert [i.capture_id for i in both] == ["done", "old", "new"]

    def test_list_by_capture(self, repository: MongoQueueRepository) -> None:
        """Test list by capture."""
        repository.add(queued("c1", minutes_ago=2))
        repository.add(queued("c1", minutes_ago=1, state=QueueState.DONE))
        repository.add(queued("c2", minutes_ago=1))
        assert len(repository.list_by_capture("c1")) == 2

    def test_delete_by_state(self, repository: MongoQueueRepository) -> None:
        """Test delete by state."""
        repository.add(queued("a", minutes_ago=2, state=QueueState.DONE))
        repository.add(queued("b", minutes_ago=1))
        assert repository.delete_by_state(QueueState.DONE) == 1
        assert [i.capture_id for i in repository.list_by_state(*QueueState)] == ["b"]


class TestMongoClassificationLog:
    """Contract tests for MongoClassificationLog."""

    @pytest.fixture
    def log(self, mock_db) -> MongoClassificationLog:
        return MongoClassificationLog(mock_db)

    def test_append_and_read_back(self, log: MongoClassificationLog) -> None:
        """Test append and read back."""
        created = datetime(2024, 6, 15, 9, 0, tzinfo=UTC)
        log.append(
            ClassificationRecord(
                content_type=ContentType.RECIPE,
                method=ClassificationMethod.LLM,
                confidence=0.8,
                reasoning="ingredients",
                prompt_version="v1",
                created_at=created,
            )
        )
        records = log.records_since(created - timedelta(hours=1))
        assert len(records) == 1
        assert records[0].content_type == ContentType.RECIPE
        assert records[0].method == ClassificationMethod.LLM
        assert records[0].prompt_version == "v1"
        assert records[0].created_at == created
        assert log.count() == 1

    def test_records_since_filters_and_orders(self, log: MongoClassificationLog) -> None:
        """Test records since filters and orders."""
        base = datetime(2024, 6, 15, tzinfo=UTC)
        for hours in (5, 1, 3):
            log.append(
                ClassificationRecord(
                    content_type=ContentType.TODO,
                    method=ClassificationMethod.EXPLICIT,
                    confidence=1.0,
                    created_at=base + timedelta(hours=hours),
                )
            )
        records = log.records_since(base + timedelta(hours=2))
        assert [r.created_at.hour for r in records] == [3, 5]


class TestNoteRepository:
    """Contract tests for NoteRepository."""

    @pytest.fixture
    def repository(self, mock_db) -> NoteRepository:
        return NoteRepository(mock_db)

    @pytest.fixture
    def section(self) -> NoteSection:
        return NoteSection(
            content_type=ContentType.TODO,
            content="- milk\n- eggs",
            source_range=(0, 20),
            classification=ClassificationRecord.explicit(ContentType.TODO),
            suggested_tags=["errands"],
        )

    def test_save_stores_section_and_extraction(
        self, repository: NoteRepository, section: NoteSection
    ) -> None:
        """Test save stores section and extraction."""
        result = parse_todos(section.content)
        note_id = repository.save(section, result, section.classification, capture_id="cap-1")

        doc = repository.get_by_id(note_id)
        assert doc is not None
        assert doc["capture_id"] == "cap-1"
        assert doc["content_type"] == "todo"
        assert doc["source_range"] == [0, 20]
        assert doc["suggested_tags"] == ["errands"]
        assert doc["classification"]["method"] == "explicit"
        assert [i["text"] for i in doc["extraction"]["items"]] == ["milk", "eggs"]
        assert doc["has_minimum_data"] is True
        assert doc["enhanced_content"] is None

    def test_update_content(self, repository: NoteRepository, section: NoteSection) -> None:
        """Test enhanced content is stored on the note."""
        note_id = repository.save(section, parse_todos(section.content), section.classification)
        assert repository.update_content(note_id, "- Milk\n- Eggs") is True
        doc = repository.get_by_id(note_id)
        assert doc is not None
        assert doc["enhanced_content"] == "- Milk\n- Eggs"
        assert repository.update_content("missing", "x") is False

    def test_find_by_type_and_recent(
        self, repository: NoteRepository, section: NoteSection
    ) -> None:
        """Test find by type and recent."""
        for _ in range(3):
            repository.save(section, parse_todos(section.content), section.classification)
        assert len(repository.find_by_type("todo")) == 3
        assert repository.find_by_type("email") == []
        assert len(repository.get_recent(limit=2)) == 2


class TestRetryOnConnectionFailure:
    """Tests for the storage retry decorator."""

    def test_retries_then_succeeds(self) -> None:
        """Test retries then succeeds."""
        calls = MagicMock(side_effect=[ConnectionFailure("down"), "ok"])

        @retry_on_connection_failure(max_retries=3, base_delay=0.5)
        def flaky() -> str:
            return calls()

        with patch("quill.storage.client.time.sleep") as sleep:
            assert flaky() == "ok"
        sleep.assert_called_once_with(0.5)

    def test_gives_up(self) -> None:
        """Test the last connection error is raised after retries."""
        @retry_on_connection_failure(max_retries=3, base_delay=1.0)
        def broken() -> None:
            raise ServerSelectionTimeoutError("no servers")

        with patch("quill.storage.client.time.sleep") as sleep:
            with pytest.raises(ServerSelectionTimeoutError):
                broken()
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_other_errors_not_retried(self) -> None:
        """Test other errors not retried."""
        calls = MagicMock(side_effect=ValueError("bad"))

        @retry_on_connection_failure()
        def failing() -> None:
            calls()

        with pytest.raises(ValueError):
            failing()
        assert calls.call_count == 1


class TestMongoStorageClient:
    """Tests for connection handling."""

    @pytest.fixture
    def driver(self, mock_db) -> MagicMock:
        driver = MagicMock()
        driver.__getitem__.return_value = mock_db
        driver.admin.command.return_value = {"ok": 1}
        return driver

    def test_not_connected(self) -> None:
        """Test repositories are unavailable before connect."""
        storage = MongoStorageClient()
        assert storage.is_connected() is False
        with pytest.raises(RuntimeError):
            _ = storage.notes

    def test_connect_builds_repositories(self, driver: MagicMock) -> None:
        """Test connect builds repositories."""
        factory = MagicMock(return_value=driver)
        storage = MongoStorageClient.from_config(
            StorageConfig(uri="mongodb://db:27017", database="quill_test"), client_factory=factory
        )
        with storage:
            assert isinstance(storage.notes, NoteRepository)
            assert isinstance(storage.queue, MongoQueueRepository)
            assert isinstance(storage.classifications, MongoClassificationLog)
            assert storage.is_connected() is True
            driver.__getitem__.assert_called_with("quill_test")

        factory.assert_called_once_with("mongodb://db:27017", serverSelectionTimeoutMS=5000)
        driver.close.assert_called_once()
        assert storage.is_connected() is False

    def test_connect_retries_ping(self, driver: MagicMock) -> None:
        """Test connect retries ping."""
        driver.admin.command.side_effect = [ConnectionFailure("starting"), {"ok": 1}]
        storage = MongoStorageClient(client_factory=MagicMock(return_value=driver))
        with patch("quill.storage.client.time.sleep"):
            storage.connect()
        assert storage.database is not None

    def test_connect_gives_up(self, driver: MagicMock) -> None:
        """Test connect gives up."""
        driver.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        factory = MagicMock(return_value=driver)
        storage = MongoStorageClient(client_factory=factory)
        with patch("quill.storage.client.time.sleep"):
            with pytest.raises(ServerSelectionTimeoutError):
                storage.connect()
        assert factory.call_count == 3
        assert storage.is_connected() is False


def test_naive_utc() -> None:
    """Test aware datetimes are stored as naive UTC."""
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    assert naive_utc(aware) == datetime(2024, 1, 1, 12, 0)
    assert naive_utc(None) is None
