"""Durable FIFO of captures waiting for AI enhancement.

The queue is the only shared mutable resource in the pipeline. An asyncio
lock gives single-writer access: ``enqueue`` waits for a running drain, and
a drain that finds another drain in progress returns at once.

State machine per item::

    pending -> processing -> done
                          -> pending  (failure, attempts < max_attempts)
                          -> failed   (failure, attempts == max_attempts)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from quill.config import QueueConfig
from quill.network import ConnectivitySignal
from quill.notes.models import ContentType

from .models import DrainReport, EnhancementQueueItem, QueueState
from .repository import QueueRepository

logger = logging.getLogger(__name__)

Enhancer = Callable[[EnhancementQueueItem], Awaitable[str]]
CompletionCallback = Callable[[EnhancementQueueItem], Awaitable[None]]


class EnhancementQueue:
    """Queue of deferred enhancements, drained when connectivity returns."""

    def __init__(
        self,
        repository: QueueRepository,
        enhancer: Enhancer,
        config: QueueConfig | None = None,
        connectivity: ConnectivitySignal | None = None,
        on_enhanced: CompletionCallback | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            repository: Where items are persisted
            enhancer: Coroutine producing enhanced text for an item; any
                exception counts as a failed cycle
            config: Attempt limit and per-item timeout
            connectivity: Online signal; draining pauses when it drops
            on_enhanced: Awaited with each item that reaches ``done``
        """
        self._repository = repository
        self._enhancer = enhancer
        self._config = config or QueueConfig()
        self._connectivity = connectivity
        self._on_enhanced = on_enhanced
        self._lock = asyncio.Lock()

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    @property
    def is_draining(self) -> bool:
        return self._lock.locked()

    async def enqueue(
        self,
        capture_id: str,
        text: str,
        content_type: ContentType = ContentType.GENERAL,
    ) -> EnhancementQueueItem:
        """Add a capture to the back of the queue.

        Returns:
            The stored item, in state pending
        """
        item = EnhancementQueueItem(
            capture_id=capture_id,
            captured_text=text,
            content_type=content_type,
        )
        async with self._lock:
            self._repository.add(item)
        logger.info("Queued enhancement %s for capture %s", item.id, capture_id)
        return item

    async def enqueue_item(self, item: EnhancementQueueItem) -> EnhancementQueueItem:
        """Store a prepared item as pending with zero attempts."""
        item.state = QueueState.PENDING
        item.attempts = 0
        async with self._lock:
            self._repository.add(item)
        logger.info("Queued enhancement %s for capture %s", item.id, item.capture_id)
        return item

    async def drain(self) -> DrainReport:
        """Process pending items once each, oldest first.

        Items requeued during this drain wait for the next one, so every
        call costs each item at most one attempt.

        Returns:
            DrainReport; ``skipped`` when another drain was running,
            ``paused`` when connectivity dropped part way
        """
        if self._lock.locked():
            logger.debug("Drain already in progress")
            return DrainReport(skipped=True)

        async with self._lock:
            report = DrainReport()
            for item in self._repository.list_by_state(QueueState.PENDING):
                if self._connectivity is not None and not self._connectivity.is_online:
                    logger.info("Lost connectivity - pausing queue processing")
                    report.paused = True
                    break
                await self._process(item, report)

        if report.failed:
            logger.warning("%d enhancement(s) failed permanently", len(report.failed))
        return report

    async def _process(self, item: EnhancementQueueItem, report: DrainReport) -> None:
        item.state = QueueState.PROCESSING
        item.last_attempt_at = datetime.now(UTC)
        self._repository.update(item)

        try:
            enhanced = await asyncio.wait_for(
                self._enhancer(item), timeout=self._config.item_timeout_seconds
            )
        except asyncio.CancelledError:
            # Cancelled mid-cycle: the attempt never completed
            item.state = QueueState.PENDING
            self._repository.update(item)
            raise
        except Exception as e:
            item.attempts += 1
            item.last_error = str(e) or type(e).__name__
            if item.attempts >= self._config.max_attempts:
                item.state = QueueState.FAILED
                report.failed.append(item.id)
                logger.error(
                    "Enhancement %s failed after %d attempts: %s",
                    item.id,
                    item.attempts,
                    item.last_error,
                )
            else:
                item.state = QueueState.PENDING
                report.requeued.append(item.id)
                logger.info(
                    "Will retry enhancement %s (attempt %d/%d)",
                    item.id,
                    item.attempts,
                    self._config.max_attempts,
                )
            self._repository.update(item)
            return

        item.attempts += 1
        item.state = QueueState.DONE
        item.enhanced_text = enhanced
        item.last_error = None
        self._repository.update(item)
        report.succeeded.append(item.id)
        logger.info("Enhancement %s done", item.id)

        if self._on_enhanced is not None:
            try:
                await self._on_enhanced(item)
            except Exception:
                logger.exception("Enhancement completion callback failed for %s", item.id)

    async def retry_failed(self) -> int:
        """Reset failed items to pending with a fresh attempt budget."""
        async with self._lock:
            failed = self._repository.list_by_state(QueueState.FAILED)
            for item in failed:
                item.state = QueueState.PENDING
                item.attempts = 0
                item.last_error = None
                self._repository.update(item)
        if failed:
            logger.info("Reset %d failed enhancement(s) to pending", len(failed))
        return len(failed)

    async def recover_stale(self) -> int:
        """Return items left in processing (after a crash) to pending."""
        async with self._lock:
            stale = self._repository.list_by_state(QueueState.PROCESSING)
            for item in stale:
                item.state = QueueState.PENDING
                self._repository.update(item)
        if stale:
            logger.info("Recovered %d stale enhancement(s)", len(stale))
        return len(stale)

    async def purge_done(self) -> int:
        """Delete completed items."""
        async with self._lock:
            return self._repository.delete_by_state(QueueState.DONE)

    async def clear(self) -> int:
        """Delete every item regardless of state."""
        async with self._lock:
            return self._repository.delete_by_state(*QueueState)

    def pending_count(self) -> int:
        """Items still pending or processing."""
        return len(self._repository.list_by_state(QueueState.PENDING, QueueState.PROCESSING))

    def has_pending(self, capture_id: str) -> bool:
        return any(item.is_active for item in self._repository.list_by_capture(capture_id))

    def failed_items(self) -> list[EnhancementQueueItem]:
        return self._repository.list_by_state(QueueState.FAILED)

    def get(self, item_id: str) -> EnhancementQueueItem | None:
        return self._repository.get(item_id)


__all__ = ["CompletionCallback", "EnhancementQueue", "Enhancer"]
