"""Capture pipeline.

Wires the classifier cascade, section splitter, extraction engine,
enhancer and enhancement queue together with explicit dependencies:

    capture -> split into sections -> extract each section (concurrently)
            -> hand (section, result, classification) to the sink
            -> optionally enhance, queueing the work when the service is
               unreachable
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

from quill.analytics.log import ClassificationLog, InMemoryClassificationLog
from quill.analytics.service import ClassificationAnalytics
from quill.config import CredentialProvider, EnvironmentCredentials, QuillConfig
from quill.extraction.base import ExtractionResult
from quill.extraction.engine import AnyResult, ExtractionEngine
from quill.llm.enhancer import EnhancedText, TextEnhancer
from quill.llm.errors import (
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    TransientServiceError,
)
from quill.llm.service import TextService
from quill.network import ConnectivitySignal
from quill.notes.classifier import ClassifierCascade
from quill.notes.models import ClassificationRecord, ContentType, NoteSection, RawCapture
from quill.notes.sections import SectionSplitter
from quill.notes.triggers import TriggerParser
from quill.queue.models import DrainReport, EnhancementQueueItem
from quill.queue.repository import InMemoryQueueRepository, QueueRepository
from quill.queue.service import EnhancementQueue

logger = logging.getLogger(__name__)


class PersistenceSink(Protocol):
    """Durable home for processed sections (``NoteRepository`` in production)."""

    def save(
        self,
        section: NoteSection,
        result: ExtractionResult,
        classification: ClassificationRecord,
        capture_id: str | None = None,
    ) -> str: ...

    def update_content(self, note_id: str, enhanced_content: str) -> bool: ...


class InMemoryNoteSink:
    """Sink that keeps saved notes in a dict, for tests and dry runs."""

    def __init__(self) -> None:
        self.notes: dict[str, dict[str, Any]] = {}

    def save(
        self,
        section: NoteSection,
        result: ExtractionResult,
        classification: ClassificationRecord,
        capture_id: str | None = None,
    ) -> str:
        note_id = str(uuid.uuid4())
        self.notes[note_id] = {
            "capture_id": capture_id,
            "section": section,
            "result": result,
            "classification": classification,
            "enhanced_content": None,
        }
        return note_id

    def update_content(self, note_id: str, enhanced_content: str) -> bool:
        if note_id not in self.notes:
            return False
        self.notes[note_id]["enhanced_content"] = enhanced_content
        return True


@dataclass(frozen=True)
class ProcessedSection:
    """One section of a capture after extraction."""

    section: NoteSection
    result: AnyResult
    note_id: str | None = None
    enhanced: EnhancedText | None = None

    @property
    def classification(self) -> ClassificationRecord:
        return self.section.classification

    def to_dict(self) -> dict[str, Any]:
        return {
            "note_id": self.note_id,
            "content_type": self.section.content_type.value,
            "content": self.section.content,
            "source_range": list(self.section.source_range),
            "suggested_tags": self.section.suggested_tags,
            "classification": {
                "method": self.classification.method.value,
                "confidence": self.classification.confidence,
                "reasoning": self.classification.reasoning,
            },
            "extraction": self.result.to_dict(),
            "has_minimum_data": self.result.has_minimum_data,
            "enhanced_text": self.enhanced.enhanced_text if self.enhanced else None,
        }


class CapturePipeline:
    """Entry point for turning recognized text into typed notes."""

    def __init__(
        self,
        config: QuillConfig | None = None,
        service: TextService | None = None,
        credentials: CredentialProvider | None = None,
        connectivity: ConnectivitySignal | None = None,
        queue_repository: QueueRepository | None = None,
        classification_log: ClassificationLog | None = None,
        sink: PersistenceSink | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Full configuration; defaults apply when omitted
            service: Remote text service; heuristics only when None
            credentials: Credential provider (environment by default)
            connectivity: Online signal; treated as online when None
            queue_repository: Storage for deferred enhancements
            classification_log: Where classification decisions are recorded
            sink: Receives every processed section
        """
        self._config = config or QuillConfig()
        self._service = service
        self._credentials = credentials or EnvironmentCredentials()
        self._connectivity = connectivity
        self._log = classification_log if classification_log is not None else InMemoryClassificationLog()
        self._sink = sink

        triggers = TriggerParser()
        self.classifier = ClassifierCascade(
            config=self._config.classification,
            llm_config=self._config.llm,
            service=service,
            credentials=self._credentials,
            connectivity=connectivity,
            log=self._log,
            trigger_parser=triggers,
        )
        self.splitter = SectionSplitter(
            self.classifier,
            config=self._config.sections,
            llm_config=self._config.llm,
            service=service,
            trigger_parser=triggers,
        )
        self.engine = ExtractionEngine(
            config=self._config.extraction,
            llm_config=self._config.llm,
            service=service,
            credentials=self._credentials,
            connectivity=connectivity,
        )
        self.enhancer = (
            TextEnhancer(service, max_tokens=self._config.llm.enhancement_max_tokens)
            if service is not None
            else None
        )
        self.queue = EnhancementQueue(
            queue_repository if queue_repository is not None else InMemoryQueueRepository(),
            self._enhance_queued,
            config=self._config.queue,
            connectivity=connectivity,
            on_enhanced=self._apply_enhancement,
        )
        self.analytics = ClassificationAnalytics(self._log)

    @property
    def is_online(self) -> bool:
        return self._connectivity is None or self._connectivity.is_online

    async def classify(self, text: str) -> ClassificationRecord:
        return await self.classifier.classify(text)

    async def split_into_sections(self, text: str) -> list[NoteSection]:
        return await self.splitter.split_into_sections(text)

    async def extract(self, content_type: ContentType, content: str) -> AnyResult:
        return await self.engine.extract(content_type, content)

    async def process(
        self,
        capture: RawCapture | str,
        capture_id: str | None = None,
        enhance: bool = False,
    ) -> list[ProcessedSection]:
        """Split, extract and persist one capture.

        Args:
            capture: The capture or its text
            capture_id: Identifier passed to the sink (generated when omitted)
            enhance: Also run AI clean-up on each section

        Returns:
            Processed sections in source order
        """
        text = capture.text if isinstance(capture, RawCapture) else capture
        capture_id = capture_id or str(uuid.uuid4())

        sections = await self.split_into_sections(text)
        results = await asyncio.gather(
            *(self.extract(section.content_type, section.content) for section in sections)
        )

        processed: list[ProcessedSection] = []
        for section, result in zip(sections, results, strict=True):
            note_id = None
            if self._sink is not None:
                note_id = self._sink.save(section, result, section.classification, capture_id)

            enhanced = None
            if enhance:
                enhanced = await self.enhance(note_id or capture_id, section.content, section.content_type)
                if enhanced is not None and note_id is not None and self._sink is not None:
                    self._sink.update_content(note_id, enhanced.enhanced_text)

            processed.append(ProcessedSection(section, result, note_id, enhanced))

        logger.info(
            "Processed capture %s into %d section(s): %s",
            capture_id,
            len(processed),
            ", ".join(p.section.content_type.value for p in processed),
        )
        return processed

    async def enhance(
        self,
        capture_id: str,
        text: str,
        content_type: ContentType = ContentType.GENERAL,
    ) -> EnhancedText | None:
        """Enhance text now, or queue it when the service can't be reached.

        Returns:
            EnhancedText on success; None when the work was queued or no
            credential is configured
        """
        if self.enhancer is None or not self._credentials.has_credential:
            logger.debug("Enhancement unavailable: no service credential")
            return None

        if not self.is_online:
            logger.info("Offline - queueing enhancement for %s", capture_id)
            await self.queue.enqueue(capture_id, text, content_type)
            return None

        try:
            return await self.enhancer.enhance(text, content_type)
        except (TransientServiceError, MalformedResponseError) as e:
            logger.warning("Enhancement failed for %s, queueing retry: %s", capture_id, e)
            await self.queue.enqueue(capture_id, text, content_type)
        except LLMError as e:
            logger.warning("Enhancement not possible for %s: %s", capture_id, e)
        except Exception:
            logger.exception("Enhancement raised unexpectedly for %s, queueing retry", capture_id)
            await self.queue.enqueue(capture_id, text, content_type)
        return None

    async def enqueue_enhancement(self, item: EnhancementQueueItem) -> EnhancementQueueItem:
        return await self.queue.enqueue_item(item)

    async def drain_queue(self) -> DrainReport:
        return await self.queue.drain()

    async def on_connectivity_restored(self) -> None:
        """Callback for ``ConnectivityMonitor``: drain deferred work."""
        report = await self.drain_queue()
        if report.processed:
            logger.info(
                "Queue drained: %d done, %d requeued, %d failed",
                len(report.succeeded),
                len(report.requeued),
                len(report.failed),
            )

    async def _enhance_queued(self, item: EnhancementQueueItem) -> str:
        if self.enhancer is None or not self._credentials.has_credential:
            raise ConfigurationError("No service credential configured")
        enhanced = await self.enhancer.enhance(item.captured_text, item.content_type)
        return enhanced.enhanced_text

    async def _apply_enhancement(self, item: EnhancementQueueItem) -> None:
        if self._sink is None or item.enhanced_text is None:
            return
        if not self._sink.update_content(item.capture_id, item.enhanced_text):
            logger.debug("No stored note %s for enhanced text", item.capture_id)


__all__ = [
    "CapturePipeline",
    "InMemoryNoteSink",
    "PersistenceSink",
    "ProcessedSection",
]
