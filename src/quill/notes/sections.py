"""Section splitting for multi-topic captures.

One capture may hold several unrelated notes (a shopping list followed by
meeting notes, say). The splitter tries, in order:

1. Explicit markers of two or more distinct types: split at marker boundaries
2. No markers and AI available: ask the model for semantic boundaries
3. Otherwise a single section typed by the classifier cascade

Section ranges are contiguous and cover the whole text, so stripping the
markers from the concatenated ranges gives back the original content.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from quill.config import LLMConfig, SectionsConfig
from quill.llm.errors import LLMError, MalformedResponseError
from quill.llm.response import normalize_strings, optional_str, parse_json_object
from quill.llm.service import TextService

from .classifier import ClassifierCascade
from .models import ClassificationMethod, ClassificationRecord, ContentType, NoteSection
from .triggers import TriggerMatch, TriggerParser, extract_hashtags, remove_markers

logger = logging.getLogger(__name__)

AUTO_SPLIT_THRESHOLD = 0.85

SECTION_PROMPT = """Analyze the following handwritten note text and determine if it contains multiple distinct sections that should be split into separate notes.

Look for:
- Clear topic changes
- Different note types (e.g., todo list followed by meeting notes)
- Distinct information blocks separated by visual cues or context shifts

Only suggest splitting if you are confident (>85%) that there are 2 or more distinct sections.
Copy each section's content verbatim from the text, in order.

TEXT:
{content}

Respond in JSON format:
{{
  "hasSections": true/false,
  "confidence": 0.0-1.0,
  "sections": [
    {{
      "content": "section text here",
      "type": "general|todo|meeting|email|expense|recipe|event|contact",
      "tags": ["tag1", "tag2"],
      "reasoning": "why this is a separate section"
    }}
  ]
}}

If there's only one coherent section, return hasSections: false with confidence 1.0."""


class SplitMethod(Enum):
    """How a capture was divided."""

    EXPLICIT = "explicit"
    LLM = "llm"
    NONE = "none"


@dataclass(frozen=True)
class SectionSplit:
    """Sections plus how they were found.

    ``should_auto_split`` is True when the split is confident enough to be
    applied without asking the user.
    """

    sections: list[NoteSection]
    method: SplitMethod
    should_auto_split: bool


@dataclass(frozen=True)
class _ProposedSection:
    start: int
    content_type: ContentType
    tags: list[str]
    reasoning: str | None


class SectionSplitter:
    """Divides captured text into ordered, typed sections."""

    def __init__(
        self,
        classifier: ClassifierCascade,
        config: SectionsConfig | None = None,
        llm_config: LLMConfig | None = None,
        service: TextService | None = None,
        trigger_parser: TriggerParser | None = None,
    ) -> None:
        """Initialize the splitter.

        Args:
            classifier: Cascade used for unmarked text; it also records decisions
            config: AI split switch and length limits
            llm_config: Token limit and prompt version for the AI split
            service: Remote text service for semantic splitting
            trigger_parser: Marker parser (a default one is created)
        """
        self._classifier = classifier
        self._config = config or SectionsConfig()
        self._llm_config = llm_config or LLMConfig()
        self._service = service
        self._triggers = trigger_parser or TriggerParser()

    async def split_into_sections(self, text: str) -> list[NoteSection]:
        """Split text into sections ordered by source position."""
        return (await self.detect(text)).sections

    async def detect(self, text: str) -> SectionSplit:
        """Split text and report which path produced the sections."""
        parsed = self._triggers.parse(text)

        if len(parsed.distinct_types) >= 2:
            sections = await self._split_on_markers(text, parsed.matches)
            if len(sections) >= 2:
                logger.debug("Split on markers into %d sections", len(sections))
                return SectionSplit(sections, SplitMethod.EXPLICIT, should_auto_split=True)

        if not parsed.matches and self._ai_split_allowed(text):
            split = await self._split_with_llm(text)
            if split is not None:
                return split

        return SectionSplit([await self._single_section(text)], SplitMethod.NONE, False)

    def _ai_split_allowed(self, text: str) -> bool:
        return (
            self._config.ai_split_enabled
            and self._service is not None
            and len(text) > self._config.min_length_for_ai_split
            and self._classifier.llm_available()
        )

    async def _single_section(self, text: str) -> NoteSection:
        record = await self._classifier.classify(text)
        return NoteSection(
            content_type=record.content_type,
            content=remove_markers(text),
            source_range=(0, len(text)),
            classification=record,
            suggested_tags=extract_hashtags(text),
            reasoning=record.reasoning,
        )

    async def _split_on_markers(self, text: str, matches: list[TriggerMatch]) -> list[NoteSection]:
        # A new span starts at every marker whose type differs from the current span
        starts: list[tuple[int, ContentType | None]] = []
        for match in matches:
            if not starts or starts[-1][1] != match.content_type:
                starts.append((match.start, match.content_type))

        if starts[0][0] > 0:
            starts.insert(0, (0, None))

        spans: list[tuple[int, int, ContentType | None]] = []
        for index, (start, content_type) in enumerate(starts):
            end = starts[index + 1][0] if index + 1 < len(starts) else len(text)
            spans.append((start, end, content_type))

        spans = _merge_blank_spans(text, spans)
        if len(spans) < 2:
            return []

        sections = []
        for start, end, content_type in spans:
            chunk = text[start:end]
            content = remove_markers(chunk)
            if content_type is None:
                record = await self._classifier.classify(content)
            else:
                record = ClassificationRecord.explicit(content_type)
                self._classifier.record(record)
            sections.append(
                NoteSection(
                    content_type=record.content_type,
                    content=content,
                    source_range=(start, end),
                    classification=record,
                    suggested_tags=extract_hashtags(chunk),
                    reasoning=record.reasoning,
                )
            )
        return sections

    async def _split_with_llm(self, text: str) -> SectionSplit | None:
        assert self._service is not None
        prompt = SECTION_PROMPT.format(content=text)
        try:
            reply = await self._service.request(prompt, self._llm_config.section_max_tokens)
            data = parse_json_object(reply)
            proposed, confidence = self._parse_proposal(data, text)
        except LLMError as e:
            logger.warning("Semantic section split skipped: %s", e)
            return None
        except Exception:
            logger.exception("Unexpected error during semantic section split")
            return None

        if len(proposed) < 2:
            return None

        sections = []
        for index, item in enumerate(proposed):
            start = 0 if index == 0 else item.start
            end = proposed[index + 1].start if index + 1 < len(proposed) else len(text)
            record = ClassificationRecord(
                content_type=item.content_type,
                method=ClassificationMethod.LLM,
                confidence=confidence,
                reasoning=item.reasoning,
                prompt_version=self._llm_config.prompt_version,
            )
            self._classifier.record(record)
            sections.append(
                NoteSection(
                    content_type=item.content_type,
                    content=text[start:end].strip(),
                    source_range=(start, end),
                    classification=record,
                    suggested_tags=item.tags,
                    reasoning=item.reasoning,
                )
            )

        logger.debug("Semantic split into %d sections", len(sections))
        return SectionSplit(sections, SplitMethod.LLM, confidence >= AUTO_SPLIT_THRESHOLD)

    def _parse_proposal(self, data: dict[str, Any], text: str) -> tuple[list[_ProposedSection], float]:
        """Locate proposed sections in the source text.

        Raises:
            MalformedResponseError: If a section is too short, missing from the
                text, or out of order
        """
        try:
            confidence = min(1.0, max(0.0, float(data.get("confidence", 0.0))))
        except (TypeError, ValueError) as e:
            raise MalformedResponseError("Confidence is not a number") from e

        raw_sections = data.get("sections") or []
        if not data.get("hasSections") or not isinstance(raw_sections, list):
            return [], confidence

        proposed = []
        cursor = 0
        for raw in raw_sections:
            if not isinstance(raw, dict):
                raise MalformedResponseError("Section entry is not an object")
            content = str(raw.get("content", "")).strip()
            if len(content) < self._config.min_section_length:
                raise MalformedResponseError("Proposed section is too short")

            position = text.find(content, cursor)
            if position < 0:
                raise MalformedResponseError("Proposed section not found in order")
            cursor = position + len(content)

            proposed.append(
                _ProposedSection(
                    start=position,
                    content_type=ContentType.from_identifier(str(raw.get("type", "")))
                    or ContentType.GENERAL,
                    tags=[t.lower().lstrip("#") for t in normalize_strings(raw.get("tags"))],
                    reasoning=optional_str(raw.get("reasoning")),
                )
            )
        return proposed, confidence


def _merge_blank_spans(
    text: str, spans: list[tuple[int, int, ContentType | None]]
) -> list[tuple[int, int, ContentType | None]]:
    """Fold spans with no content left after marker removal into a neighbour.

    A blank span merges into the following span, or into the previous one
    when it is last. The following span keeps its own type.
    """
    merged: list[tuple[int, int, ContentType | None]] = []
    pending_start: int | None = None

    for start, end, content_type in spans:
        if pending_start is not None:
            start = pending_start
            pending_start = None
        if not remove_markers(text[start:end]):
            pending_start = start
            continue
        merged.append((start, end, content_type))

    if pending_start is not None:
        if merged:
            last_start, _, last_type = merged[-1]
            merged[-1] = (last_start, len(text), last_type)
        else:
            merged.append((pending_start, len(text), spans[-1][2]))
    return merged


__all__ = [
    "AUTO_SPLIT_THRESHOLD",
    "SECTION_PROMPT",
    "SectionSplit",
    "SectionSplitter",
    "SplitMethod",
]
