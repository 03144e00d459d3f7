"""AI clean-up of recognized text.

Fixes recognition errors and broken line wrapping with a prompt tuned to
the content type, and reports which words changed.
"""

import logging
from dataclasses import dataclass, field

from quill.notes.models import ContentType

from .errors import MalformedResponseError
from .response import strip_code_fences
from .service import TextService

logger = logging.getLogger(__name__)

EMAIL_ENHANCE_PROMPT = """You are helping format a handwritten email that was scanned with OCR. The text may have recognition errors and formatting issues.

Please:
1. Fix OCR errors (misspellings, wrong characters)
2. Merge lines that were incorrectly split by OCR
3. Add appropriate punctuation to the greeting, sentences and closing
4. Preserve the email structure: greeting, body paragraphs, closing, signature
5. Keep any #email# tag, To: and Subject: lines intact
6. Preserve bullet points and lists
7. Keep email addresses exactly as written

Original OCR text:
{text}

Return ONLY the corrected and formatted email text. No explanations."""

TODO_ENHANCE_PROMPT = """You are helping correct a handwritten to-do list that was scanned with OCR.

Please:
1. Fix OCR errors (misspellings, wrong characters)
2. Preserve checkbox markers like [ ], [x], bullets and dashes
3. Keep each task item on its own line
4. Keep any #todo# or similar tag if present
5. Don't merge lines; each task stays separate

Original OCR text:
{text}

Return ONLY the corrected text. No explanations."""

MEETING_ENHANCE_PROMPT = """You are helping correct handwritten meeting notes that were scanned with OCR.

Please:
1. Fix OCR errors (misspellings, wrong characters)
2. Preserve section headers (Attendees, Agenda, Action Items, etc.)
3. Fix punctuation and add periods where sentences end
4. Merge lines that were incorrectly split mid-sentence
5. Keep bullet points and numbered lists intact
6. Preserve names and proper nouns carefully

Original OCR text:
{text}

Return ONLY the corrected text. No explanations."""

DEFAULT_ENHANCE_PROMPT = """You are helping correct OCR errors from a handwritten note. The text was scanned from handwriting and may contain recognition errors.

Please:
1. Fix obvious OCR errors (misspellings, wrong characters)
2. Preserve the original meaning and structure
3. Keep proper nouns, email addresses and phone numbers as accurate as possible
4. Fix punctuation where clearly missing
5. Merge lines that were incorrectly split mid-sentence
6. Don't add or remove content, only correct errors

Original OCR text:
{text}

Return ONLY the corrected text, nothing else. No explanations."""


def enhancement_prompt(text: str, content_type: ContentType) -> str:
    """Pick the clean-up prompt for a content type."""
    match content_type:
        case ContentType.EMAIL:
            template = EMAIL_ENHANCE_PROMPT
        case ContentType.TODO:
            template = TODO_ENHANCE_PROMPT
        case ContentType.MEETING:
            template = MEETING_ENHANCE_PROMPT
        case _:
            template = DEFAULT_ENHANCE_PROMPT
    return template.format(text=text)


@dataclass(frozen=True)
class TextChange:
    """One word replaced during enhancement."""

    original: str
    corrected: str
    position: int


@dataclass(frozen=True)
class EnhancedText:
    """Original and enhanced text with a word-level change list."""

    original_text: str
    enhanced_text: str
    changes: list[TextChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


def find_changes(original: str, enhanced: str) -> list[TextChange]:
    """Position-by-position word comparison."""
    return [
        TextChange(original=before, corrected=after, position=index)
        for index, (before, after) in enumerate(zip(original.split(), enhanced.split(), strict=False))
        if before != after
    ]


class TextEnhancer:
    """Sends recognized text to the remote service for clean-up."""

    def __init__(self, service: TextService, max_tokens: int = 2048) -> None:
        self._service = service
        self._max_tokens = max_tokens

    async def enhance(self, text: str, content_type: ContentType = ContentType.GENERAL) -> EnhancedText:
        """Enhance text.

        Raises:
            LLMError: Any service failure, unchanged, so callers can queue a retry
            MalformedResponseError: If the reply is empty
        """
        reply = await self._service.request(enhancement_prompt(text, content_type), self._max_tokens)
        enhanced = strip_code_fences(reply)
        if not enhanced:
            raise MalformedResponseError("Empty enhancement reply")

        result = EnhancedText(
            original_text=text,
            enhanced_text=enhanced,
            changes=find_changes(text, enhanced),
        )
        logger.debug("Enhanced %s text with %d word change(s)", content_type.value, len(result.changes))
        return result


__all__ = [
    "EnhancedText",
    "TextChange",
    "TextEnhancer",
    "enhancement_prompt",
    "find_changes",
]
