"""Content-type classification cascade.

Stages run in priority order and the first one to produce a type wins:

1. Explicit trigger marker (confidence 1.0)
2. Structural heuristics above the configured threshold
3. Remote model, only with a credential, connectivity and LLM enabled
4. Default to GENERAL with confidence 0

Every call appends a ClassificationRecord to the classification log. No
error raised by the remote service escapes ``classify``.
"""

import logging
from typing import TYPE_CHECKING

from quill.config import ClassificationConfig, CredentialProvider, LLMConfig
from quill.llm.errors import LLMError, MalformedResponseError
from quill.llm.response import optional_str, parse_json_object
from quill.llm.service import TextService
from quill.network import ConnectivitySignal

from . import heuristics
from .models import ClassificationMethod, ClassificationRecord, ContentType
from .triggers import TriggerParser

if TYPE_CHECKING:
    from quill.analytics.log import ClassificationLog

logger = logging.getLogger(__name__)

CLASSIFICATION_PROMPT = """Classify this handwritten or spoken note into exactly one content type.

Content types:
- general: free-form note or idea
- todo: a list of tasks or a checklist
- meeting: meeting notes with attendees, agenda or action items
- email: a draft email with recipient, subject or body
- expense: a receipt or record of money spent
- recipe: ingredients and cooking steps
- event: something happening at a date and time
- contact: a person's contact details or business card

Note:
\"\"\"
{content}
\"\"\"

Return ONLY a JSON object:
{{"type": "<one of the types above>", "confidence": <0.0-1.0>, "reasoning": "<one short sentence>"}}"""


def parse_classification_reply(reply: str, prompt_version: str | None = None) -> ClassificationRecord:
    """Turn a model reply into a classification record.

    Args:
        reply: Raw model reply
        prompt_version: Prompt revision to stamp on the record

    Returns:
        ClassificationRecord with method LLM

    Raises:
        MalformedResponseError: If the reply has no known type or a bad confidence
    """
    data = parse_json_object(reply)

    content_type = ContentType.from_identifier(str(data.get("type", "")))
    if content_type is None:
        raise MalformedResponseError(f"Unknown content type in reply: {data.get('type')!r}")

    try:
        confidence = float(data.get("confidence", 0.5))
    except (TypeError, ValueError) as e:
        raise MalformedResponseError("Confidence is not a number") from e

    return ClassificationRecord(
        content_type=content_type,
        method=ClassificationMethod.LLM,
        confidence=min(1.0, max(0.0, confidence)),
        reasoning=optional_str(data.get("reasoning")),
        prompt_version=prompt_version,
    )


class ClassifierCascade:
    """Assigns a content type to text using the priority cascade."""

    def __init__(
        self,
        config: ClassificationConfig | None = None,
        llm_config: LLMConfig | None = None,
        service: TextService | None = None,
        credentials: CredentialProvider | None = None,
        connectivity: ConnectivitySignal | None = None,
        log: "ClassificationLog | None" = None,
        trigger_parser: TriggerParser | None = None,
    ) -> None:
        """Initialize the cascade.

        Args:
            config: Threshold and LLM switch for classification
            llm_config: Token limit and prompt version for the AI stage
            service: Remote text service for the AI stage
            credentials: Credential presence check
            connectivity: Online signal
            log: Where every decision is recorded
            trigger_parser: Marker parser (a default one is created)
        """
        self._config = config or ClassificationConfig()
        self._llm_config = llm_config or LLMConfig()
        self._service = service
        self._credentials = credentials
        self._connectivity = connectivity
        self._log = log
        self._triggers = trigger_parser or TriggerParser()

    @property
    def threshold(self) -> float:
        return self._config.heuristic_threshold

    def llm_available(self) -> bool:
        """Check whether the AI stage may run right now."""
        if not self._config.use_llm or self._service is None:
            return False
        if self._credentials is None or not self._credentials.has_credential:
            return False
        return self._connectivity is None or self._connectivity.is_online

    def classify_local(self, text: str) -> ClassificationRecord | None:
        """Run the explicit and heuristic stages only.

        Returns:
            Record from the first stage that resolved, or None
        """
        parsed = self._triggers.parse(text)
        if parsed.content_type is not None:
            return ClassificationRecord.explicit(parsed.content_type)

        match = heuristics.best_match(text)
        if match is not None and match.confidence >= self.threshold:
            return ClassificationRecord(
                content_type=match.content_type,
                method=ClassificationMethod.HEURISTIC,
                confidence=match.confidence,
                reasoning=match.reasoning,
            )
        return None

    async def classify(self, text: str) -> ClassificationRecord:
        """Classify text and record the decision.

        Args:
            text: Text to classify (markers may still be present)

        Returns:
            ClassificationRecord; never raises for service failures
        """
        record = self.classify_local(text) if text.strip() else None

        if record is None and text.strip() and self.llm_available():
            record = await self._classify_with_llm(text)

        if record is None:
            record = ClassificationRecord.default()

        self.record(record)
        return record

    def record(self, record: ClassificationRecord) -> None:
        """Append a decision to the classification log."""
        if self._log is not None:
            self._log.append(record)

    async def _classify_with_llm(self, text: str) -> ClassificationRecord | None:
        assert self._service is not None
        prompt = CLASSIFICATION_PROMPT.format(content=text)
        try:
            reply = await self._service.request(prompt, self._llm_config.classification_max_tokens)
            return parse_classification_reply(reply, self._llm_config.prompt_version)
        except LLMError as e:
            logger.warning("LLM classification skipped: %s", e)
            return None
        except Exception:
            logger.exception("Unexpected error during LLM classification")
            return None


__all__ = [
    "CLASSIFICATION_PROMPT",
    "ClassifierCascade",
    "parse_classification_reply",
]
