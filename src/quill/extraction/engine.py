"""Per-type extraction dispatch.

Builds one two-tier Extractor per content type and routes content to it.
The AI tier is only included when a service is configured and extraction
through the model is enabled.
"""

import logging
from typing import Any

from quill.config import CredentialProvider, ExtractionConfig, LLMConfig
from quill.llm.service import TextService
from quill.network import ConnectivitySignal
from quill.notes.models import ContentType

from .base import AIStrategy, Extractor, HeuristicStrategy
from .contact import CONTACT_PROMPT, ContactResult, parse_contact
from .email import EMAIL_PROMPT, EmailResult, parse_email
from .event import EVENT_PROMPT, EventResult, parse_event
from .expense import EXPENSE_PROMPT, ExpenseResult, parse_expense
from .general import GENERAL_PROMPT, GeneralResult, parse_general
from .meeting import MEETING_PROMPT, MeetingResult, parse_meeting
from .recipe import RECIPE_PROMPT, RecipeResult, parse_recipe
from .todo import TODO_PROMPT, TodoResult, parse_todos

logger = logging.getLogger(__name__)

AnyResult = (
    GeneralResult
    | TodoResult
    | MeetingResult
    | EmailResult
    | ExpenseResult
    | RecipeResult
    | EventResult
    | ContactResult
)


class ExtractionEngine:
    """Produces a structured result for any content type."""

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        llm_config: LLMConfig | None = None,
        service: TextService | None = None,
        credentials: CredentialProvider | None = None,
        connectivity: ConnectivitySignal | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Content length limit and LLM switch
            llm_config: Token limit for extraction prompts
            service: Remote text service; heuristics only when None
            credentials: Credential presence check for the AI tier
            connectivity: Online signal for the AI tier
        """
        self._config = config or ExtractionConfig()
        self._llm_config = llm_config or LLMConfig()
        self._service = service
        self._credentials = credentials
        self._connectivity = connectivity
        self._extractors: dict[ContentType, Extractor[Any]] = {}

    def extractor_for(self, content_type: ContentType) -> Extractor[Any]:
        """Get (and cache) the extractor for a content type."""
        if content_type not in self._extractors:
            self._extractors[content_type] = self._build(content_type)
        return self._extractors[content_type]

    def _build(self, content_type: ContentType) -> Extractor[Any]:
        match content_type:
            case ContentType.GENERAL:
                return self._two_tier(GENERAL_PROMPT, GeneralResult, parse_general)
            case ContentType.TODO:
                return self._two_tier(TODO_PROMPT, TodoResult, parse_todos)
            case ContentType.MEETING:
                return self._two_tier(MEETING_PROMPT, MeetingResult, parse_meeting)
            case ContentType.EMAIL:
                return self._two_tier(EMAIL_PROMPT, EmailResult, parse_email)
            case ContentType.EXPENSE:
                return self._two_tier(EXPENSE_PROMPT, ExpenseResult, parse_expense)
            case ContentType.RECIPE:
                return self._two_tier(RECIPE_PROMPT, RecipeResult, parse_recipe)
            case ContentType.EVENT:
                return self._two_tier(EVENT_PROMPT, EventResult, parse_event)
            case ContentType.CONTACT:
                return self._two_tier(CONTACT_PROMPT, ContactResult, parse_contact)

    def _two_tier(self, prompt: str, result_type: Any, parse: Any) -> Extractor[Any]:
        strategies: list[Any] = []
        if self._service is not None and self._config.use_llm:
            strategies.append(
                AIStrategy(
                    service=self._service,
                    prompt=prompt,
                    from_dict=result_type.from_dict,
                    max_tokens=self._llm_config.extraction_max_tokens,
                    credentials=self._credentials,
                    connectivity=self._connectivity,
                )
            )
        strategies.append(HeuristicStrategy(parse))
        return Extractor(strategies, empty=result_type)

    async def extract(self, content_type: ContentType, content: str) -> AnyResult:
        """Extract structured data for a content type.

        Content longer than the configured limit is truncated first. Never
        raises; the worst case is an all-empty result.
        """
        limit = self._config.max_content_length
        if len(content) > limit:
            logger.debug("Truncating %d chars to %d for extraction", len(content), limit)
            content = content[:limit]
        return await self.extractor_for(content_type).extract(content)


__all__ = ["AnyResult", "ExtractionEngine"]
