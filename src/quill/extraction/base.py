"""Generic two-tier extractor.

An Extractor holds an ordered list of strategies (normally the AI strategy
followed by the heuristic one). Strategies are tried in order; the first
result with minimum data wins, otherwise the last strategy's result is
returned. Nothing raised by a strategy reaches the caller.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from quill.config import CredentialProvider
from quill.llm.errors import (
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    TransientServiceError,
)
from quill.llm.response import parse_json_object
from quill.llm.service import TextService
from quill.network import ConnectivitySignal

logger = logging.getLogger(__name__)


class ExtractionResult(Protocol):
    """Structural contract shared by every per-type result."""

    @property
    def has_minimum_data(self) -> bool: ...

    def to_dict(self) -> dict[str, Any]: ...


T = TypeVar("T", bound=ExtractionResult)


class Strategy(Protocol[T]):
    """One way of producing a result from content."""

    name: str

    async def extract(self, content: str) -> T: ...


@dataclass
class HeuristicStrategy(Generic[T]):
    """Deterministic pattern-based extraction."""

    parse: Callable[[str], T]
    name: str = "heuristic"

    async def extract(self, content: str) -> T:
        return self.parse(content)


class AIStrategy(Generic[T]):
    """Extraction through the remote text service.

    The prompt template must contain a ``{content}`` placeholder and ask for
    a single JSON object, which ``from_dict`` turns into a result.
    """

    name = "llm"

    def __init__(
        self,
        service: TextService,
        prompt: str,
        from_dict: Callable[[dict[str, Any]], T],
        max_tokens: int = 1024,
        credentials: CredentialProvider | None = None,
        connectivity: ConnectivitySignal | None = None,
    ) -> None:
        self._service = service
        self._prompt = prompt
        self._from_dict = from_dict
        self._max_tokens = max_tokens
        self._credentials = credentials
        self._connectivity = connectivity

    async def extract(self, content: str) -> T:
        """Ask the model for the result.

        Raises:
            ConfigurationError: If no credential is configured
            TransientServiceError: If the device is offline or the call fails
            MalformedResponseError: If the reply is not a usable JSON object
        """
        if self._credentials is not None and not self._credentials.has_credential:
            raise ConfigurationError("No service credential configured")
        if self._connectivity is not None and not self._connectivity.is_online:
            raise TransientServiceError("Device is offline")

        reply = await self._service.request(self._prompt.format(content=content), self._max_tokens)
        data = parse_json_object(reply)
        try:
            return self._from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(f"Reply does not match schema: {e}") from e


class Extractor(Generic[T]):
    """Runs strategies in order until one yields minimum data."""

    def __init__(self, strategies: list[Strategy[T]], empty: Callable[[], T]) -> None:
        """Initialize the extractor.

        Args:
            strategies: Strategies in priority order; the last is the fallback
            empty: Factory for the all-null result
        """
        if not strategies:
            raise ValueError("Extractor needs at least one strategy")
        self._strategies = strategies
        self._empty = empty

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def extract(self, content: str) -> T:
        """Extract a result; never raises for any input."""
        last_result: T | None = None

        for strategy in self._strategies:
            last_result = None
            try:
                result = await strategy.extract(content)
            except ConfigurationError as e:
                logger.debug("%s strategy unavailable: %s", strategy.name, e)
                continue
            except LLMError as e:
                logger.warning("%s extraction failed, falling back: %s", strategy.name, e)
                continue
            except Exception:
                logger.exception("%s extraction raised unexpectedly", strategy.name)
                continue

            if result.has_minimum_data:
                return result
            last_result = result

        return last_result if last_result is not None else self._empty()


__all__ = [
    "AIStrategy",
    "ExtractionResult",
    "Extractor",
    "HeuristicStrategy",
    "Strategy",
]
