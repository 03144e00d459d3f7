"""Remote text service for classification, extraction and enhancement.

The service boundary is deliberately thin: a prompt goes in, text comes
out. Retries are the caller's concern (see the enhancement queue).
"""

import logging
import time
from typing import Protocol

import anthropic

from quill.config import LLMConfig

from .errors import (
    AuthError,
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    TransientServiceError,
)

logger = logging.getLogger(__name__)


class TextService(Protocol):
    """Protocol for the remote text service."""

    async def request(self, prompt: str, max_tokens: int) -> str:
        """Send a prompt and return the reply text."""
        ...


class AnthropicTextService:
    """Text service backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "claude-3-5-haiku-latest",
        temperature: float = 0.2,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the service.

        Args:
            api_key: Anthropic API key. Requests fail with ConfigurationError
                when it is missing.
            model: Model identifier.
            temperature: Sampling temperature.
            timeout_seconds: Per-request timeout.
        """
        self._model = model
        self._temperature = temperature
        self._timeout_seconds = timeout_seconds
        self._client: anthropic.AsyncAnthropic | None = None
        if api_key:
            self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)

    @classmethod
    def from_config(cls, config: LLMConfig, api_key: str | None) -> "AnthropicTextService":
        """Build a service from the llm config section."""
        return cls(
            api_key=api_key,
            model=config.model,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
        )

    async def request(self, prompt: str, max_tokens: int) -> str:
        """Send a single-turn prompt.

        Args:
            prompt: Full prompt text.
            max_tokens: Reply token limit.

        Returns:
            Reply text.

        Raises:
            ConfigurationError: If no API key is configured.
            AuthError: If the API key is rejected.
            TransientServiceError: On timeout, connection failure, 429, 5xx or
                any other SDK error.
            MalformedResponseError: If the reply has no text content or fails
                SDK validation.
            LLMError: On any other 4xx status.
        """
        if self._client is None:
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured")

        start_time = time.time()
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise AuthError("Invalid API key. Please check your ANTHROPIC_API_KEY.") from e
        except anthropic.APITimeoutError as e:
            # Timeout subclasses connection error, so it is caught first
            raise TransientServiceError(
                f"Request timed out after {self._timeout_seconds} seconds."
            ) from e
        except anthropic.APIConnectionError as e:
            raise TransientServiceError(f"Failed to connect to Anthropic API: {e}") from e
        except anthropic.RateLimitError as e:
            raise TransientServiceError("Rate limited", status_code=e.status_code) from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise TransientServiceError(
                    f"API error: {e.message}", status_code=e.status_code
                ) from e
            raise LLMError(f"API error: {e.message}") from e
        except anthropic.APIResponseValidationError as e:
            raise MalformedResponseError(f"Unexpected reply shape: {e.message}") from e
        except anthropic.APIError as e:
            raise TransientServiceError(f"Anthropic API error: {e.message}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise MalformedResponseError("Empty reply from Anthropic API")

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            "Anthropic request completed in %dms (%d tokens)",
            latency_ms,
            response.usage.input_tokens + response.usage.output_tokens,
        )
        return text


__all__ = [
    "AnthropicTextService",
    "TextService",
]
