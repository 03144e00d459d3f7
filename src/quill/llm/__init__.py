"""Remote text service access and reply parsing."""

from .errors import (
    AuthError,
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    TransientServiceError,
)
from .mock import MockTextService
from .service import AnthropicTextService, TextService

__all__ = [
    "AnthropicTextService",
    "AuthError",
    "ConfigurationError",
    "LLMError",
    "MalformedResponseError",
    "MockTextService",
    "TextService",
    "TransientServiceError",
]
