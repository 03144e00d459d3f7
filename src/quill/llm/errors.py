"""Error types for the remote text service.

Every failure of the AI path maps onto one of these so callers can route
to heuristics (or the enhancement queue) without inspecting SDK types.
"""


class LLMError(Exception):
    """Base exception for remote text service errors."""

    pass


class ConfigurationError(LLMError):
    """Raised when no service credential is configured."""

    pass


class AuthError(ConfigurationError):
    """Raised when the configured credential is rejected."""

    pass


class TransientServiceError(LLMError):
    """Raised on timeouts, connection failures, rate limits and 5xx replies."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize transient error.

        Args:
            message: Error message.
            status_code: HTTP status code if available.
        """
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(LLMError):
    """Raised when a reply cannot be parsed or violates the expected schema."""

    pass


__all__ = [
    "AuthError",
    "ConfigurationError",
    "LLMError",
    "MalformedResponseError",
    "TransientServiceError",
]
