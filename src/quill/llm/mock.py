"""Mock text service for testing and offline demos.

Replies are scripted per call or matched by a prompt substring.
"""

import asyncio
from collections import deque


class MockTextService:
    """Scripted stand-in for the remote text service."""

    def __init__(self, default_response: str = "{}") -> None:
        """Initialize mock service.

        Args:
            default_response: Reply used when nothing else is queued or matched
        """
        self._default_response = default_response
        self._queued: deque[str | Exception] = deque()
        self._rules: list[tuple[str, str | Exception]] = []
        self._error: Exception | None = None
        self._delay_seconds = 0.0
        self.prompts: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def set_response(self, text: str) -> None:
        """Set the default reply and clear any sticky error."""
        self._default_response = text
        self._error = None

    def set_error(self, error: Exception) -> None:
        """Raise this error on every request until cleared."""
        self._error = error

    def clear_error(self) -> None:
        self._error = None

    def queue_response(self, reply: str | Exception) -> None:
        """Queue a one-shot reply (or error) for the next request."""
        self._queued.append(reply)

    def respond_when(self, prompt_contains: str, reply: str | Exception) -> None:
        """Reply with ``reply`` whenever the prompt contains a substring."""
        self._rules.append((prompt_contains, reply))

    def set_delay(self, seconds: float) -> None:
        """Simulate latency before each reply."""
        self._delay_seconds = seconds

    async def request(self, prompt: str, max_tokens: int) -> str:
        """Return the scripted reply for this prompt."""
        self.prompts.append(prompt)

        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)

        if self._error is not None:
            raise self._error

        reply: str | Exception = self._default_response
        if self._queued:
            reply = self._queued.popleft()
        else:
            for needle, rule_reply in self._rules:
                if needle in prompt:
                    reply = rule_reply
                    break

        if isinstance(reply, Exception):
            raise reply
        return reply

    def reset(self) -> None:
        """Reset scripted state and call history."""
        self._queued.clear()
        self._rules.clear()
        self._error = None
        self._delay_seconds = 0.0
        self.prompts.clear()


__all__ = ["MockTextService"]
