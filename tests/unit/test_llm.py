"""Unit tests for the remote text service, reply helpers and enhancer."""

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import pytest

from quill.config import LLMConfig
from quill.llm import (
    AnthropicTextService,
    AuthError,
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    MockTextService,
    TransientServiceError,
)
from quill.llm.enhancer import TextEnhancer, enhancement_prompt, find_changes
from quill.llm.response import (
    normalize_strings,
    optional_bool,
    optional_float,
    optional_str,
    parse_json_object,
    strip_code_fences,
)
from quill.notes.models import ContentType


def text_reply(text: str) -> MagicMock:
    return MagicMock(
        content=[MagicMock(type="text", text=text)],
        usage=MagicMock(input_tokens=10, output_tokens=20),
        model="claude-3-5-haiku-latest",
    )


@pytest.fixture
def mock_anthropic() -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=text_reply("hello"))
    return client


@pytest.fixture
def service(mock_anthropic: MagicMock) -> AnthropicTextService:
    with patch("quill.llm.service.anthropic.AsyncAnthropic", return_value=mock_anthropic):
        return AnthropicTextService(api_key="test-key", timeout_seconds=5.0)


class TestAnthropicTextService:
    """Tests for AnthropicTextService.request()."""

    async def test_returns_reply_text(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test returns reply text."""
        assert await service.request("hi", max_tokens=64) == "hello"
        kwargs = mock_anthropic.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 64
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    async def test_missing_key(self) -> None:
        """Test a missing key raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            await AnthropicTextService(api_key=None).request("hi", max_tokens=10)

    def test_from_config(self) -> None:
        """Test the client is built from the llm config."""
        with patch("quill.llm.service.anthropic.AsyncAnthropic") as client_cls:
            AnthropicTextService.from_config(LLMConfig(timeout_seconds=12.0), "key")
        client_cls.assert_called_once_with(api_key="key", timeout=12.0)

    async def test_timeout_is_transient(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test timeout is transient."""
        mock_anthropic.messages.create.side_effect = anthropic.APITimeoutError(request=MagicMock())
        with pytest.raises(TransientServiceError):
            await service.request("hi", max_tokens=10)

    async def test_connection_error_is_transient(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test connection error is transient."""
        mock_anthropic.messages.create.side_effect = anthropic.APIConnectionError(
            request=MagicMock()
        )
        with pytest.raises(TransientServiceError):
            await service.request("hi", max_tokens=10)

    async def test_rate_limit_is_transient(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test rate limit is transient."""
        mock_anthropic.messages.create.side_effect = anthropic.RateLimitError(
            message="slow down", response=MagicMock(status_code=429), body=None
        )
        with pytest.raises(TransientServiceError) as exc_info:
            await service.request("hi", max_tokens=10)
        assert exc_info.value.status_code == 429

    async def test_server_error_is_transient(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test server error is transient."""
        mock_anthropic.messages.create.side_effect = anthropic.APIStatusError(
            message="Server error", response=MagicMock(status_code=503), body=None
        )
        with pytest.raises(TransientServiceError):
            await service.request("hi", max_tokens=10)

    async def test_client_error_is_plain_llm_error(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test client error is plain llm error."""
        mock_anthropic.messages.create.side_effect = anthropic.APIStatusError(
            message="Bad request", response=MagicMock(status_code=400), body=None
        )
        with pytest.raises(LLMError) as exc_info:
            await service.request("hi", max_tokens=10)
        assert not isinstance(exc_info.value, TransientServiceError)

    async def test_auth_error(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test a rejected key raises AuthError."""
        mock_anthropic.messages.create.side_effect = anthropic.AuthenticationError(
            message="Invalid API key", response=MagicMock(status_code=401), body=None
        )
        with pytest.raises(AuthError):
            await service.request("hi", max_tokens=10)

    async def test_response_validation_error_is_malformed(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test that a reply the SDK cannot validate maps to MalformedResponseError."""
        mock_anthropic.messages.create.side_effect = anthropic.APIResponseValidationError(
            response=MagicMock(status_code=200), body=None, message="bad shape"
        )
        with pytest.raises(MalformedResponseError):
            await service.request("hi", max_tokens=10)

    async def test_other_api_error_is_transient(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test that any remaining SDK error stays inside the LLMError taxonomy."""
        mock_anthropic.messages.create.side_effect = anthropic.APIError(
            "stream interrupted", request=MagicMock(), body=None
        )
        with pytest.raises(TransientServiceError):
            await service.request("hi", max_tokens=10)

    async def test_empty_reply_is_malformed(
        self, service: AnthropicTextService, mock_anthropic: MagicMock
    ) -> None:
        """Test empty reply is malformed."""
        mock_anthropic.messages.create.return_value = text_reply("   ")
        with pytest.raises(MalformedResponseError):
            await service.request("hi", max_tokens=10)


class TestReplyHelpers:
    def test_strip_code_fences(self) -> None:
        """Test strip code fences."""
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences("  plain  ") == "plain"

    def test_parse_json_with_prose(self) -> None:
        """Test parse json with prose."""
        assert parse_json_object('Sure! {"type": "todo"} Hope that helps') == {"type": "todo"}

    @pytest.mark.parametrize("reply", ["", "no braces", "{not json}", "[1, 2]"])
    def test_parse_json_rejects(self, reply: str) -> None:
        """Test parse json rejects."""
        with pytest.raises(MalformedResponseError):
            parse_json_object(reply)

    def test_normalize_strings(self) -> None:
        """Test list items are flattened to strings."""
        raw = ["a", "  ", {"task": "b"}, {"x": "c", "y": "d"}, 3, None]
        assert normalize_strings(raw) == ["a", "b", "c d", "3"]
        assert normalize_strings("not a list") == []

    def test_optional_coercions(self) -> None:
        """Test optional field coercion."""
        assert optional_str("  ") is None
        assert optional_str(5) == "5"
        assert optional_float("$1,234.50") == 1234.5
        assert optional_float(True) is None
        assert optional_float("n/a") is None
        assert optional_bool("Yes") is True
        assert optional_bool(0) is False


class TestMockTextService:
    async def test_scripting_precedence(self) -> None:
        """Test queued replies win over prompt rules."""
        service = MockTextService("default")
        service.respond_when("needle", "matched")
        service.queue_response("queued")

        assert await service.request("has needle", 10) == "queued"
        assert await service.request("has needle", 10) == "matched"
        assert await service.request("other", 10) == "default"
        assert service.call_count == 3

    async def test_sticky_error(self) -> None:
        """Test a sticky error is raised until cleared."""
        service = MockTextService()
        service.set_error(TransientServiceError("down"))
        with pytest.raises(TransientServiceError):
            await service.request("x", 10)
        service.clear_error()
        assert await service.request("x", 10) == "{}"


class TestTextEnhancer:
    def test_prompt_per_type(self) -> None:
        """Test prompt per type."""
        assert "email" in enhancement_prompt("x", ContentType.EMAIL).lower()
        assert "to-do" in enhancement_prompt("x", ContentType.TODO)
        assert "meeting" in enhancement_prompt("x", ContentType.MEETING)
        assert enhancement_prompt("x", ContentType.RECIPE) == enhancement_prompt(
            "x", ContentType.GENERAL
        )
        assert enhancement_prompt("hello wrld", ContentType.GENERAL).count("hello wrld") == 1

    def test_find_changes(self) -> None:
        """Test word-level changes are reported."""
        changes = find_changes("helo wrld today", "hello world today")
        assert [(c.original, c.corrected, c.position) for c in changes] == [
            ("helo", "hello", 0),
            ("wrld", "world", 1),
        ]

    async def test_enhance(self) -> None:
        """Test enhancement returns text and changes."""
        service = MockTextService("```\nhello world\n```")
        result = await TextEnhancer(service, max_tokens=50).enhance("helo world")
        assert result.enhanced_text == "hello world"
        assert result.has_changes is True
        assert result.original_text == "helo world"

    async def test_empty_reply(self) -> None:
        """Test an empty reply raises MalformedResponseError."""
        with pytest.raises(MalformedResponseError):
            await TextEnhancer(MockTextService("   ")).enhance("text")

    async def test_service_errors_propagate(self) -> None:
        """Test service errors propagate."""
        service = MockTextService()
        service.set_error(TransientServiceError("offline"))
        with pytest.raises(TransientServiceError):
            await TextEnhancer(service).enhance("text")
