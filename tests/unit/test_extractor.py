"""Unit tests for the two-tier extractor and the extraction engine."""

from dataclasses import asdict, dataclass
from typing import Any

import pytest

from quill.config import ExtractionConfig, LLMConfig, StaticCredentials
from quill.extraction import (
    AIStrategy,
    ExpenseResult,
    ExtractionEngine,
    Extractor,
    GeneralResult,
    HeuristicStrategy,
    TodoResult,
)
from quill.llm.errors import (
    ConfigurationError,
    MalformedResponseError,
    TransientServiceError,
)
from quill.llm.mock import MockTextService
from quill.network import StaticConnectivity
from quill.notes.models import ContentType


@dataclass(frozen=True)
class FakeResult:
    value: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return self.value is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class FakeStrategy:
    """Strategy returning a fixed result or raising a fixed error."""

    def __init__(self, name: str, result: FakeResult | None = None, error: Exception | None = None):
        self.name = name
        self._result = result
        self._error = error
        self.calls = 0

    async def extract(self, content: str) -> FakeResult:
        self.calls += 1
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result


class TestExtractor:
    """Tests for strategy ordering and fallback."""

    def test_needs_a_strategy(self) -> None:
        """Test needs a strategy."""
        with pytest.raises(ValueError):
            Extractor([], empty=FakeResult)

    async def test_first_useful_result_wins(self) -> None:
        """Test first useful result wins."""
        first = FakeStrategy("llm", FakeResult("ai"))
        second = FakeStrategy("heuristic", FakeResult("local"))
        result = await Extractor([first, second], empty=FakeResult).extract("x")
        assert result == FakeResult("ai")
        assert second.calls == 0

    async def test_falls_back_when_first_lacks_data(self) -> None:
        """Test falls back when first lacks data."""
        first = FakeStrategy("llm", FakeResult())
        second = FakeStrategy("heuristic", FakeResult("local"))
        result = await Extractor([first, second], empty=FakeResult).extract("x")
        assert result == FakeResult("local")

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("no key"),
            TransientServiceError("offline"),
            MalformedResponseError("junk"),
            RuntimeError("boom"),
        ],
    )
    async def test_errors_fall_back(self, error: Exception) -> None:
        """Test errors fall back."""
        first = FakeStrategy("llm", error=error)
        second = FakeStrategy("heuristic", FakeResult("local"))
        result = await Extractor([first, second], empty=FakeResult).extract("x")
        assert result == FakeResult("local")

    async def test_last_result_returned_without_minimum_data(self) -> None:
        """Test last result returned without minimum data."""
        first = FakeStrategy("llm", error=TransientServiceError("down"))
        second = FakeStrategy("heuristic", FakeResult())
        result = await Extractor([first, second], empty=FakeResult).extract("x")
        assert result == FakeResult()

    async def test_empty_result_when_last_strategy_raises(self) -> None:
        """Test empty result when last strategy raises."""
        first = FakeStrategy("llm", FakeResult())
        second = FakeStrategy("heuristic", error=RuntimeError("boom"))
        result = await Extractor([first, second], empty=FakeResult).extract("x")
        assert result == FakeResult()

    def test_strategy_names(self) -> None:
        """Test strategy names are reported in order."""
        extractor = Extractor(
            [FakeStrategy("llm", FakeResult()), HeuristicStrategy(lambda _: FakeResult())],
            empty=FakeResult,
        )
        assert extractor.strategy_names == ["llm", "heuristic"]


class TestAIStrategy:
    """Tests for model-backed extraction."""

    @pytest.fixture
    def service(self) -> MockTextService:
        return MockTextService()

    def _strategy(self, service: MockTextService, **kwargs: Any) -> AIStrategy[ExpenseResult]:
        return AIStrategy(
            service=service,
            prompt="Extract expense:\n{content}",
            from_dict=ExpenseResult.from_dict,
            **kwargs,
        )

    async def test_parses_reply(self, service: MockTextService) -> None:
        """Test a fenced JSON reply is parsed into a result."""
        service.set_response('```json\n{"merchant": "Cafe", "amount": 4.5}\n```')
        result = await self._strategy(service).extract("Cafe $4.50")
        assert result.merchant == "Cafe"
        assert result.currency == "USD"
        assert service.prompts == ["Extract expense:\nCafe $4.50"]

    async def test_no_credential(self, service: MockTextService) -> None:
        """Test no credential raises before calling the service."""
        strategy = self._strategy(service, credentials=StaticCredentials(None))
        with pytest.raises(ConfigurationError):
            await strategy.extract("x")
        assert service.call_count == 0

    async def test_offline(self, service: MockTextService) -> None:
        """Test offline state raises before calling the service."""
        strategy = self._strategy(
            service, credentials=StaticCredentials("k"), connectivity=StaticConnectivity(False)
        )
        with pytest.raises(TransientServiceError):
            await strategy.extract("x")
        assert service.call_count == 0

    async def test_garbage_reply(self, service: MockTextService) -> None:
        """Test a prose reply raises MalformedResponseError."""
        service.set_response("I could not find an expense")
        with pytest.raises(MalformedResponseError):
            await self._strategy(service).extract("x")

    async def test_schema_violation_is_malformed(self, service: MockTextService) -> None:
        """Test schema violation is malformed."""
        service.set_response('{"items": "buy milk"}')
        strategy = AIStrategy(service=service, prompt="{content}", from_dict=TodoResult.from_dict)
        with pytest.raises(MalformedResponseError):
            await strategy.extract("buy milk")


class TestExtractionEngine:
    """Tests for per-type dispatch."""

    def test_heuristics_only_without_service(self) -> None:
        """Test heuristics only without service."""
        engine = ExtractionEngine()
        assert engine.extractor_for(ContentType.TODO).strategy_names == ["heuristic"]

    def test_ai_tier_first_with_service(self) -> None:
        """Test ai tier first with service."""
        engine = ExtractionEngine(service=MockTextService())
        assert engine.extractor_for(ContentType.TODO).strategy_names == ["llm", "heuristic"]

    def test_ai_tier_disabled_by_config(self) -> None:
        """Test ai tier disabled by config."""
        engine = ExtractionEngine(config=ExtractionConfig(use_llm=False), service=MockTextService())
        assert engine.extractor_for(ContentType.EVENT).strategy_names == ["heuristic"]

    def test_extractors_are_cached(self) -> None:
        """Test extractors are cached."""
        engine = ExtractionEngine()
        assert engine.extractor_for(ContentType.RECIPE) is engine.extractor_for(ContentType.RECIPE)

    async def test_uses_model_result(self) -> None:
        """Test uses model result."""
        service = MockTextService('{"merchant": "Model Cafe", "amount": 9}')
        engine = ExtractionEngine(
            service=service,
            credentials=StaticCredentials("k"),
            connectivity=StaticConnectivity(True),
        )
        result = await engine.extract(ContentType.EXPENSE, "Joe's Diner\n$12.50\ncash")
        assert isinstance(result, ExpenseResult)
        assert result.merchant == "Model Cafe"

    async def test_heuristic_total_keeps_every_digit(self) -> None:
        """Test that a four-digit receipt total survives the heuristic tier."""
        result = await ExtractionEngine().extract(ContentType.EXPENSE, "Rent\nTotal: $2400.00")
        assert isinstance(result, ExpenseResult)
        assert result.amount == 2400.0

    async def test_offline_uses_heuristics(self) -> None:
        """Test offline uses heuristics."""
        service = MockTextService('{"merchant": "Model Cafe", "amount": 9}')
        engine = ExtractionEngine(
            service=service,
            credentials=StaticCredentials("k"),
            connectivity=StaticConnectivity(False),
        )
        result = await engine.extract(ContentType.EXPENSE, "Joe's Diner\n$12.50\ncash")
        assert result.merchant == "Joe's Diner"
        assert service.call_count == 0

    async def test_garbage_reply_uses_heuristics(self) -> None:
        """Test garbage reply uses heuristics."""
        engine = ExtractionEngine(service=MockTextService("not json at all"))
        result = await engine.extract(ContentType.TODO, "- milk\n- eggs")
        assert isinstance(result, TodoResult)
        assert [item.text for item in result.items] == ["milk", "eggs"]

    async def test_uses_configured_token_limit(self) -> None:
        """Test uses configured token limit."""
        seen: list[int] = []

        class RecordingService:
            async def request(self, prompt: str, max_tokens: int) -> str:
                seen.append(max_tokens)
                return "{}"

        engine = ExtractionEngine(
            llm_config=LLMConfig(extraction_max_tokens=321), service=RecordingService()
        )
        await engine.extract(ContentType.GENERAL, "hello")
        assert seen == [321]

    async def test_content_truncated(self) -> None:
        """Test overlong content is truncated before extraction."""
        engine = ExtractionEngine(config=ExtractionConfig(max_content_length=10))
        result = await engine.extract(ContentType.GENERAL, "abcdefghijklmnopqrstuvwxyz")
        assert isinstance(result, GeneralResult)
        assert result.body == "abcdefghij"

    @pytest.mark.parametrize("content_type", list(ContentType))
    @pytest.mark.parametrize(
        "content",
        ["", "   \n\t ", "\x00\x01 ??? ### $$$ ((((", "[" * 5000, "x" * 50000],
    )
    async def test_never_raises(self, content_type: ContentType, content: str) -> None:
        """Test extraction never raises for odd input."""
        engine = ExtractionEngine(service=MockTextService("{]"))
        result = await engine.extract(content_type, content)
        assert isinstance(result.to_dict(), dict)

    @pytest.mark.parametrize("content_type", list(ContentType))
    async def test_deterministic(self, content_type: ContentType) -> None:
        """Test heuristic extraction gives identical results on repeat."""
        text = "Lunch with Bob\nTuesday 1pm\n- bring notes\n$12.00"
        engine = ExtractionEngine()
        first = await engine.extract(content_type, text)
        second = await engine.extract(content_type, text)
        assert first == second
