"""Unit tests for the Voice Assistant."""

from unittest.mock import MagicMock

import pytest

from app.models.chat import AnalysisContext
from core.agents.prompts.voice_assistant_prompt import format_analysis_context
from core.agents.voice_assistant import MAX_QUERY_CHARS, VoiceAssistant
from core.exceptions import ContentValidationError, UpstreamError
from core.llm_client import ModelClient, ModelReply


@pytest.fixture
def model_client() -> MagicMock:
    mock_client = MagicMock(spec=ModelClient)
    mock_client.complete.return_value = ModelReply(
        content="  The termination clause lets the landlord end the lease with 7 days notice.  ",
        model="gpt-4o-mini",
    )
    return mock_client


@pytest.fixture
def context() -> AnalysisContext:
    return AnalysisContext(
        summary="Residential lease for 12 months.",
        risk_level="high",
        clauses=[{"text": "Landlord may terminate with 7 days notice", "risk_level": "high"}],
        obligations=["Pay rent monthly"],
        actions=["Negotiate a longer notice period"],
    )


class TestContextFormatting:
    def test_all_sections_rendered(self) -> None:
        text = format_analysis_context("Lease", "high", [{"text": "c"}], ["Pay"], ["Review"])

        assert "Document Summary: Lease" in text
        assert "Risk Level: high" in text
        assert '"text": "c"' in text
        assert '"Pay"' in text

    def test_missing_values(self) -> None:
        text = format_analysis_context(None, None, [], [], [])
        assert "Not available" in text
        assert "Not assessed" in text


class TestAnswer:
    def test_answer_returns_stripped_text(
        self, model_client: MagicMock, context: AnalysisContext
    ) -> None:
        """Test that the raw text reply is returned."""
        assistant = VoiceAssistant(model_client=model_client, model="gpt-4o-mini")

        answer = assistant.answer("Can the landlord evict me quickly?", context, "voice-1")

        assert answer.startswith("The termination clause")
        kwargs = model_client.complete.call_args.kwargs
        assert "User question: Can the landlord evict me quickly?" in kwargs["user_prompt"]
        assert "Residential lease" in kwargs["user_prompt"]
        assert kwargs["max_tokens"] == VoiceAssistant.MAX_TOKENS

    @pytest.mark.parametrize("query", ["", "   ", "q" * (MAX_QUERY_CHARS + 1)])
    def test_invalid_query_rejected(
        self, model_client: MagicMock, context: AnalysisContext, query: str
    ) -> None:
        assistant = VoiceAssistant(model_client=model_client, model="gpt-4o-mini")

        with pytest.raises(ContentValidationError):
            assistant.answer(query, context)
        model_client.complete.assert_not_called()

    def test_empty_reply_is_an_error(self, model_client: MagicMock, context: AnalysisContext) -> None:
        model_client.complete.return_value = ModelReply(content="   ", model="gpt-4o-mini")
        assistant = VoiceAssistant(model_client=model_client, model="gpt-4o-mini")

        with pytest.raises(UpstreamError) as exc_info:
            assistant.answer("What does this mean?", context)
        assert exc_info.value.status_code == 502
