"""Unit tests for the model client.

Tests cover:
- Retry logic (3 retries with exponential backoff, factor 2)
- Which failures are retryable
- Error wrapping with status code and body
- Usage logging per call
"""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from core.cost_tracker import CostTracker, ExecutionStatus
from core.exceptions import UpstreamError
from core.llm_client import ModelClient, RetryConfig, to_upstream_error


def make_response(content: str = '{"ok": true}', prompt_tokens: int = 120, completion_tokens: int = 40) -> MagicMock:
    """Create a mock chat completions response."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content
    mock_response.usage = MagicMock()
    mock_response.usage.prompt_tokens = prompt_tokens
    mock_response.usage.completion_tokens = completion_tokens
    return mock_response


def make_status_error(status_code: int, body: str = "upstream body") -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.example.test/v1/chat/completions")
    response = httpx.Response(status_code, request=request, text=body)
    return openai.APIStatusError(f"Error code: {status_code}", response=response, body=None)


@pytest.fixture
def tracker() -> CostTracker:
    return CostTracker(logger_name="aurora.test_usage")


@pytest.fixture
def openai_client() -> MagicMock:
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = make_response()
    return mock_client


@pytest.fixture
def model_client(openai_client: MagicMock, tracker: CostTracker) -> ModelClient:
    return ModelClient(
        client=openai_client,
        retry_config=RetryConfig(initial_delay_seconds=0.01),
        tracker=tracker,
    )


def complete(client: ModelClient, **overrides):
    kwargs = {
        "operation": "THREAT_SCAN",
        "reference_id": "scan-1",
        "model": "gpt-4o-mini",
        "user_prompt": "Scan Type: phishing\n\nContent:\nhello",
        "system_prompt": "You are a detector.",
    }
    kwargs.update(overrides)
    return client.complete(**kwargs)


class TestRetryConfig:
    def test_retry_config_defaults(self) -> None:
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_retries == 3
        assert config.backoff_factor == 2.0
        assert config.initial_delay_seconds == 1.0

    def test_exponential_delays(self) -> None:
        """Test that delays double on every attempt."""
        config = RetryConfig()
        assert [config.delay_for(attempt) for attempt in range(3)] == [1.0, 2.0, 4.0]


class TestComplete:
    """Tests for a successful call."""

    def test_messages_and_reply(self, model_client: ModelClient, openai_client: MagicMock) -> None:
        """Test the request sent and the reply returned."""
        reply = complete(model_client, max_tokens=2000, temperature=0.3)

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 2000
        assert kwargs["temperature"] == 0.3
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user"]
        assert reply.content == '{"ok": true}'
        assert reply.input_tokens == 120
        assert reply.output_tokens == 40
        assert reply.retry_count == 0

    def test_without_system_prompt(self, model_client: ModelClient, openai_client: MagicMock) -> None:
        """Test that only the user message is sent when there is no system prompt."""
        complete(model_client, system_prompt=None)

        messages = openai_client.chat.completions.create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["user"]

    def test_success_is_logged(self, model_client: ModelClient, tracker: CostTracker) -> None:
        """Test that one usage log is recorded per call."""
        complete(model_client)

        logs = tracker.get_all_logs()
        assert len(logs) == 1
        assert logs[0].status == ExecutionStatus.SUCCESS
        assert logs[0].total_tokens == 160
        assert logs[0].cost_usd > 0


class TestRetries:
    """Tests for retrying transient failures."""

    @patch("core.llm_client.time.sleep")
    def test_rate_limit_retried(self, mock_sleep: MagicMock, model_client: ModelClient, openai_client: MagicMock) -> None:
        """Test that a 429 is retried and the call then succeeds."""
        openai_client.chat.completions.create.side_effect = [
            make_status_error(429),
            make_status_error(503),
            make_response(),
        ]

        reply = complete(model_client)

        assert reply.retry_count == 2
        assert openai_client.chat.completions.create.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.01, 0.02]

    @patch("core.llm_client.time.sleep")
    def test_gives_up_after_max_retries(
        self, mock_sleep: MagicMock, model_client: ModelClient, openai_client: MagicMock, tracker: CostTracker
    ) -> None:
        """Test that the error surfaces after 3 retries (4 attempts)."""
        openai_client.chat.completions.create.side_effect = make_status_error(500, "overloaded")

        with pytest.raises(UpstreamError) as exc_info:
            complete(model_client)

        assert openai_client.chat.completions.create.call_count == 4
        assert str(exc_info.value) == "[Code: 500] overloaded"
        assert tracker.get_all_logs()[-1].status == ExecutionStatus.FAILURE
        assert tracker.get_all_logs()[-1].retry_count == 3

    @patch("core.llm_client.time.sleep")
    def test_client_error_not_retried(self, mock_sleep: MagicMock, model_client: ModelClient, openai_client: MagicMock) -> None:
        """Test that a 400 fails immediately."""
        openai_client.chat.completions.create.side_effect = make_status_error(400, "bad request")

        with pytest.raises(UpstreamError) as exc_info:
            complete(model_client)

        assert exc_info.value.status_code == 400
        assert openai_client.chat.completions.create.call_count == 1
        mock_sleep.assert_not_called()

    @patch("core.llm_client.time.sleep")
    def test_empty_choices_retried(self, mock_sleep: MagicMock, model_client: ModelClient, openai_client: MagicMock) -> None:
        """Test that a reply without choices is a 502, retried like other 5xx."""
        empty = make_response()
        empty.choices = []
        openai_client.chat.completions.create.side_effect = [empty, make_response()]

        reply = complete(model_client)
        assert reply.retry_count == 1


class TestErrorClassification:
    """Tests for which failures are retryable."""

    @pytest.mark.parametrize("status_code", [408, 409, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status_code: int) -> None:
        assert to_upstream_error(make_status_error(status_code)).is_retryable

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 422])
    def test_non_retryable_statuses(self, status_code: int) -> None:
        assert not to_upstream_error(make_status_error(status_code)).is_retryable

    def test_timeout_and_connection_retryable(self) -> None:
        request = httpx.Request("POST", "https://api.example.test/v1/chat/completions")
        assert to_upstream_error(openai.APITimeoutError(request=request)).is_retryable
        assert to_upstream_error(openai.APIConnectionError(request=request)).is_retryable

    def test_unknown_errors_not_retryable(self) -> None:
        """Test that programming errors are not retried."""
        error = to_upstream_error(ValueError("boom"))
        assert not error.is_retryable
        assert error.status_code is None

    def test_status_error_keeps_body(self) -> None:
        """Test the [Code: N] body message format."""
        error = to_upstream_error(make_status_error(429, '{"error": "rate limited"}'))
        assert str(error) == '[Code: 429] {"error": "rate limited"}'
        assert error.body == '{"error": "rate limited"}'


class TestMissingApiKey:
    def test_missing_key_fails_without_retry(self, tracker: CostTracker) -> None:
        """Test that an unconfigured key is a non-retryable 401."""
        settings = MagicMock(openai_api_key="")
        client = ModelClient(tracker=tracker)

        with patch("core.llm_client.get_settings", return_value=settings):
            with pytest.raises(UpstreamError) as exc_info:
                complete(client)

        assert exc_info.value.status_code == 401
        assert not exc_info.value.is_retryable
