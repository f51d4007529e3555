"""Chat completions client for the model provider.

All agents talk to the provider through ``ModelClient``. It owns the lazily
created OpenAI SDK client (pointed at any OpenAI-compatible base URL), turns
SDK exceptions into ``UpstreamError`` with the status code and body text, and
retries transient failures with exponential backoff.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from functools import partial

import openai
from openai import OpenAI

from app.config import get_settings
from core.cost_tracker import CostTracker, ExecutionStatus, cost_tracker as default_tracker
from core.exceptions import UpstreamError

logger = logging.getLogger("aurora.llm_client")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    backoff_factor: float = 2.0
    initial_delay_seconds: float = 1.0

    def delay_for(self, attempt: int) -> float:
        return self.initial_delay_seconds * (self.backoff_factor ** attempt)


@dataclass
class ModelReply:
    """Text returned by one chat completion plus its usage."""
    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    execution_time_ms: int = 0
    retry_count: int = 0


def to_upstream_error(error: Exception) -> UpstreamError:
    """Wrap an SDK exception, keeping the HTTP status and body when present."""
    if isinstance(error, UpstreamError):
        return error
    if isinstance(error, openai.APIStatusError):
        try:
            body = error.response.text
        except Exception:  # response body may already be consumed
            body = None
        return UpstreamError(str(error), status_code=error.status_code, body=body or error.message)
    if isinstance(error, openai.APITimeoutError):
        return UpstreamError(f"AI request timed out: {error}", retryable=True)
    if isinstance(error, openai.APIConnectionError):
        return UpstreamError(f"AI connection failed: {error}", retryable=True)
    return UpstreamError(f"AI request failed: {error}")


class ModelClient:
    """Stateless wrapper around the provider's chat completions endpoint.

    Example:
        client = ModelClient()
        reply = client.complete(
            operation="THREAT_SCAN",
            reference_id="scan-42",
            model="gpt-4o-mini",
            system_prompt="You are a cybersecurity threat detection AI...",
            user_prompt="Scan Type: phishing\\n\\nContent:\\n...",
        )
    """

    def __init__(
        self,
        client: OpenAI | None = None,
        retry_config: RetryConfig | None = None,
        tracker: CostTracker | None = None,
    ) -> None:
        self._client = client
        self.retry_config = retry_config or RetryConfig()
        self.tracker = tracker or default_tracker

    @property
    def client(self) -> OpenAI:
        """Get or create OpenAI client (lazy initialization)."""
        if self._client is None:
            settings = get_settings()
            if not settings.openai_api_key or settings.openai_api_key == "your_openai_api_key_here":
                raise UpstreamError(
                    "AI provider API key not configured", status_code=401,
                    body="AI provider API key not configured. Set OPENAI_API_KEY in .env",
                )
            self._client = OpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.ai_base_url,
                timeout=settings.request_timeout_seconds,
                max_retries=0,
            )
        return self._client

    def _request(
        self,
        model: str,
        system_prompt: str | None,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> tuple[str, int, int]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        response = self.client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            raise UpstreamError("AI response contained no choices", status_code=502)

        usage = response.usage
        content = response.choices[0].message.content or ""
        return (
            content,
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
        )

    def complete(
        self,
        operation: str,
        reference_id: str,
        model: str,
        user_prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 4000,
        temperature: float = 0.2,
    ) -> ModelReply:
        """Run one chat completion, retrying transient failures.

        Raises:
            UpstreamError: When the call fails and retries are exhausted or the
                failure is not retryable.
        """
        start_time = time.time()
        retry_count = 0

        while True:
            try:
                content, input_tokens, output_tokens = self._request(
                    model, system_prompt, user_prompt, max_tokens, temperature
                )
                break
            except Exception as e:
                error = to_upstream_error(e)
                logger.warning(f"{operation} attempt {retry_count + 1} failed: {error}")

                if not error.is_retryable or retry_count >= self.retry_config.max_retries:
                    self.tracker.log_execution(self.tracker.create_log(
                        operation=operation,
                        reference_id=reference_id,
                        model=model,
                        input_tokens=0,
                        output_tokens=0,
                        execution_time_ms=int((time.time() - start_time) * 1000),
                        status=ExecutionStatus.FAILURE,
                        error_message=str(error),
                        retry_count=retry_count,
                    ))
                    if error is e:
                        raise
                    raise error from e

                time.sleep(self.retry_config.delay_for(retry_count))
                retry_count += 1

        execution_time_ms = int((time.time() - start_time) * 1000)
        self.tracker.log_execution(self.tracker.create_log(
            operation=operation,
            reference_id=reference_id,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            execution_time_ms=execution_time_ms,
            status=ExecutionStatus.SUCCESS,
            extra_data={"response_chars": len(content)},
            retry_count=retry_count,
        ))

        return ModelReply(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            execution_time_ms=execution_time_ms,
            retry_count=retry_count,
        )

    async def complete_async(self, *args, **kwargs) -> ModelReply:
        """Run ``complete`` in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.complete, *args, **kwargs))


# Global client instance (lazy initialization)
_client: ModelClient | None = None


def get_model_client() -> ModelClient:
    """Get the global model client instance."""
    global _client
    if _client is None:
        _client = ModelClient()
    return _client
