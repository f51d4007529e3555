"""Voice Assistant - answers follow-up questions about an analysed document.

Speech recognition and synthesis happen in the browser; this agent receives the
transcribed question and returns plain text short enough to be spoken.
"""

import logging

from app.config import get_settings
from app.models.chat import AnalysisContext
from core.agents.prompts.voice_assistant_prompt import (
    VOICE_ASSISTANT_SYSTEM_PROMPT,
    format_analysis_context,
    format_voice_assistant_prompt,
)
from core.exceptions import ContentValidationError, UpstreamError
from core.llm_client import ModelClient, get_model_client

logger = logging.getLogger("aurora.voice_assistant")

MAX_QUERY_CHARS = 2000


class VoiceAssistant:
    """Answers a question from the analysis context with one model call."""

    MAX_TOKENS = 300
    TEMPERATURE = 0.7

    def __init__(self, model_client: ModelClient | None = None, model: str | None = None) -> None:
        self._model_client = model_client
        self.model = model or get_settings().assistant_model

    @property
    def model_client(self) -> ModelClient:
        if self._model_client is None:
            self._model_client = get_model_client()
        return self._model_client

    def answer(self, query: str, context: AnalysisContext, reference_id: str = "voice") -> str:
        """Answer ``query`` using the analysis in ``context``.

        Raises:
            ContentValidationError: If the question is blank or too long.
            UpstreamError: If the model cannot be reached or returns nothing.
        """
        query = (query or "").strip()
        if not query:
            raise ContentValidationError("Question must not be empty")
        if len(query) > MAX_QUERY_CHARS:
            raise ContentValidationError(f"Question must be at most {MAX_QUERY_CHARS} characters")

        rendered = format_analysis_context(
            summary=context.summary,
            risk_level=context.risk_level,
            clauses=context.clauses,
            obligations=context.obligations,
            actions=context.actions,
        )
        reply = self.model_client.complete(
            operation="VOICE_QUERY",
            reference_id=reference_id,
            model=self.model,
            system_prompt=VOICE_ASSISTANT_SYSTEM_PROMPT,
            user_prompt=format_voice_assistant_prompt(query, rendered),
            max_tokens=self.MAX_TOKENS,
            temperature=self.TEMPERATURE,
        )

        response = reply.content.strip()
        if not response:
            raise UpstreamError("AI returned an empty answer", status_code=502)
        return response
