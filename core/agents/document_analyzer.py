"""Document Analyzer - risk analysis of an extracted legal document.

Short documents are analysed with one model call. Documents longer than the
chunk bound are split on paragraph boundaries and each chunk is analysed in
turn, strictly one call at a time with a fixed pause between calls to stay
under the provider's rate limits. Chunk results are merged by
``core.aggregation.chunk_merger``.

Failure policy:
- single call, unparseable reply -> ``AnalysisResult.fallback()`` (medium, 50)
- single call, upstream failure -> ``UpstreamError`` propagates
- chunk, unparseable reply or upstream failure -> chunk skipped
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from app.config import get_settings
from app.models.analysis import AnalysisResult
from core.aggregation.chunk_merger import DEFAULT_MAX_CLAUSES, merge_chunk_results
from core.agents.prompts.document_analysis_prompt import (
    DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
    format_chunk_analysis_prompt,
    format_document_analysis_prompt,
)
from core.agents.utils.json_parser import parse_model_json
from core.decomposition.chunker import Chunk, build_chunks
from core.exceptions import UpstreamError
from core.llm_client import ModelClient, get_model_client

logger = logging.getLogger("aurora.document_analyzer")


@dataclass
class AnalyzerConfig:
    """Tunables for the analyzer; defaults come from settings."""
    model: str
    max_chunk_size: int = 50_000
    chunk_delay_seconds: float = 0.5
    max_clauses: int = DEFAULT_MAX_CLAUSES

    @classmethod
    def from_settings(cls) -> "AnalyzerConfig":
        settings = get_settings()
        return cls(
            model=settings.analysis_model,
            max_chunk_size=settings.max_chunk_size,
            chunk_delay_seconds=settings.chunk_delay_seconds,
            max_clauses=settings.max_clauses,
        )


class DocumentAnalyzer:
    """Stateless analyzer turning document text into an ``AnalysisResult``.

    Example:
        analyzer = DocumentAnalyzer()
        result = analyzer.analyze(text, reference_id=str(analysis_id))
        print(result.risk_level, result.risk_score)
    """

    MAX_TOKENS_SINGLE = 16_000
    MAX_TOKENS_CHUNK = 12_000
    TEMPERATURE = 0.2

    def __init__(
        self,
        model_client: ModelClient | None = None,
        config: AnalyzerConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._model_client = model_client
        self.config = config or AnalyzerConfig.from_settings()
        self._sleep = sleep

    @property
    def model_client(self) -> ModelClient:
        if self._model_client is None:
            self._model_client = get_model_client()
        return self._model_client

    def needs_chunking(self, text: str) -> bool:
        return len(text) > self.config.max_chunk_size

    def analyze(self, text: str, reference_id: str = "document") -> AnalysisResult:
        """Analyze a document, chunking it when it is over the size bound.

        Args:
            text: Extracted document text.
            reference_id: Identifier used to label model calls.

        Returns:
            The (possibly merged or fallback) AnalysisResult.

        Raises:
            UpstreamError: When the single-call path cannot reach the model.
        """
        logger.info(f"Analyzing {reference_id}: {len(text)} characters")
        if self.needs_chunking(text):
            return self.analyze_chunked(text, reference_id)
        return self.analyze_single(text, reference_id)

    def analyze_single(self, text: str, reference_id: str = "document") -> AnalysisResult:
        """Analyze a document with one model call."""
        reply = self.model_client.complete(
            operation="DOCUMENT_ANALYSIS",
            reference_id=reference_id,
            model=self.config.model,
            system_prompt=DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
            user_prompt=format_document_analysis_prompt(text),
            max_tokens=self.MAX_TOKENS_SINGLE,
            temperature=self.TEMPERATURE,
        )

        parsed = parse_model_json(reply.content, AnalysisResult)
        if not parsed.ok:
            logger.warning(f"Falling back for {reference_id}: {parsed.error}")
            return AnalysisResult.fallback()
        return parsed.value.model_copy(update={"is_fallback": False})

    def analyze_chunked(self, text: str, reference_id: str = "document") -> AnalysisResult:
        """Analyze a large document chunk by chunk and merge the results."""
        chunks = build_chunks(text, self.config.max_chunk_size)
        logger.info(f"{reference_id} split into {len(chunks)} chunks")

        results: list[AnalysisResult | None] = []
        for chunk in chunks:
            if chunk.index > 0:
                self._sleep(self.config.chunk_delay_seconds)
            results.append(self.analyze_chunk(chunk, reference_id))

        merged_count = sum(1 for result in results if result is not None)
        if merged_count < len(chunks):
            logger.warning(f"{reference_id}: {len(chunks) - merged_count}/{len(chunks)} chunks skipped")

        return merge_chunk_results(results, max_clauses=self.config.max_clauses)

    def analyze_chunk(self, chunk: Chunk, reference_id: str = "document") -> AnalysisResult | None:
        """Analyze one chunk; ``None`` means the chunk contributes nothing."""
        logger.info(f"Analyzing {chunk.label} of {reference_id}")
        try:
            reply = self.model_client.complete(
                operation="CHUNK_ANALYSIS",
                reference_id=f"{reference_id}:chunk-{chunk.index + 1}",
                model=self.config.model,
                system_prompt=DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
                user_prompt=format_chunk_analysis_prompt(chunk.text, chunk.index + 1, chunk.total),
                max_tokens=self.MAX_TOKENS_CHUNK,
                temperature=self.TEMPERATURE,
            )
        except UpstreamError as e:
            logger.warning(f"Skipping {chunk.label} of {reference_id}: {e}")
            return None

        parsed = parse_model_json(reply.content, AnalysisResult)
        if not parsed.ok:
            logger.warning(f"Skipping {chunk.label} of {reference_id}: {parsed.error}")
            return None
        return parsed.value
