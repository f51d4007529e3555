"""Threat Detector - single-shot classification of suspicious content."""

import logging
import time
from dataclasses import dataclass

from app.config import get_settings
from app.models.threat import ScanType, ThreatAssessment
from core.agents.prompts.threat_detection_prompt import (
    THREAT_DETECTION_SYSTEM_PROMPT,
    format_threat_detection_prompt,
)
from core.agents.utils.json_parser import parse_model_json
from core.exceptions import ContentValidationError
from core.llm_client import ModelClient, get_model_client

logger = logging.getLogger("aurora.threat_detector")

MAX_CONTENT_CHARS = 20_000


@dataclass
class ThreatDetectionResult:
    """Verdict plus how it was obtained."""
    assessment: ThreatAssessment
    is_fallback: bool
    processing_time_ms: int


class ThreatDetector:
    """Classifies a content sample as malicious or benign.

    An unparseable reply yields ``ThreatAssessment.fallback()``: the scan is
    reported as safe/low and flagged ``is_fallback`` so callers can tell.
    """

    MAX_TOKENS = 2000
    TEMPERATURE = 0.3

    def __init__(self, model_client: ModelClient | None = None, model: str | None = None) -> None:
        self._model_client = model_client
        self.model = model or get_settings().threat_model

    @property
    def model_client(self) -> ModelClient:
        if self._model_client is None:
            self._model_client = get_model_client()
        return self._model_client

    def scan(self, scan_type: ScanType, content: str, reference_id: str = "scan") -> ThreatDetectionResult:
        """Scan one sample.

        Raises:
            ContentValidationError: If the content is blank or too long.
            UpstreamError: If the model cannot be reached.
        """
        if not content or not content.strip():
            raise ContentValidationError("Content to scan must not be empty")
        if len(content) > MAX_CONTENT_CHARS:
            raise ContentValidationError(f"Content to scan must be at most {MAX_CONTENT_CHARS} characters")

        start_time = time.time()
        reply = self.model_client.complete(
            operation="THREAT_SCAN",
            reference_id=reference_id,
            model=self.model,
            system_prompt=THREAT_DETECTION_SYSTEM_PROMPT,
            user_prompt=format_threat_detection_prompt(scan_type.value, content),
            max_tokens=self.MAX_TOKENS,
            temperature=self.TEMPERATURE,
        )

        parsed = parse_model_json(reply.content, ThreatAssessment)
        if parsed.ok:
            assessment, is_fallback = parsed.value, False
        else:
            logger.warning(f"Threat scan {reference_id} reply unusable ({parsed.error}); reporting safe")
            assessment, is_fallback = ThreatAssessment.fallback(), True

        return ThreatDetectionResult(
            assessment=assessment,
            is_fallback=is_fallback,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )
