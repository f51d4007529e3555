"""Threat scan data models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, BeforeValidator, Field
from typing_extensions import Annotated

from app.models.analysis import ClampedScore, NullableText, TextList, coerce_level, default_if_none, lenient_level


class ScanType(str, Enum):
    """Kinds of content a user can submit for scanning."""
    FAKE_PROFILE = "fake_profile"
    PHISHING = "phishing"
    SCAM_MESSAGE = "scam_message"
    URL_ANALYSIS = "url_analysis"


class ThreatLevel(str, Enum):
    """Severity of a detected threat or indicator."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ThreatLevelField = Annotated[ThreatLevel, BeforeValidator(coerce_level)]


class RiskIndicator(BaseModel):
    """A single suspicious signal in the scanned content."""
    indicator: NullableText = ""
    severity: Annotated[ThreatLevel, lenient_level(ThreatLevel, ThreatLevel.LOW)] = ThreatLevel.LOW
    explanation: NullableText = ""


class ThreatAssessment(BaseModel):
    """The verdict the model returns for a scanned sample."""
    is_threat: Annotated[bool, default_if_none(False)] = False
    threat_level: Annotated[ThreatLevelField, default_if_none(ThreatLevel.LOW)] = ThreatLevel.LOW
    threat_score: ClampedScore = 0
    threat_category: Annotated[str, default_if_none("safe")] = "safe"
    detected_patterns: TextList = Field(default_factory=list)
    risk_indicators: Annotated[list[RiskIndicator], default_if_none(list)] = Field(default_factory=list)
    explanation: NullableText = ""
    recommended_action: NullableText = ""

    @classmethod
    def fallback(cls) -> "ThreatAssessment":
        """Verdict stored when the model reply cannot be parsed (fails open)."""
        return cls(
            is_threat=False,
            threat_level=ThreatLevel.LOW,
            threat_score=0,
            threat_category="safe",
            explanation="Unable to parse analysis results",
            recommended_action="Review the content manually",
        )


class ThreatScanRequest(BaseModel):
    """Request body for a threat scan."""
    scan_type: ScanType
    content: str


class ThreatScan(ThreatAssessment):
    """Persisted scan: the submitted sample plus its verdict."""
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    scan_type: ScanType
    content: str
    is_fallback: bool = False
    processing_time_ms: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
