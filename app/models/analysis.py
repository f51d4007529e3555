"""Document analysis data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, BeforeValidator, Field
from typing_extensions import Annotated


def clamp_score(v: Any) -> Any:
    """Clamp a 0-100 score before validation; numeric strings are accepted."""
    if v is None:
        return 0
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        try:
            v = float(v.strip().rstrip("%"))
        except ValueError:
            return v
    if isinstance(v, (int, float)):
        return int(round(max(0.0, min(100.0, float(v)))))
    return v


def coerce_level(v: Any) -> Any:
    """Normalize casing/whitespace of level strings ("High " -> "high")."""
    if isinstance(v, str):
        return v.strip().lower()
    return v


def coerce_text_list(v: Any) -> Any:
    """Accept a list of mixed items from the model and keep them as strings."""
    if v is None:
        return []
    if isinstance(v, list):
        items = []
        for item in v:
            if item is None:
                continue
            if isinstance(item, dict):
                item = "; ".join(str(value) for value in item.values() if value)
            text = str(item).strip()
            if text:
                items.append(text)
        return items
    return v


def default_if_none(default: Any) -> BeforeValidator:
    """Replace a JSON null with ``default`` (called first when it is a factory)."""
    return BeforeValidator(lambda v: (default() if callable(default) else default) if v is None else v)


def lenient_level(enum_cls: type[Enum], default: Enum) -> BeforeValidator:
    """Normalize a level string; null or unknown levels become ``default``."""
    def coerce(v: Any) -> Any:
        v = coerce_level(v)
        if not isinstance(v, str) or v not in {member.value for member in enum_cls}:
            return default
        return v
    return BeforeValidator(coerce)


ClampedScore = Annotated[int, BeforeValidator(clamp_score)]
TextList = Annotated[list[str], BeforeValidator(coerce_text_list)]
NullableText = Annotated[str, default_if_none("")]
NullableInt = Annotated[int, default_if_none(0)]


class AnalysisStatus(str, Enum):
    """Lifecycle of a document analysis record."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not AnalysisStatus.PROCESSING


class RiskLevel(str, Enum):
    """Coarse risk category for a document or clause."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        """Derive the level from a 0-100 score (>70 high, >40 medium)."""
        if score > 70:
            return cls.HIGH
        if score > 40:
            return cls.MEDIUM
        return cls.LOW


RiskLevelField = Annotated[RiskLevel, BeforeValidator(coerce_level)]


class Clause(BaseModel):
    """A clause excerpt with its assessment."""
    type: Annotated[str, default_if_none("risk")] = "risk"
    text: NullableText = ""
    risk_level: Annotated[RiskLevel, lenient_level(RiskLevel, RiskLevel.MEDIUM)] = RiskLevel.MEDIUM
    position: NullableInt = 0
    explanation: NullableText = ""
    recommendation: NullableText = ""


NOT_SPECIFIED = "Not specified"
NOT_ANALYZED = "Not analyzed"


class PaymentTerms(BaseModel):
    """Payment terms found in the document."""
    amount: str | None = None
    schedule: str | None = None
    penalties: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(value in (None, "") for value in self.model_dump().values())

    @classmethod
    def placeholder(cls, value: str = NOT_SPECIFIED) -> "PaymentTerms":
        return cls(amount=value, schedule=value, penalties=value)


class ExpiryTerms(BaseModel):
    """Expiry and renewal terms found in the document."""
    date: str | None = None
    notice_period: str | None = None
    auto_renewal: bool | None = None

    @property
    def is_empty(self) -> bool:
        return all(value in (None, "") for value in self.model_dump().values())

    @classmethod
    def placeholder(cls, value: str = NOT_SPECIFIED) -> "ExpiryTerms":
        return cls(date=value, notice_period=value, auto_renewal=None)


class AnalysisResult(BaseModel):
    """The analysis the model returns for a document or a chunk of one.

    Also the shape of a merged multi-chunk analysis.
    """
    plain_summary: NullableText = ""
    risk_level: Annotated[RiskLevelField, default_if_none(RiskLevel.LOW)] = RiskLevel.LOW
    risk_score: ClampedScore = 0
    contract_type: Annotated[str, default_if_none("other")] = "other"
    clauses: Annotated[list[Clause], default_if_none(list)] = Field(default_factory=list)
    compliance_issues: TextList = Field(default_factory=list)
    recommended_actions: TextList = Field(default_factory=list)
    key_obligations: TextList = Field(default_factory=list)
    payment_terms: Annotated[PaymentTerms, default_if_none(PaymentTerms)] = Field(default_factory=PaymentTerms)
    expiry_terms: Annotated[ExpiryTerms, default_if_none(ExpiryTerms)] = Field(default_factory=ExpiryTerms)
    is_fallback: bool = False

    @classmethod
    def fallback(cls) -> "AnalysisResult":
        """Placeholder stored when the model reply cannot be parsed."""
        return cls(
            plain_summary=(
                "Error: Failed to parse AI analysis. The document may be in an "
                "unsupported format or the AI response was invalid."
            ),
            risk_level=RiskLevel.MEDIUM,
            risk_score=50,
            contract_type="other",
            clauses=[],
            compliance_issues=["Analysis parsing failed - manual review recommended"],
            recommended_actions=["Have document reviewed by a legal professional"],
            key_obligations=[],
            payment_terms=PaymentTerms.placeholder(NOT_ANALYZED),
            expiry_terms=ExpiryTerms.placeholder(NOT_ANALYZED),
            is_fallback=True,
        )


class DocumentAnalysis(BaseModel):
    """Tracking record for one uploaded document."""
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    filename: str
    file_type: str
    file_size: int
    file_path: str | None = None
    status: AnalysisStatus = AnalysisStatus.PROCESSING
    plain_summary: str | None = None
    risk_level: RiskLevel | None = None
    risk_score: int | None = None
    contract_type: str | None = None
    clauses: list[Clause] = Field(default_factory=list)
    compliance_issues: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    key_obligations: list[str] = Field(default_factory=list)
    payment_terms: PaymentTerms | None = None
    expiry_terms: ExpiryTerms | None = None
    is_fallback: bool = False
    processing_time_ms: int | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def complete(self, result: AnalysisResult, processing_time_ms: int) -> "DocumentAnalysis":
        """Return the completed copy of this record."""
        return self.model_copy(update={
            **result.model_dump(include=set(AnalysisResult.model_fields)),
            "clauses": list(result.clauses),
            "payment_terms": result.payment_terms,
            "expiry_terms": result.expiry_terms,
            "status": AnalysisStatus.COMPLETED,
            "processing_time_ms": processing_time_ms,
            "error_message": None,
            "updated_at": datetime.now(timezone.utc),
        })

    def fail(self, error_message: str) -> "DocumentAnalysis":
        """Return the failed copy of this record."""
        return self.model_copy(update={
            "status": AnalysisStatus.FAILED,
            "error_message": error_message,
            "updated_at": datetime.now(timezone.utc),
        })

    def analysis_context(self) -> dict[str, Any]:
        """Fields the voice assistant needs about this document."""
        return {
            "summary": self.plain_summary,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "clauses": [clause.model_dump() for clause in self.clauses],
            "obligations": list(self.key_obligations),
            "actions": list(self.recommended_actions),
        }


class DocumentAnalysisResponse(BaseModel):
    """Response schema for an upload."""
    analysis_id: UUID
    file_path: str
    status: AnalysisStatus
