"""Chat message and voice query models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One turn of the follow-up conversation about a document."""
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    document_id: UUID
    role: ChatRole
    content: str
    is_voice: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AnalysisContext(BaseModel):
    """The slice of an analysis the assistant answers from."""
    summary: str | None = None
    risk_level: str | None = None
    clauses: list[Any] = Field(default_factory=list)
    obligations: list[Any] = Field(default_factory=list)
    actions: list[Any] = Field(default_factory=list)


class VoiceQueryRequest(BaseModel):
    """Request body for a voice assistant question."""
    query: str
    analysis_id: UUID
    analysis_data: AnalysisContext = Field(default_factory=AnalysisContext)


class VoiceQueryResponse(BaseModel):
    response: str
