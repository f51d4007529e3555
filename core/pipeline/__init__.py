"""Orchestration of the agents against storage."""

from .document_processor import DocumentProcessor, expire_if_stale, is_stale
from .services import AssistantService, ThreatScanService

__all__ = [
    "AssistantService",
    "DocumentProcessor",
    "ThreatScanService",
    "expire_if_stale",
    "is_stale",
]
