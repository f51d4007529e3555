"""Model-backed agents.

Each agent is stateless: it formats a prompt, makes one model call (or one
per chunk) and parses the reply into a typed result.
"""

from core.agents.document_analyzer import AnalyzerConfig, DocumentAnalyzer
from core.agents.threat_detector import ThreatDetectionResult, ThreatDetector
from core.agents.voice_assistant import VoiceAssistant

__all__ = [
    "AnalyzerConfig",
    "DocumentAnalyzer",
    "ThreatDetectionResult",
    "ThreatDetector",
    "VoiceAssistant",
]
