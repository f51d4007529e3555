"""Prompt templates for the model-backed agents."""

from core.agents.prompts.document_analysis_prompt import (
    DOCUMENT_ANALYSIS_SYSTEM_PROMPT,
    DOCUMENT_ANALYSIS_USER_PROMPT_TEMPLATE,
    CHUNK_ANALYSIS_USER_PROMPT_TEMPLATE,
    format_document_analysis_prompt,
    format_chunk_analysis_prompt,
)
from core.agents.prompts.ocr_prompt import (
    OCR_USER_PROMPT_TEMPLATE,
    format_ocr_prompt,
)
from core.agents.prompts.threat_detection_prompt import (
    THREAT_DETECTION_SYSTEM_PROMPT,
    THREAT_DETECTION_USER_PROMPT_TEMPLATE,
    format_threat_detection_prompt,
)
from core.agents.prompts.voice_assistant_prompt import (
    VOICE_ASSISTANT_SYSTEM_PROMPT,
    VOICE_ASSISTANT_USER_PROMPT_TEMPLATE,
    format_analysis_context,
    format_voice_assistant_prompt,
)

__all__ = [
    "DOCUMENT_ANALYSIS_SYSTEM_PROMPT",
    "DOCUMENT_ANALYSIS_USER_PROMPT_TEMPLATE",
    "CHUNK_ANALYSIS_USER_PROMPT_TEMPLATE",
    "format_document_analysis_prompt",
    "format_chunk_analysis_prompt",
    "OCR_USER_PROMPT_TEMPLATE",
    "format_ocr_prompt",
    "THREAT_DETECTION_SYSTEM_PROMPT",
    "THREAT_DETECTION_USER_PROMPT_TEMPLATE",
    "format_threat_detection_prompt",
    "VOICE_ASSISTANT_SYSTEM_PROMPT",
    "VOICE_ASSISTANT_USER_PROMPT_TEMPLATE",
    "format_analysis_context",
    "format_voice_assistant_prompt",
]
