"""Prompt templates for the Voice Assistant."""

import json
from typing import Any

VOICE_ASSISTANT_SYSTEM_PROMPT = """You are Aurora, a legal AI voice assistant. You help users understand legal documents in plain language.
Be conversational, clear, and concise. Explain risks and provide actionable recommendations.
When discussing high-risk clauses, explain why they're risky and what the user should do.
Keep responses under 100 words for voice delivery."""


VOICE_ASSISTANT_USER_PROMPT_TEMPLATE = """Based on this document analysis:
{context}

User question: {query}"""


def format_analysis_context(
    summary: str | None,
    risk_level: str | None,
    clauses: list[Any],
    obligations: list[Any],
    actions: list[Any],
) -> str:
    """Render the analysis fields the assistant answers from."""
    return (
        f"Document Summary: {summary or 'Not available'}\n"
        f"Risk Level: {risk_level or 'Not assessed'}\n"
        f"Key Clauses: {json.dumps(clauses or [], default=str)}\n"
        f"Obligations: {json.dumps(obligations or [], default=str)}\n"
        f"Recommended Actions: {json.dumps(actions or [], default=str)}"
    )


def format_voice_assistant_prompt(query: str, context: str) -> str:
    """Format the user prompt for one question."""
    return VOICE_ASSISTANT_USER_PROMPT_TEMPLATE.format(context=context, query=query)
