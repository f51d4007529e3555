"""Prompt template for model-based text transcription of binary documents."""

OCR_USER_PROMPT_TEMPLATE = """You are an advanced OCR and document text extraction system. Your task is to extract ALL text content from the provided document with maximum accuracy.

CRITICAL REQUIREMENTS:
- Extract EVERY word, number, and character from the document
- Preserve ALL formatting, line breaks, and structure
- Separate paragraphs with a blank line
- Include headers, footers, footnotes, and annotations
- Do NOT summarize, paraphrase, or skip ANY content
- Return ONLY the extracted text with no additional commentary
- Maintain original document order and layout
- Extract text from ALL pages

Document type: {content_type}
Document (base64 encoded): {encoded_document}"""


def format_ocr_prompt(encoded_document: str, content_type: str) -> str:
    """Format the transcription prompt for a base64-encoded document."""
    return OCR_USER_PROMPT_TEMPLATE.format(
        content_type=content_type or "application/octet-stream",
        encoded_document=encoded_document,
    )
