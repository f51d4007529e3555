"""Text extraction for uploaded documents.

Plain text is decoded directly. PDFs are read with PyMuPDF first; when a PDF
has no text layer (a scan) or the file is a Word document, the whole file is
base64-encoded and sent to the OCR model with a transcription prompt.
"""

import base64
import logging
import re
from dataclasses import dataclass, field
from enum import Enum

import fitz  # PyMuPDF

from app.config import get_settings
from core.agents.prompts.ocr_prompt import format_ocr_prompt
from core.exceptions import ContentValidationError
from core.llm_client import ModelClient, get_model_client

logger = logging.getLogger("aurora.ingestion")


class ExtractionMethod(str, Enum):
    """How the text of a document was obtained."""
    PLAIN_TEXT = "plain_text"
    PDF_TEXT_LAYER = "pdf_text_layer"
    MODEL_TRANSCRIPTION = "model_transcription"


@dataclass
class PageContent:
    """Represents extracted content from a single PDF page."""
    page_number: int
    text: str
    word_count: int


@dataclass
class DocumentContent:
    """Extracted text of a whole document."""
    filename: str
    raw_text: str
    method: ExtractionMethod
    page_count: int = 0
    pages: list[PageContent] = field(default_factory=list)

    @property
    def total_word_count(self) -> int:
        return len(self.raw_text.split())

    @property
    def is_empty(self) -> bool:
        """Check if the document has no extractable text."""
        return self.total_word_count == 0


def clean_text(text: str) -> str:
    """Normalize whitespace while keeping paragraph breaks.

    Args:
        text: Raw extracted text.

    Returns:
        Text with at most one blank line between paragraphs and no runs of spaces.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    # Collapse 3+ newlines to a paragraph break
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


class DocumentTextExtractor:
    """Extracts the text of an uploaded file for analysis."""

    OCR_MAX_TOKENS = 100_000
    OCR_TEMPERATURE = 0.1

    def __init__(self, model_client: ModelClient | None = None) -> None:
        self._model_client = model_client

    @property
    def model_client(self) -> ModelClient:
        if self._model_client is None:
            self._model_client = get_model_client()
        return self._model_client

    def extract(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        reference_id: str = "",
    ) -> DocumentContent:
        """Extract text from file bytes.

        Args:
            data: Raw file bytes.
            filename: Name of the source file.
            content_type: Validated MIME type.
            reference_id: Analysis id used to label model calls.

        Returns:
            DocumentContent with the cleaned text.

        Raises:
            ContentValidationError: If no text could be obtained.
            UpstreamError: If model transcription fails.
        """
        if content_type == "text/plain" or filename.lower().endswith(".txt"):
            content = DocumentContent(
                filename=filename,
                raw_text=clean_text(self.decode_text(data)),
                method=ExtractionMethod.PLAIN_TEXT,
            )
            logger.info(f"Text file {filename} read directly ({len(content.raw_text)} chars)")
        else:
            content = None
            if content_type == "application/pdf":
                content = self.extract_pdf_text(data, filename)
                if content.is_empty:
                    logger.info(f"{filename} has no text layer, falling back to model transcription")
                    content = None
            if content is None:
                content = self.transcribe(data, filename, content_type, reference_id)

        if content.is_empty:
            raise ContentValidationError(f"No text could be extracted from {filename}")
        return content

    @staticmethod
    def decode_text(data: bytes) -> str:
        for encoding in ("utf-8-sig", "cp1252"):
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        return data.decode("utf-8", errors="replace")

    def extract_pdf_text(self, pdf_bytes: bytes, filename: str) -> DocumentContent:
        """Read the text layer of a PDF with PyMuPDF."""
        pages: list[PageContent] = []
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            for page_num in range(len(doc)):
                text = clean_text(doc[page_num].get_text("text"))
                pages.append(PageContent(
                    page_number=page_num + 1,  # 1-indexed
                    text=text,
                    word_count=len(text.split()),
                ))
        finally:
            doc.close()

        return DocumentContent(
            filename=filename,
            raw_text="\n\n".join(page.text for page in pages if page.text),
            method=ExtractionMethod.PDF_TEXT_LAYER,
            page_count=len(pages),
            pages=pages,
        )

    def transcribe(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        reference_id: str = "",
    ) -> DocumentContent:
        """Ask the OCR model to transcribe a binary document."""
        encoded = base64.b64encode(data).decode("ascii")
        logger.info(f"Transcribing {filename} with model ({len(encoded)} base64 chars)")

        reply = self.model_client.complete(
            operation="OCR",
            reference_id=f"{reference_id}:ocr" if reference_id else "ocr",
            model=get_settings().ocr_model,
            user_prompt=format_ocr_prompt(encoded, content_type),
            max_tokens=self.OCR_MAX_TOKENS,
            temperature=self.OCR_TEMPERATURE,
        )
        return DocumentContent(
            filename=filename,
            raw_text=clean_text(reply.content),
            method=ExtractionMethod.MODEL_TRANSCRIPTION,
        )


# Global instance for dependency injection
text_extractor = DocumentTextExtractor()
